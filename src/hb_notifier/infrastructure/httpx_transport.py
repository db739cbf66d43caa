"""httpx transport — delivers a notice request and classifies the reply."""

from __future__ import annotations

import asyncio
import logging
from datetime import timedelta

import httpx

from hb_notifier.domain.entities import ClientConfig, DeliveryOutcome, OutcomeKind
from hb_notifier.domain.exceptions import ClientConstructionError
from hb_notifier.domain.ports.http_sender import HttpSender

logger = logging.getLogger(__name__)

_STATUS_OUTCOMES: dict[int, OutcomeKind] = {
    401: OutcomeKind.UNAUTHORIZED,
    422: OutcomeKind.UNPROCESSABLE,
    429: OutcomeKind.RATE_LIMITED,
    500: OutcomeKind.SERVER_ERROR,
}


def create_http_client(config: ClientConfig) -> httpx.AsyncClient:
    """Build the shared HTTPS client.

    No client-level timeout is set: :func:`deliver` enforces the deadline so
    that a single clock governs the whole exchange.
    """
    try:
        return httpx.AsyncClient(
            timeout=None,
            limits=httpx.Limits(max_connections=config.max_connections),
            follow_redirects=False,
            verify=True,
        )
    except (OSError, ValueError) as exc:
        # ssl.SSLError is an OSError: bad CA bundles surface here.
        raise ClientConstructionError(f"Could not initialise HTTPS transport: {exc}") from exc


def classify_status(status_code: int) -> DeliveryOutcome:
    """Map an HTTP status code to its outcome; first match wins."""
    if 200 <= status_code < 300:
        return DeliveryOutcome.of(OutcomeKind.SUCCESS)
    if 300 <= status_code < 400:
        return DeliveryOutcome.of(OutcomeKind.REDIRECTED)
    kind = _STATUS_OUTCOMES.get(status_code)
    if kind is not None:
        return DeliveryOutcome.of(kind)
    return DeliveryOutcome.unknown_status(status_code)


async def _status_of(http_client: HttpSender, request: httpx.Request) -> int:
    response = await http_client.send(request, stream=True)
    try:
        return response.status_code
    finally:
        await response.aclose()


async def deliver(
    http_client: HttpSender,
    request: httpx.Request,
    timeout: timedelta,
) -> DeliveryOutcome:
    """Send *request* once, racing it against *timeout*.

    On expiry the in-flight send is cancelled; the endpoint may still have
    received the notice.  A response that arrives in time is always
    classified, never discarded.
    """
    seconds = int(timeout.total_seconds())
    try:
        status_code = await asyncio.wait_for(
            _status_of(http_client, request), timeout=timeout.total_seconds()
        )
    except (asyncio.TimeoutError, httpx.TimeoutException):
        logger.debug("Honeybadger request to %s timed out after %ss", request.url, seconds)
        return DeliveryOutcome.timed_out(seconds)
    except (httpx.HTTPError, OSError) as exc:
        # Senders other than httpx surface socket failures as OSError.
        logger.debug("Honeybadger request to %s failed: %s", request.url, exc)
        return DeliveryOutcome.transport_failed(exc)

    logger.debug("Honeybadger API returned status: %s", status_code)
    return classify_status(status_code)
