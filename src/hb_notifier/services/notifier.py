"""Honeybadger client — the single entry point for reporting an error.

``notify`` composes the pipeline::

    error → normalize → build → build_request → deliver → outcome

Only a ``SUCCESS`` outcome returns normally; everything else is raised as the
matching :class:`DeliveryError` subclass.  Exactly one request is made per
call; retrying is left to the caller.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from types import TracebackType

import httpx

from hb_notifier.domain.entities import ClientConfig, DeliveryOutcome, OutcomeKind
from hb_notifier.domain.exceptions import (
    DeliveryError,
    NoticeTimeoutError,
    NotProcessedError,
    RateExceededError,
    RedirectionError,
    ServerError,
    TransportError,
    UnauthorizedError,
    UnknownStatusCodeError,
)
from hb_notifier.domain.ports.http_sender import HttpSender
from hb_notifier.infrastructure.httpx_transport import create_http_client, deliver
from hb_notifier.services.error_normalizer import normalize
from hb_notifier.services.notice_builder import build, build_request, user_agent

logger = logging.getLogger(__name__)

_OUTCOME_ERRORS: dict[OutcomeKind, type[DeliveryError]] = {
    OutcomeKind.REDIRECTED: RedirectionError,
    OutcomeKind.UNAUTHORIZED: UnauthorizedError,
    OutcomeKind.UNPROCESSABLE: NotProcessedError,
    OutcomeKind.RATE_LIMITED: RateExceededError,
    OutcomeKind.SERVER_ERROR: ServerError,
    OutcomeKind.TIMED_OUT: NoticeTimeoutError,
    OutcomeKind.TRANSPORT_FAILED: TransportError,
    OutcomeKind.UNKNOWN_STATUS: UnknownStatusCodeError,
}


def raise_for_outcome(outcome: DeliveryOutcome) -> None:
    """Raise the :class:`DeliveryError` matching *outcome*, unless it succeeded."""
    if outcome.is_success:
        return
    exc = _OUTCOME_ERRORS[outcome.kind](outcome)
    if outcome.cause is not None:
        raise exc from outcome.cause
    raise exc


class Honeybadger:
    """Reusable, concurrency-safe notifier.

    Parameters
    ----------
    config:
        Immutable settings, usually from :class:`ConfigBuilder`.
    http_client:
        Optional sender to use instead of a freshly built
        ``httpx.AsyncClient``.  An injected client is never closed by
        :meth:`aclose`.
    """

    def __init__(self, config: ClientConfig, http_client: HttpSender | None = None) -> None:
        self._config = config
        self._user_agent = user_agent()
        self._owns_client = http_client is None
        self._client: HttpSender = (
            http_client if http_client is not None else create_http_client(config)
        )
        logger.debug(
            "Constructed honeybadger instance with configuration: %r",
            config,
        )

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def user_agent(self) -> str:
        return self._user_agent

    async def notify(self, error: object, context: Mapping[str, str] | None = None) -> None:
        """Report *error* to Honeybadger.

        *context* is attached verbatim as the notice's request context, e.g.
        ``{"request_id": "..."}``.

        Raises
        ------
        NoticeSerializationError
            The notice could not be encoded (non-string context values, lone
            surrogates, a malformed endpoint URL).
        DeliveryError
            Any outcome other than success; see its subclasses.
        """
        outcome = await self.send(error, context)
        raise_for_outcome(outcome)

    async def send(
        self, error: object, context: Mapping[str, str] | None = None
    ) -> DeliveryOutcome:
        """Like :meth:`notify`, but return the outcome instead of raising on it."""
        record = normalize(error)
        body = build(self._config, record, context)
        request = build_request(self._config, self._user_agent, body)
        return await deliver(self._client, request, self._config.timeout)

    async def aclose(self) -> None:
        """Release the HTTP pool if this client created it."""
        if self._owns_client and isinstance(self._client, httpx.AsyncClient):
            await self._client.aclose()

    async def __aenter__(self) -> Honeybadger:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()
