"""Domain exception hierarchy.

Construction and serialization failures are raised directly.  Every delivery
failure carries the :class:`DeliveryOutcome` it was derived from, so callers
can branch on either the exception type or ``exc.outcome.kind``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from hb_notifier.domain.entities import DeliveryOutcome


class HoneybadgerError(Exception):
    """Base exception for the entire library."""


# ── Setup errors ────────────────────────────────────────────────────────────


class ClientConstructionError(HoneybadgerError):
    """The HTTPS transport could not be initialised (fatal)."""


class NoticeSerializationError(HoneybadgerError):
    """The notice or its HTTP request could not be encoded."""


# ── Delivery errors ─────────────────────────────────────────────────────────


class DeliveryError(HoneybadgerError):
    """A notice was built but the endpoint did not accept it."""

    def __init__(self, outcome: DeliveryOutcome) -> None:
        super().__init__(outcome.describe())
        self.outcome = outcome


class RedirectionError(DeliveryError):
    """The endpoint replied with a redirect (3xx)."""


class UnauthorizedError(DeliveryError):
    """API key is incorrect or the account is deactivated (401)."""


class NotProcessedError(DeliveryError):
    """The payload couldn't be processed (422)."""


class RateExceededError(DeliveryError):
    """Honeybadger rate limit exceeded (429)."""


class ServerError(DeliveryError):
    """The API replied with '500 Internal Server Error'."""


class NoticeTimeoutError(DeliveryError):
    """No response arrived within the configured timeout."""

    @property
    def seconds(self) -> int | None:
        return self.outcome.seconds


class TransportError(DeliveryError):
    """The request failed below HTTP (connection refused, TLS, DNS...)."""


class UnknownStatusCodeError(DeliveryError):
    """The endpoint answered with a status code outside the known set."""

    @property
    def status_code(self) -> int | None:
        return self.outcome.status_code
