"""Domain entities — pure data structures with no external dependencies."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from typing import Any

from hb_notifier.domain.value_objects import NotifierInfo


@dataclass(frozen=True, slots=True)
class StackFrame:
    """One traceback entry, innermost frames first."""

    line: str | None = None
    file: str | None = None
    symbol: str | None = None

    def to_payload(self) -> dict[str, str | None]:
        return {"number": self.line, "file": self.file, "method": self.symbol}


@dataclass(frozen=True, slots=True)
class ErrorRecord:
    """Canonical, serializable form of a single error and its causes.

    ``causes`` is ``None`` when the source has no chain at all; an empty
    tuple would claim the chain was walked and found nothing.
    """

    class_name: str
    message: str | None = None
    causes: tuple[ErrorRecord, ...] | None = None
    frames: tuple[StackFrame, ...] = ()

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "class": self.class_name,
            "message": self.message,
            "causes": (
                [cause.to_payload() for cause in self.causes]
                if self.causes is not None
                else None
            ),
        }
        if self.frames:
            payload["backtrace"] = [frame.to_payload() for frame in self.frames]
        return payload


@dataclass(frozen=True, slots=True)
class RequestContext:
    """Caller annotations plus the process environment at build time."""

    context: Mapping[str, str] | None
    environment_variables: Mapping[str, str] = field(default_factory=dict)

    def to_payload(self) -> dict[str, Any]:
        return {
            "context": dict(self.context) if self.context is not None else None,
            "cgi_data": dict(self.environment_variables),
        }


@dataclass(frozen=True, slots=True)
class ServerInfo:
    """Host metadata stamped on each notice."""

    project_root: str
    environment_name: str
    hostname: str
    time: int
    pid: int

    def to_payload(self) -> dict[str, Any]:
        return {
            "project_root": self.project_root,
            "environment_name": self.environment_name,
            "hostname": self.hostname,
            "time": self.time,
            "pid": self.pid,
        }


@dataclass(frozen=True, slots=True)
class Notice:
    """The full payload for one reported error."""

    api_key: str = field(repr=False)
    notifier: NotifierInfo
    error: ErrorRecord
    request: RequestContext
    server: ServerInfo

    def to_payload(self) -> dict[str, Any]:
        return {
            "api_key": self.api_key,
            "notifier": self.notifier.to_payload(),
            "error": self.error.to_payload(),
            "request": self.request.to_payload(),
            "server": self.server.to_payload(),
        }


@dataclass(frozen=True, slots=True)
class ClientConfig:
    """Immutable settings owned by one client; built by ``ConfigBuilder``."""

    api_key: str = field(repr=False)
    project_root: str
    environment_name: str
    hostname: str
    endpoint: str
    timeout: timedelta
    max_connections: int = 4


# ── Delivery outcome ────────────────────────────────────────────────────────


class OutcomeKind(str, Enum):
    """Classification of one delivery attempt."""

    SUCCESS = "success"
    REDIRECTED = "redirected"
    UNAUTHORIZED = "unauthorized"
    RATE_LIMITED = "rate_limited"
    UNPROCESSABLE = "unprocessable"
    SERVER_ERROR = "server_error"
    TIMED_OUT = "timed_out"
    TRANSPORT_FAILED = "transport_failed"
    UNKNOWN_STATUS = "unknown_status"


_DESCRIPTIONS = {
    OutcomeKind.SUCCESS: "Notice accepted",
    OutcomeKind.REDIRECTED: "The endpoint replied with a redirect",
    OutcomeKind.UNAUTHORIZED: "API key is incorrect or the account is deactivated",
    OutcomeKind.RATE_LIMITED: "Honeybadger rate limit exceeded",
    OutcomeKind.UNPROCESSABLE: "The payload couldn't be processed",
    OutcomeKind.SERVER_ERROR: (
        "The honeybadger API replied with a '500 Internal Server Error'"
    ),
}


@dataclass(frozen=True, slots=True)
class DeliveryOutcome:
    """Tagged result of a delivery.

    Only the field matching ``kind`` is set: ``seconds`` for ``TIMED_OUT``,
    ``status_code`` for ``UNKNOWN_STATUS``, ``cause`` for ``TRANSPORT_FAILED``.
    """

    kind: OutcomeKind
    seconds: int | None = None
    status_code: int | None = None
    cause: BaseException | None = field(default=None, compare=False)

    @classmethod
    def of(cls, kind: OutcomeKind) -> DeliveryOutcome:
        return cls(kind=kind)

    @classmethod
    def timed_out(cls, seconds: int) -> DeliveryOutcome:
        return cls(kind=OutcomeKind.TIMED_OUT, seconds=seconds)

    @classmethod
    def transport_failed(cls, cause: BaseException) -> DeliveryOutcome:
        return cls(kind=OutcomeKind.TRANSPORT_FAILED, cause=cause)

    @classmethod
    def unknown_status(cls, status_code: int) -> DeliveryOutcome:
        return cls(kind=OutcomeKind.UNKNOWN_STATUS, status_code=status_code)

    @property
    def is_success(self) -> bool:
        return self.kind is OutcomeKind.SUCCESS

    def describe(self) -> str:
        """Human-readable one-liner, suitable for logs and exception text."""
        if self.kind is OutcomeKind.TIMED_OUT:
            return f"Honeybadger timed out after {self.seconds} seconds"
        if self.kind is OutcomeKind.UNKNOWN_STATUS:
            return (
                "Honeybadger responded with an unknown status code: "
                f"{self.status_code}"
            )
        if self.kind is OutcomeKind.TRANSPORT_FAILED:
            return f"Could not reach Honeybadger: {self.cause}"
        return _DESCRIPTIONS[self.kind]
