"""Notice builder — assembles and encodes the payload for the notices API.

Reads the clock, the pid and the process environment; mutates nothing.
"""

from __future__ import annotations

import json
import os
import platform
import time
from collections.abc import Callable, Mapping

import httpx

from hb_notifier.domain.entities import (
    ClientConfig,
    ErrorRecord,
    Notice,
    RequestContext,
    ServerInfo,
)
from hb_notifier.domain.exceptions import NoticeSerializationError
from hb_notifier.domain.value_objects import NOTIFIER, VERSION

USER_AGENT_NAME = "HB-python"


def user_agent(
    system: Callable[[], str] = platform.system,
    release: Callable[[], str] = platform.release,
) -> str:
    """Return ``"<name> <version>; <os-type>/<os-version>"``."""
    return f"{USER_AGENT_NAME} {VERSION}; {system() or 'Unknown'}/{release() or 'unknown'}"


def epoch_seconds(clock: Callable[[], float] = time.time) -> int:
    """Current wall-clock time in whole seconds; 0 if the clock can't be read."""
    try:
        return max(int(clock()), 0)
    except (OSError, OverflowError, ValueError):
        return 0


def _string_mapping(context: Mapping[str, str]) -> dict[str, str]:
    pairs = dict(context)
    for key, value in pairs.items():
        if not isinstance(key, str) or not isinstance(value, str):
            raise NoticeSerializationError(
                f"Context entries must be strings, got {key!r}: {value!r}"
            )
    return pairs


def assemble(
    config: ClientConfig,
    record: ErrorRecord,
    context: Mapping[str, str] | None = None,
    *,
    clock: Callable[[], float] = time.time,
    environ: Mapping[str, str] | None = None,
    pid: int | None = None,
) -> Notice:
    """Stamp host metadata onto *record* and wrap it in a :class:`Notice`."""
    return Notice(
        api_key=config.api_key,
        notifier=NOTIFIER,
        error=record,
        request=RequestContext(
            context=_string_mapping(context) if context is not None else None,
            environment_variables=dict(os.environ if environ is None else environ),
        ),
        server=ServerInfo(
            project_root=config.project_root,
            environment_name=config.environment_name,
            hostname=config.hostname,
            time=epoch_seconds(clock),
            pid=os.getpid() if pid is None else pid,
        ),
    )


def serialize(notice: Notice) -> bytes:
    """Encode *notice* as compact UTF-8 JSON."""
    try:
        document = json.dumps(
            notice.to_payload(),
            ensure_ascii=False,
            allow_nan=False,
            separators=(",", ":"),
        )
        return document.encode("utf-8")
    except (TypeError, ValueError) as exc:
        # UnicodeEncodeError is a ValueError: lone surrogates end up here.
        raise NoticeSerializationError(f"Notice could not be encoded: {exc}") from exc


def build(
    config: ClientConfig,
    record: ErrorRecord,
    context: Mapping[str, str] | None = None,
    *,
    clock: Callable[[], float] = time.time,
    environ: Mapping[str, str] | None = None,
    pid: int | None = None,
) -> bytes:
    """Assemble and serialize a notice in one step."""
    notice = assemble(config, record, context, clock=clock, environ=environ, pid=pid)
    return serialize(notice)


def build_request(config: ClientConfig, user_agent: str, body: bytes) -> httpx.Request:
    """Wrap *body* in the POST request expected by the notices endpoint."""
    try:
        return httpx.Request(
            "POST",
            config.endpoint,
            headers={
                "Accept": "application/json",
                "Content-Type": "application/json",
                "X-API-Key": config.api_key,
                "User-Agent": user_agent,
            },
            content=body,
        )
    except (httpx.InvalidURL, ValueError) as exc:
        raise NoticeSerializationError(
            f"Invalid notice request for endpoint {config.endpoint!r}: {exc}"
        ) from exc
