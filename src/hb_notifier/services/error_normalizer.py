"""Error normalizer — turns any reportable error into an :class:`ErrorRecord`.

Three source shapes are supported, and only these three:

* **chained**: a regular exception; its ``__cause__`` / ``__context__``
  links form the cause chain and ``__traceback__`` supplies frames;
* **aggregate**: an exception group; its label and flat list of
  sub-exceptions become one level of causes;
* **opaque**: anything else (a string, an arbitrary object); only its
  display and debug renderings are available.

Normalization never raises: missing data degrades to ``None`` or ``()``.
"""

from __future__ import annotations

import traceback
from collections.abc import Iterator
from types import TracebackType

from hb_notifier.domain.entities import ErrorRecord, StackFrame


def normalize(error: object) -> ErrorRecord:
    """Build the canonical record for *error*."""
    if isinstance(error, BaseExceptionGroup):
        return _from_group(error)
    if isinstance(error, BaseException):
        return _from_chained(error)
    return _from_opaque(error)


# ── Chained exceptions ──────────────────────────────────────────────────────


def iter_chain(error: BaseException) -> Iterator[BaseException]:
    """Yield *error* followed by each exception that led to it."""
    seen: set[int] = set()
    current: BaseException | None = error
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = _next_cause(current)


def _next_cause(error: BaseException) -> BaseException | None:
    if error.__cause__ is not None:
        return error.__cause__
    if error.__suppress_context__:
        return None
    return error.__context__


def _from_chained(error: BaseException) -> ErrorRecord:
    chain = list(iter_chain(error))
    lines = [f"Error: {_display(chain[0])}"]
    lines.extend(f"Caused by: {_display(link)}" for link in chain[1:])
    return ErrorRecord(
        class_name=_describe(error),
        message="\n".join(lines),
        causes=tuple(_link_record(link, frozenset()) for link in chain),
        frames=_frames(error.__traceback__),
    )


def _link_record(error: BaseException, visited: frozenset[int]) -> ErrorRecord:
    # Each link nests its own next cause, mirroring the single-cause chain.
    visited = visited | {id(error)}
    nxt = _next_cause(error)
    causes = None
    if nxt is not None and id(nxt) not in visited:
        causes = (_link_record(nxt, visited),)
    return ErrorRecord(class_name=_describe(error), message=None, causes=causes)


def _frames(tb: TracebackType | None) -> tuple[StackFrame, ...]:
    if tb is None:
        return ()
    frames = []
    for summary in reversed(traceback.extract_tb(tb)):
        if not summary.name:
            continue
        frames.append(
            StackFrame(
                line=str(summary.lineno) if summary.lineno is not None else None,
                file=summary.filename or None,
                symbol=summary.name,
            )
        )
    return tuple(frames)


# ── Exception groups ────────────────────────────────────────────────────────


def _from_group(group: BaseExceptionGroup) -> ErrorRecord:
    return ErrorRecord(
        class_name=_display(group),
        message=_debug(group),
        causes=tuple(
            ErrorRecord(class_name=_display(sub), message=_debug(sub), causes=None)
            for sub in group.exceptions
        ),
    )


# ── Anything else ───────────────────────────────────────────────────────────


def _from_opaque(error: object) -> ErrorRecord:
    return ErrorRecord(class_name=_display(error), message=_debug(error), causes=None)


# ── Renderings ──────────────────────────────────────────────────────────────


def _describe(error: BaseException) -> str:
    return type(error).__name__


def _display(error: object) -> str:
    try:
        text = str(error)
    except Exception:
        text = ""
    return text or type(error).__name__


def _debug(error: object) -> str:
    try:
        return repr(error)
    except Exception:
        return type(error).__name__
