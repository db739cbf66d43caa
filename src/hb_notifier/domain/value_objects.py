"""Value objects — process-wide constants identifying this client."""

from __future__ import annotations

from dataclasses import dataclass

VERSION = "0.4.0"


@dataclass(frozen=True, slots=True)
class NotifierInfo:
    """Identity block sent with every notice.

    The receiving service uses it to tell which client library produced a
    report; it never changes for the lifetime of the process.
    """

    name: str
    url: str
    version: str

    def to_payload(self) -> dict[str, str]:
        return {"name": self.name, "url": self.url, "version": self.version}


NOTIFIER = NotifierInfo(
    name="honeybadger",
    url="https://github.com/hb-notifier/hb-notifier",
    version=VERSION,
)
