"""Port: HTTP sender — defined by the domain, implemented by infrastructure."""

from __future__ import annotations

from typing import Protocol

import httpx


class HttpSender(Protocol):
    """Anything that can send a prepared request; ``httpx.AsyncClient`` fits."""

    async def send(self, request: httpx.Request, *, stream: bool = False) -> httpx.Response:
        """Send *request* and return the response once its status line arrives."""
        ...
