"""FastAPI integration — report unhandled exceptions to Honeybadger.

The handler answers with the standard ``{"status": "error", "message": "..."}``
envelope whether or not the notice was delivered; a delivery failure is
logged here, at the edge, and never hides the original error response.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from hb_notifier.domain.exceptions import HoneybadgerError
from hb_notifier.interface.schemas import ErrorResponse
from hb_notifier.services.notifier import Honeybadger

logger = logging.getLogger(__name__)

GENERIC_MESSAGE = "An unexpected error occurred. Please try again later."


def request_context(request: Request) -> dict[str, str]:
    """Context annotations describing the failing request."""
    context = {
        "path": request.url.path,
        "method": request.method,
    }
    if request.client is not None:
        context["client"] = request.client.host
    return context


def register_error_reporting(app: FastAPI, notifier: Honeybadger) -> None:
    """Attach a catch-all exception handler that notifies *notifier*."""

    @app.exception_handler(Exception)
    async def report_exception(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "Unhandled exception on %s %s", request.method, request.url.path, exc_info=exc
        )
        try:
            await notifier.notify(exc, request_context(request))
        except HoneybadgerError as delivery_exc:
            logger.warning("Could not report exception to Honeybadger: %s", delivery_exc)
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(message=GENERIC_MESSAGE).model_dump(),
        )
