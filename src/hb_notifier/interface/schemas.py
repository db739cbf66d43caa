"""Pydantic response DTOs for the FastAPI integration."""

from __future__ import annotations

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error envelope returned for reported exceptions."""

    status: str = "error"
    message: str
