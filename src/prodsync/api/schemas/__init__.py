"""Pydantic models for API I/O."""

from .sync import ErrorResponse, SyncResponse

__all__ = [
    "ErrorResponse",
    "SyncResponse",
]
