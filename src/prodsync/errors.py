"""Failures raised by the sync pipeline.

Every class carries the HTTP status the endpoint answers with. Row-level
problems (unknown team, bad date) are not errors; they are counted as
ignored rows.
"""

from __future__ import annotations


class SyncError(Exception):
    """Base class for pipeline failures."""

    status_code = 500

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.hint = hint

    def to_payload(self) -> dict:
        payload: dict = {"success": False, "error": self.message}
        if self.hint:
            payload["hint"] = self.hint
        return payload


class ConfigurationError(SyncError):
    """Missing or invalid runtime configuration."""


class PayloadError(SyncError):
    """The request body cannot be turned into rows."""

    status_code = 400


class EmptyPayload(PayloadError):
    def __init__(self) -> None:
        super().__init__(
            "Request body is empty",
            hint="Make sure to set Content-Type: application/json and send JSON in the body",
        )


class UnparsablePayload(PayloadError):
    def __init__(self, preview: str) -> None:
        super().__init__("Invalid JSON in request body", hint="Could not parse JSON data")
        self.preview = preview


class NoRowsFound(PayloadError):
    def __init__(self) -> None:
        super().__init__(
            "No data rows found in request",
            hint="Expected firstTableRows array or results[0].tables[0].rows",
        )


class StorageFailure(SyncError):
    """The data store rejected a read, delete or upsert."""
