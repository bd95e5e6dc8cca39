"""Exception hierarchy shared by the store, the services and the HTTP layer."""

from __future__ import annotations

from typing import Sequence


class TelemetryError(Exception):
    """Base class; ``error`` is the short label used in the JSON envelope."""

    error = "Request failed"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class Unauthorized(TelemetryError):
    error = "Unauthorized - Invalid API key"


class MissingFields(TelemetryError):
    error = "Missing required fields"

    def __init__(self, fields: Sequence[str]) -> None:
        self.fields = list(fields)
        super().__init__(f"Missing required fields: {', '.join(self.fields)}")


class InvalidType(TelemetryError):
    """Raised when any numeric field fails coercion.

    The message addresses the four fields collectively; ``fields`` lists the
    ones that actually failed.
    """

    error = "Invalid data types"

    def __init__(self, fields: Sequence[str]) -> None:
        self.fields = list(fields)
        super().__init__("Invalid data types - all values must be numbers")


class NotFound(TelemetryError):
    error = "No data available"


class StorageFailure(TelemetryError):
    error = "Storage failure"
