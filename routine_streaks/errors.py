"""Exception types raised while reading completion history.

Every error carries a machine-readable ``code`` so callers can branch on it
without parsing the message. They all subclass ``ValueError``.
"""

from __future__ import annotations

from typing import Any


class RoutineStreaksError(ValueError):
    """Base class for all package errors."""

    code: str = "ROUTINE_STREAKS_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class InvalidTimestamp(RoutineStreaksError):
    code = "INVALID_TIMESTAMP"

    def __init__(self, value: Any, location: str | None = None):
        prefix = f"{location}: " if location else ""
        details: dict[str, Any] = {"value": repr(value)}
        if location:
            details["location"] = location
        super().__init__(
            message=f"{prefix}malformed timestamp {value!r}",
            details=details,
        )


class InvalidRecord(RoutineStreaksError):
    code = "INVALID_RECORD"

    def __init__(self, location: str, reason: str):
        super().__init__(
            message=f"{location}: {reason}",
            details={"location": location, "reason": reason},
        )
