"""
Error taxonomy shared by the row store, the admin guard and the routers.

Every error carries the HTTP status it maps to; main.py renders all of
them as {"ok": false, "message": ...}.
"""
from __future__ import annotations

from typing import Iterable, Optional


class ApiError(Exception):
    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ApiError):
    """A required field is missing or a value is outside its allowed set."""

    status_code = 400
    default_message = "Invalid request"

    def __init__(self, message: Optional[str] = None, fields: Iterable[str] = ()) -> None:
        self.fields = list(fields)
        super().__init__(message)

    @classmethod
    def missing(cls, fields: Iterable[str]) -> "ValidationError":
        names = list(fields)
        return cls(f"Missing required fields: {', '.join(names)}", fields=names)

    @classmethod
    def invalid_choice(cls, field: str, value: str, allowed: Iterable[str]) -> "ValidationError":
        return cls(
            f"Invalid {field} '{value}'. Allowed: {', '.join(allowed)}",
            fields=[field],
        )


class Unauthorized(ApiError):
    status_code = 401
    default_message = "Unauthorized (missing/invalid token)"


class NotFound(ApiError):
    status_code = 404
    default_message = "Not found"


class MethodNotAllowed(ApiError):
    status_code = 405
    default_message = "Method not allowed"


class ServerError(ApiError):
    """Remote Sheets failure or missing environment configuration."""

    status_code = 500
    default_message = "Internal server error"
