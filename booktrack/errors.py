"""Domain errors raised by the services and mapped to HTTP responses."""

from __future__ import annotations

from typing import Optional


class BookTrackError(RuntimeError):
    """Base class for failures that should reach the client as a JSON message."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(BookTrackError):
    status_code = 400
    default_message = "Invalid request"


class BookUnavailable(BookTrackError):
    status_code = 400
    default_message = "Book is not available for borrowing"


class DuplicateBorrow(BookTrackError):
    status_code = 400
    default_message = "You already have this book borrowed"


class Unauthenticated(BookTrackError):
    status_code = 401
    default_message = "Authentication required"


class InvalidCredentials(Unauthenticated):
    # Unknown email and wrong password share this message.
    default_message = "Invalid email or password"


class Forbidden(BookTrackError):
    status_code = 403
    default_message = "Access denied"


class AccountInactive(Forbidden):
    default_message = "Account is suspended or inactive"


class NotFound(BookTrackError):
    status_code = 404
    default_message = "Resource not found"


class Conflict(BookTrackError):
    status_code = 409
    default_message = "Conflict"


class EmailTaken(Conflict):
    default_message = "Email already registered"


class ServerError(BookTrackError):
    status_code = 500


__all__ = [
    "AccountInactive",
    "BookTrackError",
    "BookUnavailable",
    "Conflict",
    "DuplicateBorrow",
    "EmailTaken",
    "Forbidden",
    "InvalidCredentials",
    "NotFound",
    "ServerError",
    "Unauthenticated",
    "ValidationError",
]
