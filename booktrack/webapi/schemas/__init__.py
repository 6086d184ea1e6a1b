"""Pydantic schemas for the FastAPI web backend."""

from __future__ import annotations

from .auth import (
    LoginRequestPayload,
    LoginResponse,
    RegistrationRequestPayload,
    RegistrationResponse,
    SessionStatusResponse,
    SessionUserPayload,
)
from .circulation import (
    BorrowRequestPayload,
    BorrowResponse,
    BorrowingListResponse,
    BorrowingResponse,
    ReservationCreatedResponse,
    ReservationListResponse,
    ReservationRequestPayload,
    ReservationResponse,
    ReturnRequestPayload,
    ReturnResponse,
)
from .common import MessageResponse
from .library import (
    BookCreatedResponse,
    BookListResponse,
    BookResponse,
    BookSearchResponse,
    BookmarkCreatedResponse,
    BookmarkListResponse,
)
from .users import (
    DashboardResponse,
    NotificationListResponse,
    NotificationResponse,
    SystemLogListResponse,
    SystemLogResponse,
    UserListResponse,
    UserResponse,
)

__all__ = [
    "BookCreatedResponse",
    "BookListResponse",
    "BookResponse",
    "BookSearchResponse",
    "BookmarkCreatedResponse",
    "BookmarkListResponse",
    "BorrowRequestPayload",
    "BorrowResponse",
    "BorrowingListResponse",
    "BorrowingResponse",
    "DashboardResponse",
    "LoginRequestPayload",
    "LoginResponse",
    "MessageResponse",
    "NotificationListResponse",
    "NotificationResponse",
    "RegistrationRequestPayload",
    "RegistrationResponse",
    "ReservationCreatedResponse",
    "ReservationListResponse",
    "ReservationRequestPayload",
    "ReservationResponse",
    "ReturnRequestPayload",
    "ReturnResponse",
    "SessionStatusResponse",
    "SessionUserPayload",
    "SystemLogListResponse",
    "SystemLogResponse",
    "UserListResponse",
    "UserResponse",
]
