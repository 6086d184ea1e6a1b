"""Dependency wiring for the FastAPI application."""

from __future__ import annotations

from functools import lru_cache

from fastapi import Depends, Header, Request

from ..errors import Unauthenticated
from ..services.book_service import BookService
from ..services.bookmark_service import BookmarkService
from ..services.borrowing_service import BorrowingService
from ..services.dashboard_service import DashboardService
from ..services.notification_service import NotificationService
from ..services.reservation_service import ReservationService
from ..services.system_log_service import SystemLogService
from ..services.user_service import UserService
from ..settings import BookTrackSettings, get_settings
from ..user_management import AuthService, RequestUserContext, SessionManager, UserStore


def _extract_bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() == "bearer" and token:
        return token.strip() or None
    return authorization.strip() or None


@lru_cache
def get_auth_service() -> AuthService:
    """Return a configured :class:`AuthService` instance."""

    settings = get_settings()
    session_manager = SessionManager(ttl_hours=settings.session_ttl_hours)
    return AuthService(UserStore(), session_manager)


@lru_cache
def get_book_service() -> BookService:
    return BookService()


@lru_cache
def get_borrowing_service() -> BorrowingService:
    settings = get_settings()
    return BorrowingService(daily_fine=settings.daily_fine, loan_days=settings.loan_days)


@lru_cache
def get_reservation_service() -> ReservationService:
    return ReservationService(reservation_days=get_settings().reservation_days)


@lru_cache
def get_bookmark_service() -> BookmarkService:
    return BookmarkService()


@lru_cache
def get_notification_service() -> NotificationService:
    return NotificationService()


@lru_cache
def get_dashboard_service() -> DashboardService:
    return DashboardService()


@lru_cache
def get_system_log_service() -> SystemLogService:
    return SystemLogService()


@lru_cache
def get_user_service() -> UserService:
    return UserService()


def get_client_ip(request: Request) -> str | None:
    return request.client.host if request.client else None


def get_session_token(
    request: Request,
    authorization: str | None = Header(default=None, alias="Authorization"),
    settings: BookTrackSettings = Depends(get_settings),
) -> str | None:
    """Session token from the session cookie, falling back to a bearer header."""

    cookie_value = (request.cookies.get(settings.session_cookie_name) or "").strip()
    if cookie_value:
        return cookie_value
    return _extract_bearer_token(authorization)


def get_request_user(
    token: str | None = Depends(get_session_token),
    ip_address: str | None = Depends(get_client_ip),
    auth_service: AuthService = Depends(get_auth_service),
) -> RequestUserContext:
    """Resolve the per-request identity; anonymous when the session is missing or stale."""

    return auth_service.authenticate(token, ip_address=ip_address)


def get_authenticated_user(
    request_user: RequestUserContext = Depends(get_request_user),
) -> RequestUserContext:
    if not request_user.is_authenticated:
        raise Unauthenticated("Authentication required")
    return request_user


__all__ = [
    "RequestUserContext",
    "get_auth_service",
    "get_authenticated_user",
    "get_book_service",
    "get_bookmark_service",
    "get_borrowing_service",
    "get_client_ip",
    "get_dashboard_service",
    "get_notification_service",
    "get_request_user",
    "get_reservation_service",
    "get_session_token",
    "get_settings",
    "get_system_log_service",
    "get_user_service",
]
