"""Routers for the BookTrack resources."""

from __future__ import annotations

from .auth import router as auth_router
from .bookmarks import router as bookmarks_router
from .books import router as books_router
from .borrowings import router as borrowings_router
from .dashboard import router as dashboard_router
from .logs import router as logs_router
from .notifications import router as notifications_router
from .reservations import router as reservations_router
from .users import router as users_router

__all__ = [
    "auth_router",
    "bookmarks_router",
    "books_router",
    "borrowings_router",
    "dashboard_router",
    "logs_router",
    "notifications_router",
    "reservations_router",
    "users_router",
]
