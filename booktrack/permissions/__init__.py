"""Permission helpers for access control."""

from .access_control import (
    BOOK_EDITORS,
    BORROWING_ADMINS,
    DASHBOARD_ADMINS,
    LOG_ADMINS,
    RESERVATION_ADMINS,
    ROLE_ADMIN,
    ROLE_LIBRARY_ADMIN,
    ROLE_LIBRARY_MODERATOR,
    ROLE_USER,
    USER_ADMINS,
    USER_STATUSES,
    VALID_ROLES,
    has_capability,
    is_valid_role,
    normalize_role,
)

__all__ = [
    "BOOK_EDITORS",
    "BORROWING_ADMINS",
    "DASHBOARD_ADMINS",
    "LOG_ADMINS",
    "RESERVATION_ADMINS",
    "ROLE_ADMIN",
    "ROLE_LIBRARY_ADMIN",
    "ROLE_LIBRARY_MODERATOR",
    "ROLE_USER",
    "USER_ADMINS",
    "USER_STATUSES",
    "VALID_ROLES",
    "has_capability",
    "is_valid_role",
    "normalize_role",
]
