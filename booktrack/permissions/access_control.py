"""Role vocabulary and the capability check shared by every resource."""

from __future__ import annotations

from typing import Collection, Optional

ROLE_USER = "user"
ROLE_ADMIN = "admin"
ROLE_LIBRARY_ADMIN = "library_admin"
ROLE_LIBRARY_MODERATOR = "library_moderator"

VALID_ROLES = (ROLE_USER, ROLE_ADMIN, ROLE_LIBRARY_ADMIN, ROLE_LIBRARY_MODERATOR)

USER_STATUSES = ("active", "suspended", "inactive")

# Capability sets: which roles may perform an operation on a resource.
BOOK_EDITORS = frozenset({ROLE_LIBRARY_ADMIN, ROLE_LIBRARY_MODERATOR})
BORROWING_ADMINS = frozenset({ROLE_ADMIN, ROLE_LIBRARY_ADMIN})
RESERVATION_ADMINS = frozenset({ROLE_LIBRARY_ADMIN, ROLE_LIBRARY_MODERATOR})
DASHBOARD_ADMINS = frozenset({ROLE_ADMIN, ROLE_LIBRARY_ADMIN})
LOG_ADMINS = frozenset({ROLE_LIBRARY_ADMIN, ROLE_LIBRARY_MODERATOR})
USER_ADMINS = frozenset({ROLE_ADMIN, ROLE_LIBRARY_ADMIN})


def normalize_role(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    normalized = value.strip().lower()
    return normalized or None


def is_valid_role(value: Optional[str]) -> bool:
    return normalize_role(value) in VALID_ROLES


def has_capability(role: Optional[str], required_roles: Collection[str]) -> bool:
    """Return ``True`` when ``role`` is one of ``required_roles``."""

    normalized = normalize_role(role)
    if normalized is None:
        return False
    return normalized in required_roles


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
