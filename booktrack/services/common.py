"""Helpers shared by the resource services."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Collection, Optional, Tuple

from ..errors import Forbidden, Unauthenticated
from ..permissions import has_capability
from ..user_management.context import RequestUserContext

MAX_PAGE_SIZE = 500


def iso_date(value: Optional[date]) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, datetime):
        value = value.date()
    return value.isoformat()


def iso_timestamp(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, datetime):
        return value.isoformat()
    return value.isoformat(sep=" ", timespec="seconds")


def money(value: Optional[Decimal]) -> float:
    if value is None:
        return 0.0
    return float(Decimal(value).quantize(Decimal("0.01")))


def page_window(limit: Optional[int], offset: Optional[int], default_limit: int) -> Tuple[int, int]:
    """Clamp client-supplied pagination to sane bounds."""

    if limit is None or limit <= 0:
        limit = default_limit
    limit = min(limit, MAX_PAGE_SIZE)
    if offset is None or offset < 0:
        offset = 0
    return limit, offset


def require_user(actor: RequestUserContext) -> int:
    if actor.user_id is None:
        raise Unauthenticated("Authentication required")
    return actor.user_id


def require_capability(
    actor: RequestUserContext,
    required_roles: Collection[str],
    message: str = "Admin access required",
) -> None:
    if not has_capability(actor.role, required_roles):
        raise Forbidden(message)


def display_name(first_name: Optional[str], last_name: Optional[str]) -> str:
    """``"First Last"`` or ``"System"`` for entries without a user."""

    if not first_name:
        return "System"
    return f"{first_name} {last_name or ''}".strip()
