"""Read-only aggregate statistics for the user and admin dashboards."""

from __future__ import annotations

from datetime import timedelta
from typing import Any, Dict, List

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..clock import Clock, local_now
from ..database.engine import get_db_session
from ..database.models import (
    BookModel,
    BookmarkModel,
    BorrowingModel,
    CategoryModel,
    ReservationModel,
    SystemLogModel,
    UserModel,
)
from ..permissions import DASHBOARD_ADMINS, ROLE_USER
from ..user_management.context import RequestUserContext
from .common import iso_date, require_capability, require_user
from .system_log_service import serialize_log

ACTIVITY_WINDOW_DAYS = 30
RECENT_ACTIVITY_LIMIT = 10


def _count(db: Session, stmt) -> int:
    return int(db.execute(stmt).scalar_one() or 0)


class DashboardService:
    def __init__(self, *, clock: Clock = local_now) -> None:
        self._clock = clock

    def user_dashboard(self, actor: RequestUserContext) -> Dict[str, Any]:
        user_id = require_user(actor)
        now = self._clock()
        today = now.date()
        with get_db_session() as db:
            return {
                "total_books": _count(db, select(func.count(BookModel.id))),
                "reading_books": _count(
                    db,
                    select(func.count(BorrowingModel.id)).where(
                        BorrowingModel.user_id == user_id, BorrowingModel.status == "borrowed"
                    ),
                ),
                "completed_books": _count(
                    db,
                    select(func.count(BorrowingModel.id)).where(
                        BorrowingModel.user_id == user_id, BorrowingModel.status == "returned"
                    ),
                ),
                "wishlist_books": _count(
                    db, select(func.count(BookmarkModel.id)).where(BookmarkModel.user_id == user_id)
                ),
                "overdue_count": _count(
                    db,
                    select(func.count(BorrowingModel.id)).where(
                        BorrowingModel.user_id == user_id,
                        BorrowingModel.status == "borrowed",
                        BorrowingModel.due_date < today,
                    ),
                ),
                "recent_activity": self._recent_activity(db, user_id, now),
            }

    def admin_dashboard(self, actor: RequestUserContext) -> Dict[str, Any]:
        require_user(actor)
        require_capability(actor, DASHBOARD_ADMINS)
        now = self._clock()
        today = now.date()
        active_since = now - timedelta(days=ACTIVITY_WINDOW_DAYS)
        with get_db_session() as db:
            logs = db.execute(
                select(SystemLogModel)
                .order_by(SystemLogModel.created_at.desc(), SystemLogModel.id.desc())
                .limit(RECENT_ACTIVITY_LIMIT)
            ).scalars().all()
            book_count = func.count(BookModel.id).label("count")
            categories = db.execute(
                select(CategoryModel.name, book_count)
                .outerjoin(BookModel, BookModel.category_id == CategoryModel.id)
                .group_by(CategoryModel.id, CategoryModel.name)
                .order_by(book_count.desc(), CategoryModel.name.asc())
            ).all()
            return {
                "total_users": _count(
                    db, select(func.count(UserModel.id)).where(UserModel.role == ROLE_USER)
                ),
                "active_users": _count(
                    db,
                    select(func.count(UserModel.id)).where(
                        UserModel.role == ROLE_USER, UserModel.last_login >= active_since
                    ),
                ),
                "total_books": _count(db, select(func.count(BookModel.id))),
                "active_borrowings": _count(
                    db, select(func.count(BorrowingModel.id)).where(BorrowingModel.status == "borrowed")
                ),
                "pending_requests": _count(
                    db,
                    select(func.count(ReservationModel.id)).where(ReservationModel.status == "pending"),
                ),
                "overdue_books": _count(
                    db,
                    select(func.count(BorrowingModel.id)).where(
                        BorrowingModel.status == "borrowed", BorrowingModel.due_date < today
                    ),
                ),
                "system_activity": [serialize_log(entry) for entry in logs],
                "categories": [{"name": name, "count": int(count)} for name, count in categories],
            }

    def _recent_activity(self, db: Session, user_id: int, now) -> List[Dict[str, Any]]:
        """Borrowings and live reservations from the last 30 days, newest first."""
        since = now - timedelta(days=ACTIVITY_WINDOW_DAYS)
        borrowings = db.execute(
            select(BorrowingModel).where(
                BorrowingModel.user_id == user_id, BorrowingModel.borrowed_date >= since.date()
            )
        ).scalars().all()
        reservations = db.execute(
            select(ReservationModel).where(
                ReservationModel.user_id == user_id,
                ReservationModel.status != "cancelled",
                ReservationModel.reserved_date >= since,
            )
        ).scalars().all()

        entries = [
            {
                "type": "borrow",
                "date": iso_date(item.borrowed_date),
                "title": item.book.title,
                "book_id": item.book_id,
                "description": f"Borrowed {item.book.title}",
                "_sort": (item.created_at, item.id),
            }
            for item in borrowings
        ]
        entries.extend(
            {
                "type": "reservation",
                "date": iso_date(item.reserved_date),
                "title": item.book.title,
                "book_id": item.book_id,
                "description": f"Reserved {item.book.title}",
                "_sort": (item.reserved_date, item.id),
            }
            for item in reservations
        )
        entries.sort(key=lambda entry: entry["_sort"], reverse=True)
        recent = entries[:RECENT_ACTIVITY_LIMIT]
        for entry in recent:
            entry.pop("_sort")
        return recent
