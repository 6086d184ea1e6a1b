"""Borrow and return flows, fines and borrowing listings.

Each flow runs inside a single database transaction: the borrowing row,
the book availability flag, reservation updates, the audit entry and the
notifications are committed together or not at all.
"""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from .. import logging_manager
from ..clock import Clock, local_now
from ..database.engine import get_db_session
from ..database.models import BookModel, BorrowingModel, ReservationModel
from ..errors import BookUnavailable, Conflict, DuplicateBorrow, NotFound, ValidationError
from ..permissions import BORROWING_ADMINS, has_capability
from ..user_management.context import RequestUserContext
from .activity_log import log_system_activity
from .common import display_name, iso_date, iso_timestamp, money, require_capability, require_user
from .notification_service import create_notification

logger = logging_manager.get_logger().getChild("borrowing_service")

BORROWING_FILTERS = ("borrowed", "returned", "overdue")
MAX_LOAN_DAYS = 365


def effective_status(borrowing: BorrowingModel, today: date) -> str:
    """``overdue`` is a read-time view of an open borrowing past its due date."""

    if borrowing.status == "borrowed" and borrowing.due_date < today:
        return "overdue"
    return borrowing.status


def calculate_fine(due_date: date, returned_on: date, daily_rate: Decimal) -> Decimal:
    days_overdue = (returned_on - due_date).days
    if days_overdue <= 0:
        return Decimal("0.00")
    return (daily_rate * days_overdue).quantize(Decimal("0.01"))


def serialize_borrowing(borrowing: BorrowingModel, today: date) -> Dict[str, Any]:
    book = borrowing.book
    return {
        "id": borrowing.id,
        "book_id": borrowing.book_id,
        "title": book.title,
        "author": book.author,
        "isbn": book.isbn,
        "cover_image": book.cover_image,
        "borrowed_date": iso_date(borrowing.borrowed_date),
        "due_date": iso_date(borrowing.due_date),
        "return_date": iso_date(borrowing.return_date),
        "status": effective_status(borrowing, today),
        "fine_amount": money(borrowing.fine_amount),
    }


def serialize_admin_borrowing(borrowing: BorrowingModel, today: date) -> Dict[str, Any]:
    payload = serialize_borrowing(borrowing, today)
    user = borrowing.user
    payload.update(
        {
            "user_id": borrowing.user_id,
            "user_name": display_name(user.first_name, user.last_name),
            "first_name": user.first_name,
            "last_name": user.last_name,
            "email": user.email,
            "created_at": iso_timestamp(borrowing.created_at),
        }
    )
    return payload


class BorrowingService:
    """Borrowing state machine: none -> borrowed -> returned."""

    def __init__(
        self,
        *,
        daily_fine: Decimal = Decimal("1.00"),
        loan_days: int = 14,
        clock: Clock = local_now,
    ) -> None:
        self._daily_fine = daily_fine
        self._loan_days = loan_days
        self._clock = clock

    def _today(self) -> date:
        return self._clock().date()

    # ------------------------------------------------------------------
    # State transitions
    # ------------------------------------------------------------------
    def borrow(
        self, actor: RequestUserContext, book_id: Optional[int], due_days: Optional[int] = None
    ) -> Dict[str, Any]:
        user_id = require_user(actor)
        if not book_id:
            raise ValidationError("Book ID is required")
        if due_days is None:
            due_days = self._loan_days
        if due_days <= 0:
            raise ValidationError("Due days must be a positive number")
        if due_days > MAX_LOAN_DAYS:
            raise ValidationError(f"Due days cannot exceed {MAX_LOAN_DAYS}")

        with get_db_session() as db:
            book = db.execute(
                select(BookModel).where(BookModel.id == book_id).with_for_update(of=BookModel)
            ).scalar_one_or_none()
            if book is None:
                raise NotFound("Book not found")
            if book.availability != "available":
                raise BookUnavailable()
            if self._open_borrowing(db, user_id, book_id) is not None:
                raise DuplicateBorrow()

            now = self._clock()
            today = now.date()
            due_date = today + timedelta(days=due_days)
            borrowing = BorrowingModel(
                user_id=user_id,
                book_id=book_id,
                borrowed_date=today,
                due_date=due_date,
                status="borrowed",
                fine_amount=Decimal("0.00"),
                created_at=now,
            )
            db.add(borrowing)

            book.availability = "borrowed"
            book.last_borrowed = today
            book.total_borrows = (book.total_borrows or 0) + 1

            db.execute(
                update(ReservationModel)
                .where(
                    ReservationModel.user_id == user_id,
                    ReservationModel.book_id == book_id,
                    ReservationModel.status == "pending",
                )
                .values(status="cancelled")
            )
            db.flush()

            log_system_activity(
                db, user_id, f"Book borrowed: {book.title}", ip_address=actor.ip_address, timestamp=now
            )
            create_notification(
                db,
                user_id,
                "system",
                "Book Borrowed",
                f"You have successfully borrowed '{book.title}'. Due date: {due_date.isoformat()}",
                book_id=book_id,
                timestamp=now,
            )
            logger.info(
                "Book borrowed",
                extra={
                    "event": "borrowing.created",
                    "user_id": user_id,
                    "book_id": book_id,
                    "borrowing_id": borrowing.id,
                },
            )
            return {"borrowing_id": borrowing.id, "due_date": due_date.isoformat()}

    def return_book(
        self,
        actor: RequestUserContext,
        *,
        borrowing_id: Optional[int] = None,
        book_id: Optional[int] = None,
    ) -> Dict[str, Any]:
        """Close a borrowing, charge the overdue fine and free the book."""
        user_id = require_user(actor)
        if not borrowing_id and not book_id:
            raise ValidationError("Borrowing ID or Book ID is required")

        with get_db_session() as db:
            if borrowing_id:
                stmt = select(BorrowingModel).where(BorrowingModel.id == borrowing_id)
                if not has_capability(actor.role, BORROWING_ADMINS):
                    stmt = stmt.where(BorrowingModel.user_id == user_id)
                borrowing = db.execute(stmt).scalar_one_or_none()
            else:
                borrowing = self._open_borrowing(db, user_id, book_id)
            if borrowing is None:
                raise NotFound("Borrowing record not found")
            if borrowing.status == "returned":
                raise Conflict("Book already returned")

            now = self._clock()
            today = now.date()
            fine = calculate_fine(borrowing.due_date, today, self._daily_fine)
            borrowing.status = "returned"
            borrowing.return_date = today
            borrowing.fine_amount = fine

            book = borrowing.book
            book.availability = "available"
            db.flush()

            next_reservation = db.execute(
                select(ReservationModel)
                .where(ReservationModel.book_id == book.id, ReservationModel.status == "pending")
                .order_by(ReservationModel.reserved_date.asc(), ReservationModel.id.asc())
                .limit(1)
            ).scalar_one_or_none()
            if next_reservation is not None:
                create_notification(
                    db,
                    next_reservation.user_id,
                    "available",
                    "Reserved Book Available",
                    f"The book '{book.title}' you reserved is now available for pickup.",
                    book_id=book.id,
                    timestamp=now,
                )

            log_system_activity(
                db, user_id, f"Book returned: {book.title}", ip_address=actor.ip_address, timestamp=now
            )
            create_notification(
                db,
                borrowing.user_id,
                "system",
                "Book Returned",
                f"You have successfully returned '{book.title}'.",
                book_id=book.id,
                timestamp=now,
            )
            logger.info(
                "Book returned",
                extra={
                    "event": "borrowing.returned",
                    "user_id": user_id,
                    "borrowing_id": borrowing.id,
                    "fine_amount": str(fine),
                },
            )
            return {"fine_amount": money(fine)}

    # ------------------------------------------------------------------
    # Listings
    # ------------------------------------------------------------------
    def list_for_user(self, actor: RequestUserContext, status: Optional[str] = None) -> List[Dict[str, Any]]:
        user_id = require_user(actor)
        status = (status or "").strip().lower() or None
        if status is not None and status not in BORROWING_FILTERS:
            raise ValidationError("Invalid status filter")
        today = self._today()

        stmt = select(BorrowingModel).where(BorrowingModel.user_id == user_id)
        if status == "overdue":
            stmt = stmt.where(BorrowingModel.status == "borrowed", BorrowingModel.due_date < today)
        elif status == "borrowed":
            stmt = stmt.where(BorrowingModel.status == "borrowed", BorrowingModel.due_date >= today)
        elif status is not None:
            stmt = stmt.where(BorrowingModel.status == status)
        stmt = stmt.order_by(BorrowingModel.borrowed_date.desc(), BorrowingModel.id.desc())

        with get_db_session() as db:
            return [serialize_borrowing(item, today) for item in db.execute(stmt).scalars().all()]

    def list_all(self, actor: RequestUserContext) -> List[Dict[str, Any]]:
        require_user(actor)
        require_capability(actor, BORROWING_ADMINS)
        today = self._today()
        stmt = select(BorrowingModel).order_by(BorrowingModel.created_at.desc(), BorrowingModel.id.desc())
        with get_db_session() as db:
            return [serialize_admin_borrowing(item, today) for item in db.execute(stmt).scalars().all()]

    def get_borrowing(self, actor: RequestUserContext, borrowing_id: int) -> Dict[str, Any]:
        user_id = require_user(actor)
        stmt = select(BorrowingModel).where(BorrowingModel.id == borrowing_id)
        if not has_capability(actor.role, BORROWING_ADMINS):
            stmt = stmt.where(BorrowingModel.user_id == user_id)
        with get_db_session() as db:
            borrowing = db.execute(stmt).scalar_one_or_none()
            if borrowing is None:
                raise NotFound("Borrowing record not found")
            return serialize_admin_borrowing(borrowing, self._today())

    @staticmethod
    def _open_borrowing(db: Session, user_id: int, book_id: Optional[int]) -> Optional[BorrowingModel]:
        return db.execute(
            select(BorrowingModel)
            .where(
                BorrowingModel.user_id == user_id,
                BorrowingModel.book_id == book_id,
                BorrowingModel.status == "borrowed",
            )
            .limit(1)
        ).scalar_one_or_none()
