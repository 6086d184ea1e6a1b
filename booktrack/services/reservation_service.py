"""Reservation queue: create, cancel and list claims on books."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from .. import logging_manager
from ..clock import Clock, local_now
from ..database.engine import get_db_session
from ..database.models import BookModel, BorrowingModel, ReservationModel
from ..errors import Conflict, DuplicateBorrow, NotFound, ValidationError
from ..permissions import RESERVATION_ADMINS, has_capability
from ..user_management.context import RequestUserContext
from .activity_log import log_system_activity
from .common import display_name, iso_date, iso_timestamp, require_capability, require_user
from .notification_service import create_notification

logger = logging_manager.get_logger().getChild("reservation_service")

ACTIVE_STATUSES = ("pending", "available")
MAX_RESERVATION_DAYS = 365


def effective_status(reservation: ReservationModel, today: date) -> str:
    """Pending reservations past their expiry date read as ``expired``."""

    if reservation.status == "pending" and reservation.expiry_date < today:
        return "expired"
    return reservation.status


def serialize_reservation(reservation: ReservationModel, today: date) -> Dict[str, Any]:
    book = reservation.book
    return {
        "id": reservation.id,
        "book_id": reservation.book_id,
        "title": book.title,
        "author": book.author,
        "isbn": book.isbn,
        "cover_image": book.cover_image,
        "reserved_date": iso_timestamp(reservation.reserved_date),
        "expiry_date": iso_date(reservation.expiry_date),
        "status": effective_status(reservation, today),
    }


def serialize_admin_reservation(reservation: ReservationModel, today: date) -> Dict[str, Any]:
    payload = serialize_reservation(reservation, today)
    user = reservation.user
    payload.update(
        {
            "user_id": reservation.user_id,
            "user_name": display_name(user.first_name, user.last_name),
            "first_name": user.first_name,
            "last_name": user.last_name,
            "email": user.email,
        }
    )
    return payload


class ReservationService:
    """Reservation state machine: pending -> available | cancelled."""

    def __init__(self, *, reservation_days: int = 7, clock: Clock = local_now) -> None:
        self._reservation_days = reservation_days
        self._clock = clock

    def create(
        self, actor: RequestUserContext, book_id: Optional[int], expiry_days: Optional[int] = None
    ) -> Dict[str, Any]:
        user_id = require_user(actor)
        if not book_id:
            raise ValidationError("Book ID is required")
        if expiry_days is None:
            expiry_days = self._reservation_days
        if expiry_days <= 0:
            raise ValidationError("Expiry days must be a positive number")
        if expiry_days > MAX_RESERVATION_DAYS:
            raise ValidationError(f"Expiry days cannot exceed {MAX_RESERVATION_DAYS}")

        with get_db_session() as db:
            book = db.execute(
                select(BookModel).where(BookModel.id == book_id).with_for_update(of=BookModel)
            ).scalar_one_or_none()
            if book is None:
                raise NotFound("Book not found")
            if self._has_open_borrowing(db, user_id, book_id):
                raise DuplicateBorrow()
            if self._active_reservation(db, user_id, book_id) is not None:
                raise Conflict("You already have a pending reservation for this book")

            now = self._clock()
            expiry_date = now.date() + timedelta(days=expiry_days)
            immediately_available = book.availability == "available"
            reservation = ReservationModel(
                user_id=user_id,
                book_id=book_id,
                reserved_date=now,
                expiry_date=expiry_date,
                status="available" if immediately_available else "pending",
                created_at=now,
            )
            db.add(reservation)
            if immediately_available:
                book.availability = "reserved"
            db.flush()

            log_system_activity(
                db, user_id, f"Book reserved: {book.title}", ip_address=actor.ip_address, timestamp=now
            )
            if immediately_available:
                create_notification(
                    db,
                    user_id,
                    "available",
                    "Reserved Book Ready",
                    f"The book '{book.title}' you reserved is available for pickup.",
                    book_id=book_id,
                    timestamp=now,
                )
            else:
                create_notification(
                    db,
                    user_id,
                    "system",
                    "Book Reserved",
                    f"You have reserved '{book.title}'. You will be notified when it becomes available.",
                    book_id=book_id,
                    timestamp=now,
                )
            logger.info(
                "Book reserved",
                extra={
                    "event": "reservation.created",
                    "user_id": user_id,
                    "reservation_id": reservation.id,
                    "reservation_status": reservation.status,
                },
            )
            return {"reservation_id": reservation.id, "expiry_date": expiry_date.isoformat()}

    def cancel(self, actor: RequestUserContext, reservation_id: int) -> None:
        """Cancel a reservation; the last active one releases a reserved book."""
        user_id = require_user(actor)
        with get_db_session() as db:
            reservation = self._visible(db, actor, reservation_id)
            if reservation.status == "cancelled":
                raise Conflict("Reservation already cancelled")
            reservation.status = "cancelled"
            db.flush()

            remaining = db.execute(
                select(func.count(ReservationModel.id)).where(
                    ReservationModel.book_id == reservation.book_id,
                    ReservationModel.status.in_(ACTIVE_STATUSES),
                )
            ).scalar_one()
            book = reservation.book
            # A borrowed copy stays borrowed; only a reservation hold is released.
            if remaining == 0 and book.availability == "reserved":
                book.availability = "available"

            log_system_activity(
                db,
                user_id,
                f"Reservation cancelled: {book.title}",
                ip_address=actor.ip_address,
                timestamp=self._clock(),
            )
            logger.info(
                "Reservation cancelled",
                extra={"event": "reservation.cancelled", "user_id": user_id, "reservation_id": reservation_id},
            )

    def list_for_user(self, actor: RequestUserContext) -> List[Dict[str, Any]]:
        user_id = require_user(actor)
        today = self._clock().date()
        stmt = (
            select(ReservationModel)
            .where(ReservationModel.user_id == user_id, ReservationModel.status != "cancelled")
            .order_by(ReservationModel.reserved_date.desc(), ReservationModel.id.desc())
        )
        with get_db_session() as db:
            return [serialize_reservation(item, today) for item in db.execute(stmt).scalars().all()]

    def list_all(self, actor: RequestUserContext) -> List[Dict[str, Any]]:
        require_user(actor)
        require_capability(actor, RESERVATION_ADMINS)
        today = self._clock().date()
        stmt = select(ReservationModel).order_by(
            ReservationModel.reserved_date.desc(), ReservationModel.id.desc()
        )
        with get_db_session() as db:
            return [serialize_admin_reservation(item, today) for item in db.execute(stmt).scalars().all()]

    def get_reservation(self, actor: RequestUserContext, reservation_id: int) -> Dict[str, Any]:
        require_user(actor)
        with get_db_session() as db:
            reservation = self._visible(db, actor, reservation_id)
            return serialize_admin_reservation(reservation, self._clock().date())

    @staticmethod
    def _visible(db: Session, actor: RequestUserContext, reservation_id: int) -> ReservationModel:
        stmt = select(ReservationModel).where(ReservationModel.id == reservation_id)
        if not has_capability(actor.role, RESERVATION_ADMINS):
            stmt = stmt.where(ReservationModel.user_id == actor.user_id)
        reservation = db.execute(stmt).scalar_one_or_none()
        if reservation is None:
            raise NotFound("Reservation not found")
        return reservation

    @staticmethod
    def _has_open_borrowing(db: Session, user_id: int, book_id: int) -> bool:
        return (
            db.execute(
                select(BorrowingModel.id)
                .where(
                    BorrowingModel.user_id == user_id,
                    BorrowingModel.book_id == book_id,
                    BorrowingModel.status == "borrowed",
                )
                .limit(1)
            ).first()
            is not None
        )

    @staticmethod
    def _active_reservation(db: Session, user_id: int, book_id: int) -> Optional[ReservationModel]:
        return db.execute(
            select(ReservationModel)
            .where(
                ReservationModel.user_id == user_id,
                ReservationModel.book_id == book_id,
                ReservationModel.status.in_(ACTIVE_STATUSES),
            )
            .limit(1)
        ).scalar_one_or_none()
