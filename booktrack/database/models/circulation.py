"""Circulation models: borrowings and reservations."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import Date, ForeignKey, Integer, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..base import Base, CreatedAtMixin
from .catalog import BookModel
from .user import UserModel

BORROWING_STATUSES = ("borrowed", "returned")
RESERVATION_STATUSES = ("pending", "available", "cancelled")


class BorrowingModel(Base, CreatedAtMixin):
    __tablename__ = "borrowings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    book_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("books.id", ondelete="CASCADE"), nullable=False, index=True
    )
    borrowed_date: Mapped[date] = mapped_column(Date, nullable=False)
    due_date: Mapped[date] = mapped_column(Date, nullable=False)
    return_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="borrowed", index=True)
    fine_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0.00"))

    book: Mapped[BookModel] = relationship(lazy="joined")
    user: Mapped[UserModel] = relationship(lazy="joined")


class ReservationModel(Base, CreatedAtMixin):
    __tablename__ = "reservations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    book_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("books.id", ondelete="CASCADE"), nullable=False, index=True
    )
    reserved_date: Mapped[datetime] = mapped_column(default=func.now(), server_default=func.now())
    expiry_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="pending", index=True)

    book: Mapped[BookModel] = relationship(lazy="joined")
    user: Mapped[UserModel] = relationship(lazy="joined")
