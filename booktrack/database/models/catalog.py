"""Catalog models: categories and books."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import Date, ForeignKey, Integer, Numeric, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..base import Base, CreatedAtMixin, TimestampMixin

BOOK_AVAILABILITY = ("available", "borrowed", "reserved")


class CategoryModel(Base, CreatedAtMixin):
    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    books: Mapped[list[BookModel]] = relationship(back_populates="category")


class BookModel(Base, TimestampMixin):
    __tablename__ = "books"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    author: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    isbn: Mapped[Optional[str]] = mapped_column(String(32), nullable=True, index=True)
    category_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True
    )
    genre: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    cover_image: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    publisher: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    publish_year: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    pages: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    language: Mapped[Optional[str]] = mapped_column(String(50), nullable=True, default="English")
    location: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    call_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    availability: Mapped[str] = mapped_column(
        String(16), nullable=False, default="available", server_default="available", index=True
    )
    rating: Mapped[Decimal] = mapped_column(Numeric(3, 2), nullable=False, default=Decimal("0.00"))
    total_reviews: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_borrows: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    added_date: Mapped[Optional[datetime]] = mapped_column(default=func.now(), server_default=func.now())
    last_borrowed: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    category: Mapped[Optional[CategoryModel]] = relationship(back_populates="books", lazy="joined")
