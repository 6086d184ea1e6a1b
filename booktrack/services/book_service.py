"""Catalog browsing, search and editor-only maintenance of books."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from .. import logging_manager
from ..clock import Clock, local_now
from ..database.engine import get_db_session
from ..database.models import BookModel, CategoryModel
from ..errors import NotFound, ValidationError
from ..permissions import BOOK_EDITORS
from ..user_management.context import RequestUserContext
from .activity_log import log_system_activity
from .common import iso_date, iso_timestamp, money, page_window, require_capability
from .patches import BookPatch

logger = logging_manager.get_logger().getChild("book_service")

DEFAULT_PAGE_SIZE = 50


def serialize_book(book: BookModel) -> Dict[str, Any]:
    return {
        "id": book.id,
        "title": book.title,
        "author": book.author,
        "isbn": book.isbn,
        "category": book.category.name if book.category is not None else None,
        "category_id": book.category_id,
        "genre": book.genre,
        "description": book.description,
        "cover": book.cover_image,
        "publisher": book.publisher,
        "publish_year": book.publish_year,
        "pages": book.pages,
        "language": book.language,
        "location": book.location,
        "call_number": book.call_number,
        "availability": book.availability,
        "rating": money(book.rating),
        "reviews": book.total_reviews or 0,
        "total_borrows": book.total_borrows or 0,
        "added_date": iso_timestamp(book.added_date),
        "last_borrowed": iso_date(book.last_borrowed),
        "created_at": iso_timestamp(book.created_at),
    }


class BookService:
    """Read access for everyone; writes for the ``BOOK_EDITORS`` roles."""

    def __init__(self, *, clock: Clock = local_now) -> None:
        self._clock = clock

    def list_books(self, *, limit: Optional[int] = None, offset: Optional[int] = None) -> List[Dict[str, Any]]:
        limit, offset = page_window(limit, offset, DEFAULT_PAGE_SIZE)
        stmt = (
            select(BookModel)
            .order_by(BookModel.created_at.desc(), BookModel.id.desc())
            .limit(limit)
            .offset(offset)
        )
        with get_db_session() as db:
            return [serialize_book(book) for book in db.execute(stmt).scalars().all()]

    def get_book(self, book_id: int) -> Dict[str, Any]:
        with get_db_session() as db:
            return serialize_book(self._load(db, book_id))

    def search_books(
        self,
        *,
        query: Optional[str] = None,
        category: Optional[str] = None,
        availability: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """Case-insensitive substring search over title, author, isbn and description."""
        limit, offset = page_window(limit, offset, DEFAULT_PAGE_SIZE)
        stmt = select(BookModel).outerjoin(CategoryModel, BookModel.category_id == CategoryModel.id)

        term = (query or "").strip()
        if term:
            stmt = stmt.where(
                or_(
                    BookModel.title.icontains(term, autoescape=True),
                    BookModel.author.icontains(term, autoescape=True),
                    BookModel.isbn.icontains(term, autoescape=True),
                    BookModel.description.icontains(term, autoescape=True),
                )
            )
        if category and category.strip():
            stmt = stmt.where(CategoryModel.name == category.strip())
        if availability and availability.strip():
            stmt = stmt.where(BookModel.availability == availability.strip().lower())

        stmt = stmt.order_by(BookModel.created_at.desc(), BookModel.id.desc()).limit(limit).offset(offset)
        with get_db_session() as db:
            return [serialize_book(book) for book in db.execute(stmt).scalars().all()]

    def create_book(self, actor: RequestUserContext, fields: BookPatch) -> int:
        require_capability(actor, BOOK_EDITORS)
        values = fields.changes()
        if not (values.get("title") or "").strip() or not (values.get("author") or "").strip():
            raise ValidationError("Title and author are required")
        values.setdefault("availability", "available")

        with get_db_session() as db:
            self._check_category(db, values.get("category_id"))
            now = self._clock()
            book = BookModel(**values, created_at=now, updated_at=now, added_date=now)
            db.add(book)
            db.flush()
            log_system_activity(
                db,
                actor.user_id,
                f"Book created: {book.title}",
                ip_address=actor.ip_address,
                timestamp=now,
            )
            logger.info(
                "Created book",
                extra={"event": "book.created", "book_id": book.id, "user_id": actor.user_id},
            )
            return book.id

    def update_book(self, actor: RequestUserContext, book_id: int, patch: BookPatch) -> None:
        require_capability(actor, BOOK_EDITORS)
        changes = patch.changes()
        if not changes:
            raise ValidationError("No fields to update")
        for required in ("title", "author"):
            if required in changes and not changes[required].strip():
                raise ValidationError("Title and author are required")

        with get_db_session() as db:
            book = self._load(db, book_id)
            if "category_id" in changes:
                self._check_category(db, changes["category_id"])
            for field, value in changes.items():
                setattr(book, field, value)
            log_system_activity(
                db,
                actor.user_id,
                f"Book updated: ID {book_id}",
                ip_address=actor.ip_address,
                timestamp=self._clock(),
            )

    def delete_book(self, actor: RequestUserContext, book_id: int) -> None:
        require_capability(actor, BOOK_EDITORS)
        with get_db_session() as db:
            book = self._load(db, book_id)
            title = book.title
            db.delete(book)
            db.flush()
            log_system_activity(
                db,
                actor.user_id,
                f"Book deleted: {title}",
                level="warning",
                ip_address=actor.ip_address,
                timestamp=self._clock(),
            )
            logger.warning(
                "Deleted book",
                extra={"event": "book.deleted", "book_id": book_id, "user_id": actor.user_id},
            )

    @staticmethod
    def _load(db: Session, book_id: int) -> BookModel:
        book = db.get(BookModel, book_id)
        if book is None:
            raise NotFound("Book not found")
        return book

    @staticmethod
    def _check_category(db: Session, category_id: Optional[int]) -> None:
        if category_id is not None and db.get(CategoryModel, category_id) is None:
            raise ValidationError("Category not found")
