"""Per-user saved books."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .. import logging_manager
from ..clock import Clock, local_now
from ..database.engine import get_db_session
from ..database.models import BookModel, BookmarkModel
from ..errors import Conflict, NotFound, ValidationError
from ..user_management.context import RequestUserContext
from .activity_log import log_system_activity
from .common import iso_timestamp, money, require_user

logger = logging_manager.get_logger().getChild("bookmark_service")


def serialize_bookmark(bookmark: BookmarkModel) -> Dict[str, Any]:
    book = bookmark.book
    return {
        "id": bookmark.id,
        "book_id": bookmark.book_id,
        "title": book.title,
        "author": book.author,
        "isbn": book.isbn,
        "category": book.category.name if book.category is not None else None,
        "cover_image": book.cover_image,
        "availability": book.availability,
        "rating": money(book.rating),
        "created_at": iso_timestamp(bookmark.created_at),
    }


class BookmarkService:
    """Add, remove and list the caller's bookmarks."""

    def __init__(self, *, clock: Clock = local_now) -> None:
        self._clock = clock

    def list_bookmarks(self, actor: RequestUserContext) -> List[Dict[str, Any]]:
        user_id = require_user(actor)
        stmt = (
            select(BookmarkModel)
            .where(BookmarkModel.user_id == user_id)
            .order_by(BookmarkModel.created_at.desc(), BookmarkModel.id.desc())
        )
        with get_db_session() as db:
            return [serialize_bookmark(item) for item in db.execute(stmt).scalars().all()]

    def add_bookmark(self, actor: RequestUserContext, book_id: Optional[int]) -> int:
        user_id = require_user(actor)
        if not book_id:
            raise ValidationError("Book ID required")
        with get_db_session() as db:
            book = db.get(BookModel, book_id)
            if book is None:
                raise NotFound("Book not found")
            if self._find(db, user_id, book_id) is not None:
                raise Conflict("Book already bookmarked")

            now = self._clock()
            bookmark = BookmarkModel(user_id=user_id, book_id=book_id, created_at=now)
            db.add(bookmark)
            try:
                db.flush()
            except IntegrityError as exc:
                # Lost a race with a concurrent insert of the same pair.
                raise Conflict("Book already bookmarked") from exc

            log_system_activity(
                db, user_id, f"Book bookmarked: {book.title}", ip_address=actor.ip_address, timestamp=now
            )
            return bookmark.id

    def remove_bookmark(self, actor: RequestUserContext, book_id: Optional[int]) -> None:
        user_id = require_user(actor)
        if not book_id:
            raise ValidationError("Book ID required")
        with get_db_session() as db:
            bookmark = self._find(db, user_id, book_id)
            if bookmark is None:
                raise NotFound("Bookmark not found")
            title = bookmark.book.title
            db.delete(bookmark)
            db.flush()
            log_system_activity(
                db, user_id, f"Bookmark removed: {title}", ip_address=actor.ip_address, timestamp=self._clock()
            )
            logger.debug(
                "Bookmark removed",
                extra={"event": "bookmark.removed", "user_id": user_id, "book_id": book_id},
            )

    @staticmethod
    def _find(db: Session, user_id: int, book_id: int) -> Optional[BookmarkModel]:
        return db.execute(
            select(BookmarkModel).where(
                BookmarkModel.user_id == user_id,
                BookmarkModel.book_id == book_id,
            )
        ).scalar_one_or_none()
