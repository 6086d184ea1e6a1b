"""Per-user notification inbox and the shared fan-out helper."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import Session

from .. import logging_manager
from ..clock import local_now
from ..database.engine import get_db_session
from ..database.models import NOTIFICATION_TYPES, NotificationModel
from ..errors import NotFound, ValidationError
from ..user_management.context import RequestUserContext
from .common import iso_timestamp, page_window, require_user
from .patches import NotificationPatch

logger = logging_manager.get_logger().getChild("notification_service")

DEFAULT_PAGE_SIZE = 50
NOTIFICATION_FILTERS = ("all", "unread") + NOTIFICATION_TYPES


def create_notification(
    db: Session,
    user_id: int,
    kind: str,
    title: str,
    message: str,
    *,
    book_id: Optional[int] = None,
    priority: str = "medium",
    timestamp: Optional[datetime] = None,
) -> NotificationModel:
    """Queue a notification for ``user_id`` inside the caller's transaction."""

    if kind not in NOTIFICATION_TYPES:
        raise ValueError(f"Unsupported notification type '{kind}'")
    notification = NotificationModel(
        user_id=user_id,
        type=kind,
        title=title,
        message=message,
        book_id=book_id,
        priority=priority,
        is_read=False,
        created_at=timestamp or local_now(),
    )
    db.add(notification)
    db.flush()
    logger.debug(
        "Queued notification",
        extra={"event": "notification.created", "user_id": user_id, "kind": kind},
    )
    return notification


def serialize_notification(model: NotificationModel) -> Dict[str, Any]:
    created = iso_timestamp(model.created_at)
    return {
        "id": model.id,
        "type": model.type,
        "title": model.title,
        "message": model.message,
        "book_id": model.book_id,
        "book_title": model.book.title if model.book is not None else None,
        "is_read": bool(model.is_read),
        "priority": model.priority,
        "created_at": created,
        "timestamp": created,
    }


class NotificationService:
    """Read and manage the caller's own notifications."""

    def list_notifications(
        self,
        actor: RequestUserContext,
        *,
        filter_name: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> Dict[str, Any]:
        user_id = require_user(actor)
        limit, offset = page_window(limit, offset, DEFAULT_PAGE_SIZE)
        filter_name = (filter_name or "all").strip().lower()

        stmt = select(NotificationModel).where(NotificationModel.user_id == user_id)
        if filter_name == "unread":
            stmt = stmt.where(NotificationModel.is_read.is_(False))
        elif filter_name in NOTIFICATION_TYPES:
            stmt = stmt.where(NotificationModel.type == filter_name)
        stmt = stmt.order_by(NotificationModel.created_at.desc(), NotificationModel.id.desc())

        with get_db_session() as db:
            models = db.execute(stmt.limit(limit).offset(offset)).scalars().all()
            return {
                "notifications": [serialize_notification(model) for model in models],
                "unread_count": self._unread_count(db, user_id),
            }

    def get_notification(self, actor: RequestUserContext, notification_id: int) -> Dict[str, Any]:
        user_id = require_user(actor)
        with get_db_session() as db:
            return serialize_notification(self._owned(db, user_id, notification_id))

    def mark_read(self, actor: RequestUserContext, notification_id: int) -> None:
        user_id = require_user(actor)
        with get_db_session() as db:
            self._owned(db, user_id, notification_id).is_read = True

    def mark_all_read(self, actor: RequestUserContext) -> int:
        user_id = require_user(actor)
        with get_db_session() as db:
            result = db.execute(
                update(NotificationModel)
                .where(NotificationModel.user_id == user_id, NotificationModel.is_read.is_(False))
                .values(is_read=True)
            )
            return result.rowcount or 0

    def update_notification(
        self, actor: RequestUserContext, notification_id: int, patch: NotificationPatch
    ) -> None:
        user_id = require_user(actor)
        if patch.is_empty():
            raise ValidationError("No fields to update")
        with get_db_session() as db:
            model = self._owned(db, user_id, notification_id)
            for field, value in patch.changes().items():
                setattr(model, field, value)

    def delete_notification(self, actor: RequestUserContext, notification_id: int) -> None:
        user_id = require_user(actor)
        with get_db_session() as db:
            db.delete(self._owned(db, user_id, notification_id))

    def clear_all(self, actor: RequestUserContext) -> int:
        user_id = require_user(actor)
        with get_db_session() as db:
            result = db.execute(delete(NotificationModel).where(NotificationModel.user_id == user_id))
            return result.rowcount or 0

    @staticmethod
    def _owned(db: Session, user_id: int, notification_id: int) -> NotificationModel:
        model = db.execute(
            select(NotificationModel).where(
                NotificationModel.id == notification_id,
                NotificationModel.user_id == user_id,
            )
        ).scalar_one_or_none()
        if model is None:
            raise NotFound("Notification not found")
        return model

    @staticmethod
    def _unread_count(db: Session, user_id: int) -> int:
        return db.execute(
            select(func.count(NotificationModel.id)).where(
                NotificationModel.user_id == user_id,
                NotificationModel.is_read.is_(False),
            )
        ).scalar_one()
