"""Read and prune the audit trail (log administrators only)."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy import select

from .. import logging_manager
from ..clock import Clock, local_now
from ..database.engine import get_db_session
from ..database.models import LOG_LEVELS, SystemLogModel
from ..errors import NotFound
from ..permissions import LOG_ADMINS
from ..user_management.context import RequestUserContext
from .activity_log import log_system_activity
from .common import display_name, iso_timestamp, page_window, require_capability

logger = logging_manager.get_logger().getChild("system_log_service")

DEFAULT_PAGE_SIZE = 100


def serialize_log(entry: SystemLogModel) -> Dict[str, Any]:
    user = entry.user
    created = iso_timestamp(entry.created_at)
    return {
        "id": entry.id,
        "user_id": entry.user_id,
        "user_name": display_name(user.first_name, user.last_name) if user is not None else "System",
        "user_email": user.email if user is not None else None,
        "action": entry.action,
        "details": entry.details,
        "level": entry.level,
        "ip_address": entry.ip_address,
        "timestamp": created,
        "created_at": created,
    }


class SystemLogService:
    def __init__(self, *, clock: Clock = local_now) -> None:
        self._clock = clock

    def list_logs(
        self,
        actor: RequestUserContext,
        *,
        level: Optional[str] = None,
        user_id: Optional[int] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        self._authorize(actor)
        limit, offset = page_window(limit, offset, DEFAULT_PAGE_SIZE)
        stmt = select(SystemLogModel)
        # Unknown levels are ignored rather than rejected.
        if level and level in LOG_LEVELS:
            stmt = stmt.where(SystemLogModel.level == level)
        if user_id is not None:
            stmt = stmt.where(SystemLogModel.user_id == user_id)
        stmt = (
            stmt.order_by(SystemLogModel.created_at.desc(), SystemLogModel.id.desc())
            .limit(limit)
            .offset(offset)
        )
        with get_db_session() as db:
            return [serialize_log(entry) for entry in db.execute(stmt).scalars().all()]

    def get_log(self, actor: RequestUserContext, log_id: int) -> Dict[str, Any]:
        self._authorize(actor)
        with get_db_session() as db:
            entry = db.get(SystemLogModel, log_id)
            if entry is None:
                raise NotFound("Log not found")
            return serialize_log(entry)

    def delete_log(self, actor: RequestUserContext, log_id: int) -> None:
        self._authorize(actor)
        with get_db_session() as db:
            entry = db.get(SystemLogModel, log_id)
            if entry is None:
                raise NotFound("Log not found")
            db.delete(entry)
            db.flush()
            log_system_activity(
                db,
                actor.user_id,
                f"Log deleted: ID {log_id}",
                ip_address=actor.ip_address,
                timestamp=self._clock(),
            )
            logger.warning(
                "Audit entry deleted",
                extra={"event": "system_log.deleted", "user_id": actor.user_id, "log_id": log_id},
            )

    @staticmethod
    def _authorize(actor: RequestUserContext) -> None:
        # Anonymous callers get 403 here, not 401.
        require_capability(actor, LOG_ADMINS)
