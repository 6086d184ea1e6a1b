"""Shared writer for the append-only ``system_logs`` audit trail."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from .. import logging_manager
from ..clock import local_now
from ..database.models import LOG_LEVELS, SystemLogModel

logger = logging_manager.get_logger().getChild("audit")


def log_system_activity(
    db: Session,
    user_id: Optional[int],
    action: str,
    *,
    level: str = "info",
    ip_address: Optional[str] = None,
    details: Optional[str] = None,
    timestamp: Optional[datetime] = None,
) -> SystemLogModel:
    """Append an audit entry inside the caller's transaction."""

    if level not in LOG_LEVELS:
        raise ValueError(f"Unsupported log level '{level}'")
    entry = SystemLogModel(
        user_id=user_id,
        action=action,
        details=details,
        level=level,
        ip_address=ip_address,
        created_at=timestamp or local_now(),
    )
    db.add(entry)
    db.flush()
    logger.log(
        logging.WARNING if level in ("warning", "error") else logging.INFO,
        action,
        extra={"event": "audit.recorded", "user_id": user_id, "audit_level": level},
    )
    return entry


__all__ = ["log_system_activity"]
