"""Server-side session store keyed by an opaque token."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Optional
from uuid import uuid4

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from ..clock import Clock, local_now
from ..database.models import SessionModel, UserModel

_log = logging.getLogger(__name__)


class SessionManager:
    """Issue, resolve and revoke session tokens stored in the ``sessions`` table."""

    def __init__(self, *, ttl_hours: int = 24, clock: Clock = local_now) -> None:
        self._ttl = timedelta(hours=ttl_hours)
        self._clock = clock

    @property
    def ttl_seconds(self) -> int:
        return int(self._ttl.total_seconds())

    def create_session(
        self,
        db: Session,
        user: UserModel,
        *,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> str:
        token = uuid4().hex
        now = self._clock()
        db.add(
            SessionModel(
                token=token,
                user_id=user.id,
                email=user.email,
                role=user.role,
                created_at=now,
                last_active_at=now,
                expires_at=now + self._ttl,
                ip_address=ip_address,
                user_agent=user_agent,
            )
        )
        db.flush()
        return token

    def get_session(self, db: Session, token: str) -> Optional[SessionModel]:
        """Return the live session for ``token``; expired rows are removed."""

        model = db.execute(
            select(SessionModel).where(SessionModel.token == token)
        ).scalar_one_or_none()
        if model is None:
            return None
        now = self._clock()
        if model.expires_at is not None and model.expires_at <= now:
            _log.info(
                "Session expired",
                extra={"event": "session.expired", "user_id": model.user_id},
            )
            db.delete(model)
            db.flush()
            return None
        model.last_active_at = now
        return model

    def delete_session(self, db: Session, token: str) -> Optional[int]:
        """Remove ``token`` and return the user id it belonged to."""

        model = db.execute(
            select(SessionModel).where(SessionModel.token == token)
        ).scalar_one_or_none()
        if model is None:
            return None
        user_id = model.user_id
        db.delete(model)
        db.flush()
        return user_id

    def clear_sessions_for_user(self, db: Session, user_id: int) -> int:
        result = db.execute(delete(SessionModel).where(SessionModel.user_id == user_id))
        return result.rowcount or 0
