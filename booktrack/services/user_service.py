"""Profile reads and updates, and user administration."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from .. import logging_manager
from ..clock import Clock, local_now
from ..database.engine import get_db_session
from ..database.models import UserModel
from ..errors import Forbidden, NotFound, ValidationError, Unauthenticated
from ..permissions import USER_ADMINS, USER_STATUSES, VALID_ROLES, has_capability
from ..user_management.context import RequestUserContext
from ..user_management.session_manager import SessionManager
from ..user_management.user_store import UserStore
from .activity_log import log_system_activity
from .common import iso_timestamp, page_window, require_capability, require_user
from .patches import PROFILE_ADMIN_FIELDS, PROFILE_FIELDS, ProfilePatch

logger = logging_manager.get_logger().getChild("user_service")

DEFAULT_PAGE_SIZE = 50
MIN_PASSWORD_LENGTH = 6


def serialize_user(user: UserModel) -> Dict[str, Any]:
    return {
        "id": user.id,
        "first_name": user.first_name,
        "middle_name": user.middle_name,
        "last_name": user.last_name,
        "suffix": user.suffix,
        "full_name": user.full_name,
        "email": user.email,
        "role": user.role,
        "profile_image": user.profile_image,
        "phone": user.phone,
        "address": user.address,
        "status": user.status,
        "created_at": iso_timestamp(user.created_at),
        "last_login": iso_timestamp(user.last_login),
    }


class UserService:
    """Self-service profile management plus the ``USER_ADMINS`` console."""

    def __init__(
        self,
        user_store: Optional[UserStore] = None,
        session_manager: Optional[SessionManager] = None,
        *,
        clock: Clock = local_now,
    ) -> None:
        self._user_store = user_store or UserStore()
        self._session_manager = session_manager or SessionManager(clock=clock)
        self._clock = clock

    def get_profile(self, actor: RequestUserContext, user_id: Optional[int] = None) -> Dict[str, Any]:
        caller_id = require_user(actor)
        target_id = user_id or caller_id
        if target_id != caller_id and not has_capability(actor.role, USER_ADMINS):
            raise Forbidden("Access denied")
        with get_db_session() as db:
            return serialize_user(self._load(db, target_id))

    def list_users(
        self,
        actor: RequestUserContext,
        *,
        status: Optional[str] = None,
        role: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        require_user(actor)
        require_capability(actor, USER_ADMINS)
        limit, offset = page_window(limit, offset, DEFAULT_PAGE_SIZE)
        stmt = select(UserModel)
        # Unrecognised filter values are ignored.
        if status and status in USER_STATUSES:
            stmt = stmt.where(UserModel.status == status)
        if role and role in VALID_ROLES:
            stmt = stmt.where(UserModel.role == role)
        stmt = stmt.order_by(UserModel.created_at.desc(), UserModel.id.desc()).limit(limit).offset(offset)
        with get_db_session() as db:
            return [serialize_user(user) for user in db.execute(stmt).scalars().all()]

    def update_profile(
        self, actor: RequestUserContext, patch: ProfilePatch, user_id: Optional[int] = None
    ) -> None:
        """Apply ``patch`` to the caller, or to ``user_id`` for user admins.

        Admins may additionally change ``status`` and, for accounts other
        than their own, ``role``. A password change needs the target's
        current password.
        """
        caller_id = require_user(actor)
        is_admin = has_capability(actor.role, USER_ADMINS)
        target_id = user_id or caller_id
        if target_id != caller_id and not is_admin:
            raise Forbidden("Access denied")

        allowed = set(PROFILE_FIELDS)
        if is_admin:
            allowed.add("status")
            if target_id != caller_id:
                allowed.add("role")
        requested = patch.changes()
        changes = {field: value for field, value in requested.items() if field in allowed}
        new_password = requested.get("password")
        current_password = requested.get("current_password")

        with get_db_session() as db:
            user = self._load(db, target_id)
            if new_password is not None and current_password is not None:
                if not self._user_store.verify_password(user, current_password):
                    raise Unauthenticated("Current password is incorrect")
                if len(new_password) < MIN_PASSWORD_LENGTH:
                    raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
                self._user_store.set_password(user, new_password)
            elif not changes:
                raise ValidationError("No fields to update")

            for field, value in changes.items():
                setattr(user, field, value)
            if changes.get("status", "active") != "active":
                # Suspended accounts lose every open session immediately.
                self._session_manager.clear_sessions_for_user(db, target_id)
            user.updated_at = self._clock()
            log_system_activity(
                db,
                caller_id,
                f"Profile updated: User ID {target_id}",
                ip_address=actor.ip_address,
                timestamp=self._clock(),
            )
            ignored = sorted(set(requested) & PROFILE_ADMIN_FIELDS - allowed)
            logger.info(
                "Profile updated",
                extra={
                    "event": "user.profile.updated",
                    "user_id": caller_id,
                    "target_user_id": target_id,
                    "fields": sorted(changes),
                    "ignored_fields": ignored,
                },
            )

    def delete_user(self, actor: RequestUserContext, user_id: Optional[int]) -> None:
        caller_id = require_user(actor)
        require_capability(actor, USER_ADMINS)
        if not user_id:
            raise ValidationError("User ID required")
        if user_id == caller_id:
            raise ValidationError("Cannot delete your own account")
        with get_db_session() as db:
            user = self._load(db, user_id)
            email = user.email
            db.delete(user)
            db.flush()
            log_system_activity(
                db,
                caller_id,
                f"User deleted: {email}",
                level="warning",
                ip_address=actor.ip_address,
                timestamp=self._clock(),
            )
            logger.warning(
                "User deleted",
                extra={"event": "user.deleted", "user_id": caller_id, "target_user_id": user_id},
            )

    @staticmethod
    def _load(db: Session, user_id: int) -> UserModel:
        user = db.get(UserModel, user_id)
        if user is None:
            raise NotFound("User not found")
        return user
