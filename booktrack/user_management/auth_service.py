"""Authentication built on top of the user store and session manager."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..clock import Clock, local_now
from ..database.engine import get_db_session
from ..database.models import UserModel
from ..errors import (
    AccountInactive,
    EmailTaken,
    Forbidden,
    InvalidCredentials,
    Unauthenticated,
    ValidationError,
)
from ..permissions import ROLE_USER, normalize_role
from ..services.activity_log import log_system_activity
from .context import RequestUserContext
from .session_manager import SessionManager
from .user_store import UserStore

_log = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def is_valid_email(value: str) -> bool:
    return bool(_EMAIL_PATTERN.match(value))


def serialize_session_user(user: UserModel) -> Dict[str, Any]:
    return {
        "id": user.id,
        "email": user.email,
        "full_name": user.full_name,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "role": user.role,
    }


@dataclass(frozen=True)
class LoginResult:
    token: str
    user: Dict[str, Any]


class AuthService:
    """Coordinate login, registration, session checks and logout."""

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

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------
    def login(
        self,
        email: Optional[str],
        password: Optional[str],
        *,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> LoginResult:
        """Validate credentials and open a server-side session."""
        email = (email or "").strip()
        if not email or not password:
            raise ValidationError("Email and password are required")

        with get_db_session() as db:
            user = self._user_store.find_by_email(db, email)
            if user is None or not self._user_store.verify_password(user, password):
                _log.info("Rejected login attempt", extra={"event": "auth.login.rejected"})
                raise InvalidCredentials()
            if user.status != "active":
                raise AccountInactive()

            now = self._clock()
            user.last_login = now
            token = self._session_manager.create_session(
                db, user, ip_address=ip_address, user_agent=user_agent
            )
            log_system_activity(db, user.id, "User logged in", ip_address=ip_address, timestamp=now)
            _log.info("User logged in", extra={"event": "auth.login", "user_id": user.id})
            return LoginResult(token=token, user=serialize_session_user(user))

    def register(
        self,
        *,
        first_name: Optional[str],
        last_name: Optional[str],
        email: Optional[str],
        password: Optional[str],
        confirm_password: Optional[str],
        middle_name: Optional[str] = None,
        suffix: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> int:
        """Create a regular ``user`` account and return its id."""
        first_name = (first_name or "").strip()
        last_name = (last_name or "").strip()
        email = (email or "").strip()
        if not first_name or not last_name or not email or not password:
            raise ValidationError("First name, last name, email, and password are required")
        if password != confirm_password:
            raise ValidationError("Passwords do not match")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        if not is_valid_email(email):
            raise ValidationError("Invalid email format")

        with get_db_session() as db:
            if self._user_store.email_exists(db, email):
                raise EmailTaken()
            user = self._user_store.create_user(
                db,
                first_name=first_name,
                middle_name=(middle_name or "").strip() or None,
                last_name=last_name,
                suffix=(suffix or "").strip() or None,
                email=email,
                password=password,
                role=ROLE_USER,
            )
            log_system_activity(
                db, user.id, "New user registered", ip_address=ip_address, timestamp=self._clock()
            )
            return user.id

    def check_session(self, token: Optional[str]) -> Dict[str, Any]:
        """Re-validate the session owner; stale sessions are revoked."""
        if not token:
            raise Unauthenticated("Not authenticated")

        with get_db_session() as db:
            session = self._session_manager.get_session(db, token)
            if session is None:
                # Keep the purge of an expired row.
                db.commit()
                raise Unauthenticated("Not authenticated")
            user = self._user_store.get(db, session.user_id)
            if user is None:
                self._session_manager.delete_session(db, token)
                db.commit()
                raise Unauthenticated("Session invalid")
            if user.status != "active":
                self._session_manager.delete_session(db, token)
                db.commit()
                raise Forbidden("Account is suspended")
            return serialize_session_user(user)

    def logout(self, token: Optional[str], *, ip_address: Optional[str] = None) -> bool:
        """Terminate the session if present."""
        if not token:
            return False
        with get_db_session() as db:
            user_id = self._session_manager.delete_session(db, token)
            if user_id is None:
                return False
            log_system_activity(db, user_id, "User logged out", ip_address=ip_address, timestamp=self._clock())
            _log.info("User logged out", extra={"event": "auth.logout", "user_id": user_id})
            return True

    def authenticate(
        self, token: Optional[str], *, ip_address: Optional[str] = None
    ) -> RequestUserContext:
        """Resolve a session token into the per-request identity."""
        if not token:
            return RequestUserContext.anonymous(ip_address)
        with get_db_session() as db:
            session = self._session_manager.get_session(db, token)
            if session is None:
                return RequestUserContext.anonymous(ip_address)
            user = self._user_store.get(db, session.user_id)
            if user is None or user.status != "active":
                return RequestUserContext.anonymous(ip_address)
            return RequestUserContext(
                user_id=user.id,
                email=user.email,
                role=normalize_role(user.role),
                token=token,
                ip_address=ip_address,
            )

    @property
    def session_manager(self) -> SessionManager:
        return self._session_manager

    @property
    def user_store(self) -> UserStore:
        return self._user_store
