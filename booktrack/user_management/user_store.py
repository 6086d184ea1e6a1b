"""Database-backed user lookups and bcrypt password hashing."""

from __future__ import annotations

import logging
from typing import Optional

import bcrypt
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..database.models import UserModel
from ..permissions import ROLE_USER

_log = logging.getLogger(__name__)

# bcrypt only considers the first 72 bytes of the secret.
_BCRYPT_MAX_BYTES = 72


def _encode_password(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


class UserStore:
    """Persist users through a caller-provided SQLAlchemy session."""

    def get(self, db: Session, user_id: int) -> Optional[UserModel]:
        return db.get(UserModel, user_id)

    def find_by_email(self, db: Session, email: str) -> Optional[UserModel]:
        normalized = email.strip().lower()
        return db.execute(
            select(UserModel).where(func.lower(UserModel.email) == normalized)
        ).scalar_one_or_none()

    def email_exists(self, db: Session, email: str) -> bool:
        return self.find_by_email(db, email) is not None

    def create_user(
        self,
        db: Session,
        *,
        first_name: str,
        last_name: str,
        email: str,
        password: str,
        middle_name: Optional[str] = None,
        suffix: Optional[str] = None,
        role: str = ROLE_USER,
        status: str = "active",
    ) -> UserModel:
        model = UserModel(
            first_name=first_name,
            middle_name=middle_name or None,
            last_name=last_name,
            suffix=suffix or None,
            email=email.strip(),
            password_hash=self.hash_password(password),
            role=role,
            status=status,
        )
        db.add(model)
        db.flush()
        _log.info(
            "Created user account",
            extra={"event": "user.created", "user_id": model.id, "role": role},
        )
        return model

    def set_password(self, user: UserModel, password: str) -> None:
        user.password_hash = self.hash_password(password)

    def verify_password(self, user: UserModel, password: str) -> bool:
        stored = user.password_hash or ""
        try:
            return bcrypt.checkpw(_encode_password(password), stored.encode("utf-8"))
        except ValueError:
            _log.warning(
                "Stored password hash is not a bcrypt hash",
                extra={"event": "user.password.invalid_hash", "user_id": user.id},
            )
            return False

    @staticmethod
    def hash_password(password: str) -> str:
        return bcrypt.hashpw(_encode_password(password), bcrypt.gensalt()).decode("utf-8")
