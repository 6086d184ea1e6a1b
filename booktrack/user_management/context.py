"""Per-request identity produced by the session-validation layer."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RequestUserContext:
    """Identity resolved from the session cookie or bearer token."""

    user_id: int | None
    email: str | None = None
    role: str | None = None
    token: str | None = None
    ip_address: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    @classmethod
    def anonymous(cls, ip_address: str | None = None) -> "RequestUserContext":
        return cls(user_id=None, ip_address=ip_address)
