"""Partial-update value objects.

Each model lists the only fields a client may change on its resource.
Unknown keys are dropped and so are null values; only the supplied
fields are written.
"""

from __future__ import annotations

from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

BookAvailability = Literal["available", "borrowed", "reserved"]
NotificationPriority = Literal["low", "medium", "high"]
UserStatus = Literal["active", "suspended", "inactive"]
UserRole = Literal["user", "admin", "library_admin", "library_moderator"]


class PartialUpdate(BaseModel):
    """Base for patch payloads: only explicitly supplied fields count."""

    model_config = ConfigDict(extra="ignore")

    def changes(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True, exclude_none=True)

    def is_empty(self) -> bool:
        return not self.changes()


class BookPatch(PartialUpdate):
    """Editable catalog fields of a book."""

    title: Optional[str] = Field(default=None, max_length=255)
    author: Optional[str] = Field(default=None, max_length=255)
    isbn: Optional[str] = Field(default=None, max_length=32)
    category_id: Optional[int] = None
    genre: Optional[str] = Field(default=None, max_length=100)
    description: Optional[str] = None
    cover_image: Optional[str] = Field(default=None, max_length=500)
    publisher: Optional[str] = Field(default=None, max_length=255)
    publish_year: Optional[int] = None
    pages: Optional[int] = Field(default=None, ge=0)
    language: Optional[str] = Field(default=None, max_length=50)
    location: Optional[str] = Field(default=None, max_length=100)
    call_number: Optional[str] = Field(default=None, max_length=50)
    availability: Optional[BookAvailability] = None


class NotificationPatch(PartialUpdate):
    """Fields a user may change on one of their notifications."""

    is_read: Optional[bool] = None
    priority: Optional[NotificationPriority] = None


class ProfilePatch(PartialUpdate):
    """Profile fields; ``status`` and ``role`` are honoured for user admins only."""

    first_name: Optional[str] = Field(default=None, max_length=100)
    middle_name: Optional[str] = Field(default=None, max_length=100)
    last_name: Optional[str] = Field(default=None, max_length=100)
    suffix: Optional[str] = Field(default=None, max_length=20)
    phone: Optional[str] = Field(default=None, max_length=32)
    address: Optional[str] = None
    profile_image: Optional[str] = Field(default=None, max_length=500)
    status: Optional[UserStatus] = None
    role: Optional[UserRole] = None
    password: Optional[str] = None
    current_password: Optional[str] = None


PROFILE_FIELDS = frozenset(
    {"first_name", "middle_name", "last_name", "suffix", "phone", "address", "profile_image"}
)
PROFILE_ADMIN_FIELDS = frozenset({"status", "role"})
