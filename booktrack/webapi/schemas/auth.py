"""Schemas for authentication/session endpoints."""

from __future__ import annotations

from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from .common import MessageResponse, SuccessEnvelope


class LoginRequestPayload(BaseModel):
    """Incoming payload for the login endpoint."""

    email: Optional[str] = None
    password: Optional[str] = None


class RegistrationRequestPayload(BaseModel):
    """Self-service sign-up; accepts the camelCase keys sent by the web client."""

    model_config = ConfigDict(populate_by_name=True)

    first_name: Optional[str] = Field(default=None, validation_alias=AliasChoices("firstName", "first_name"))
    middle_name: Optional[str] = Field(default=None, validation_alias=AliasChoices("middleName", "middle_name"))
    last_name: Optional[str] = Field(default=None, validation_alias=AliasChoices("lastName", "last_name"))
    suffix: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    confirm_password: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("confirmPassword", "confirm_password")
    )


class SessionUserPayload(BaseModel):
    """Lightweight description of an authenticated user."""

    id: int
    email: str
    full_name: str
    first_name: str
    last_name: str
    role: str


class LoginResponse(MessageResponse):
    user: SessionUserPayload
    token: str


class RegistrationResponse(MessageResponse):
    user_id: int


class SessionStatusResponse(SuccessEnvelope):
    """Response payload returned for active session lookups."""

    user: SessionUserPayload
