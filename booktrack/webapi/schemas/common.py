"""Envelope shared by every endpoint."""

from __future__ import annotations

from pydantic import BaseModel


class SuccessEnvelope(BaseModel):
    success: bool = True


class MessageResponse(SuccessEnvelope):
    """Acknowledgement carrying only a human-readable message."""

    message: str
