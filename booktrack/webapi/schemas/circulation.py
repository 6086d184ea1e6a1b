"""Schemas for borrowing and reservation endpoints."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from .common import MessageResponse, SuccessEnvelope


class BorrowRequestPayload(BaseModel):
    book_id: Optional[int] = None
    due_days: Optional[int] = None


class ReturnRequestPayload(BaseModel):
    borrowing_id: Optional[int] = None
    book_id: Optional[int] = None


class ReservationRequestPayload(BaseModel):
    book_id: Optional[int] = None
    expiry_days: Optional[int] = None


class BorrowingListResponse(SuccessEnvelope):
    borrowings: List[Dict[str, Any]]


class BorrowingResponse(SuccessEnvelope):
    borrowing: Dict[str, Any]


class BorrowResponse(MessageResponse):
    borrowing_id: int
    due_date: str


class ReturnResponse(MessageResponse):
    fine_amount: float


class ReservationListResponse(SuccessEnvelope):
    reservations: List[Dict[str, Any]]


class ReservationResponse(SuccessEnvelope):
    reservation: Dict[str, Any]


class ReservationCreatedResponse(MessageResponse):
    reservation_id: int
    expiry_date: str
