"""Reservation endpoints."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Body, Depends, Query

from ...errors import ValidationError
from ...services.reservation_service import ReservationService
from ..dependencies import RequestUserContext, get_authenticated_user, get_reservation_service
from ..schemas import (
    MessageResponse,
    ReservationCreatedResponse,
    ReservationListResponse,
    ReservationRequestPayload,
    ReservationResponse,
)

router = APIRouter()


@router.get("", response_model=ReservationResponse | ReservationListResponse)
def get_reservations(
    reservation_id: Optional[int] = Query(default=None, alias="id"),
    action: str = Query(default=""),
    request_user: RequestUserContext = Depends(get_authenticated_user),
    reservation_service: ReservationService = Depends(get_reservation_service),
):
    if reservation_id:
        return ReservationResponse(
            reservation=reservation_service.get_reservation(request_user, reservation_id)
        )
    if action == "my":
        return ReservationListResponse(reservations=reservation_service.list_for_user(request_user))
    return ReservationListResponse(reservations=reservation_service.list_all(request_user))


@router.post("", response_model=ReservationCreatedResponse)
def create_reservation(
    action: str = Query(default=""),
    payload: Optional[ReservationRequestPayload] = Body(default=None),
    request_user: RequestUserContext = Depends(get_authenticated_user),
    reservation_service: ReservationService = Depends(get_reservation_service),
) -> ReservationCreatedResponse:
    if action != "create":
        raise ValidationError("Invalid action")
    request = payload or ReservationRequestPayload()
    result = reservation_service.create(request_user, request.book_id, request.expiry_days)
    return ReservationCreatedResponse(message="Book reserved successfully", **result)


@router.delete("", response_model=MessageResponse)
def cancel_reservation(
    reservation_id: Optional[int] = Query(default=None, alias="id"),
    request_user: RequestUserContext = Depends(get_authenticated_user),
    reservation_service: ReservationService = Depends(get_reservation_service),
) -> MessageResponse:
    if not reservation_id:
        raise ValidationError("Reservation ID required")
    reservation_service.cancel(request_user, reservation_id)
    return MessageResponse(message="Reservation cancelled successfully")
