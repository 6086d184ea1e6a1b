"""Borrow/return endpoints and borrowing listings."""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query

from ...errors import ValidationError
from ...services.borrowing_service import BorrowingService
from ..dependencies import RequestUserContext, get_authenticated_user, get_borrowing_service
from ..schemas import (
    BorrowRequestPayload,
    BorrowResponse,
    BorrowingListResponse,
    BorrowingResponse,
    ReturnRequestPayload,
    ReturnResponse,
)

router = APIRouter()


@router.get("", response_model=BorrowingResponse | BorrowingListResponse)
def get_borrowings(
    borrowing_id: Optional[int] = Query(default=None, alias="id"),
    action: str = Query(default=""),
    status_filter: Optional[str] = Query(default=None, alias="status"),
    request_user: RequestUserContext = Depends(get_authenticated_user),
    borrowing_service: BorrowingService = Depends(get_borrowing_service),
):
    if borrowing_id:
        return BorrowingResponse(borrowing=borrowing_service.get_borrowing(request_user, borrowing_id))
    if action == "my":
        return BorrowingListResponse(borrowings=borrowing_service.list_for_user(request_user, status_filter))
    return BorrowingListResponse(borrowings=borrowing_service.list_all(request_user))


@router.post("", response_model=BorrowResponse | ReturnResponse)
def post_borrowing(
    action: str = Query(default=""),
    payload: Optional[Dict[str, Any]] = Body(default=None),
    request_user: RequestUserContext = Depends(get_authenticated_user),
    borrowing_service: BorrowingService = Depends(get_borrowing_service),
):
    if action == "borrow":
        request = BorrowRequestPayload.model_validate(payload or {})
        result = borrowing_service.borrow(request_user, request.book_id, request.due_days)
        return BorrowResponse(message="Book borrowed successfully", **result)
    if action == "return":
        request = ReturnRequestPayload.model_validate(payload or {})
        result = borrowing_service.return_book(
            request_user, borrowing_id=request.borrowing_id, book_id=request.book_id
        )
        return ReturnResponse(message="Book returned successfully", **result)
    raise ValidationError("Invalid action")
