"""Catalog endpoints: listing, search and editor maintenance."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Body, Depends, Query

from ...errors import ValidationError
from ...permissions import BOOK_EDITORS
from ...services.book_service import BookService
from ...services.common import require_capability
from ...services.patches import BookPatch
from ..dependencies import RequestUserContext, get_book_service, get_request_user
from ..schemas import (
    BookCreatedResponse,
    BookListResponse,
    BookResponse,
    BookSearchResponse,
    MessageResponse,
)

router = APIRouter()


@router.get("", response_model=BookResponse | BookSearchResponse | BookListResponse)
def get_books(
    book_id: Optional[int] = Query(default=None, alias="id"),
    action: str = Query(default=""),
    q: Optional[str] = Query(default=None),
    category: Optional[str] = Query(default=None),
    availability: Optional[str] = Query(default=None),
    limit: Optional[int] = Query(default=None),
    offset: Optional[int] = Query(default=None),
    book_service: BookService = Depends(get_book_service),
):
    if book_id:
        return BookResponse(book=book_service.get_book(book_id))
    if action == "search":
        books = book_service.search_books(
            query=q, category=category, availability=availability, limit=limit, offset=offset
        )
        return BookSearchResponse(books=books, count=len(books))
    return BookListResponse(books=book_service.list_books(limit=limit, offset=offset))


@router.post("", response_model=BookCreatedResponse)
def create_book(
    payload: Optional[BookPatch] = Body(default=None),
    request_user: RequestUserContext = Depends(get_request_user),
    book_service: BookService = Depends(get_book_service),
) -> BookCreatedResponse:
    book_id = book_service.create_book(request_user, payload or BookPatch())
    return BookCreatedResponse(message="Book created successfully", book_id=book_id)


@router.put("", response_model=MessageResponse)
def update_book(
    book_id: Optional[int] = Query(default=None, alias="id"),
    payload: Optional[BookPatch] = Body(default=None),
    request_user: RequestUserContext = Depends(get_request_user),
    book_service: BookService = Depends(get_book_service),
) -> MessageResponse:
    require_capability(request_user, BOOK_EDITORS)
    if not book_id:
        raise ValidationError("Book ID required")
    book_service.update_book(request_user, book_id, payload or BookPatch())
    return MessageResponse(message="Book updated successfully")


@router.delete("", response_model=MessageResponse)
def delete_book(
    book_id: Optional[int] = Query(default=None, alias="id"),
    request_user: RequestUserContext = Depends(get_request_user),
    book_service: BookService = Depends(get_book_service),
) -> MessageResponse:
    require_capability(request_user, BOOK_EDITORS)
    if not book_id:
        raise ValidationError("Book ID required")
    book_service.delete_book(request_user, book_id)
    return MessageResponse(message="Book deleted successfully")
