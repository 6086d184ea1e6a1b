"""Routes for per-user bookmark storage."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from ...services.bookmark_service import BookmarkService
from ..dependencies import RequestUserContext, get_authenticated_user, get_bookmark_service
from ..schemas import BookmarkCreatedResponse, BookmarkListResponse, MessageResponse

router = APIRouter()


@router.get("", response_model=BookmarkListResponse)
def list_bookmarks(
    request_user: RequestUserContext = Depends(get_authenticated_user),
    bookmark_service: BookmarkService = Depends(get_bookmark_service),
) -> BookmarkListResponse:
    return BookmarkListResponse(bookmarks=bookmark_service.list_bookmarks(request_user))


@router.post("", response_model=BookmarkCreatedResponse)
def add_bookmark(
    book_id: Optional[int] = Query(default=None),
    request_user: RequestUserContext = Depends(get_authenticated_user),
    bookmark_service: BookmarkService = Depends(get_bookmark_service),
) -> BookmarkCreatedResponse:
    bookmark_id = bookmark_service.add_bookmark(request_user, book_id)
    return BookmarkCreatedResponse(message="Book bookmarked successfully", bookmark_id=bookmark_id)


@router.delete("", response_model=MessageResponse)
def remove_bookmark(
    book_id: Optional[int] = Query(default=None),
    request_user: RequestUserContext = Depends(get_authenticated_user),
    bookmark_service: BookmarkService = Depends(get_bookmark_service),
) -> MessageResponse:
    bookmark_service.remove_bookmark(request_user, book_id)
    return MessageResponse(message="Bookmark removed successfully")
