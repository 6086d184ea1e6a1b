"""Schemas for catalog and bookmark endpoints."""

from __future__ import annotations

from typing import Any, Dict, List

from .common import MessageResponse, SuccessEnvelope


class BookListResponse(SuccessEnvelope):
    books: List[Dict[str, Any]]


class BookSearchResponse(BookListResponse):
    count: int


class BookResponse(SuccessEnvelope):
    book: Dict[str, Any]


class BookCreatedResponse(MessageResponse):
    book_id: int


class BookmarkListResponse(SuccessEnvelope):
    bookmarks: List[Dict[str, Any]]


class BookmarkCreatedResponse(MessageResponse):
    bookmark_id: int
