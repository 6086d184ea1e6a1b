from __future__ import annotations

import pytest

from booktrack.errors import Conflict, NotFound, Unauthenticated, ValidationError
from booktrack.services.bookmark_service import BookmarkService


@pytest.fixture
def bookmark_service(clock) -> BookmarkService:
    return BookmarkService(clock=clock)


def test_add_and_list_bookmarks_newest_first(bookmark_service, member, seed, clock) -> None:
    first = bookmark_service.add_bookmark(member, seed.book_ids[0])
    clock.advance(minutes=1)
    second = bookmark_service.add_bookmark(member, seed.book_ids[1])

    listing = bookmark_service.list_bookmarks(member)

    assert [item["id"] for item in listing] == [second, first]
    assert listing[0]["title"] == "Orbits and Tides"
    assert listing[0]["category"] == "Science"


def test_bookmarks_are_private(bookmark_service, member, other_member, seed) -> None:
    bookmark_service.add_bookmark(member, seed.book_ids[0])

    assert bookmark_service.list_bookmarks(other_member) == []
    with pytest.raises(NotFound, match="Bookmark not found"):
        bookmark_service.remove_bookmark(other_member, seed.book_ids[0])


def test_duplicate_bookmark_conflicts(bookmark_service, member, seed) -> None:
    bookmark_service.add_bookmark(member, seed.book_ids[0])

    with pytest.raises(Conflict, match="Book already bookmarked"):
        bookmark_service.add_bookmark(member, seed.book_ids[0])


def test_bookmark_validation(bookmark_service, member, anonymous, seed) -> None:
    with pytest.raises(ValidationError, match="Book ID required"):
        bookmark_service.add_bookmark(member, None)
    with pytest.raises(NotFound, match="Book not found"):
        bookmark_service.add_bookmark(member, 31337)
    with pytest.raises(Unauthenticated):
        bookmark_service.list_bookmarks(anonymous)


def test_remove_bookmark(bookmark_service, member, seed) -> None:
    bookmark_service.add_bookmark(member, seed.book_ids[2])

    bookmark_service.remove_bookmark(member, seed.book_ids[2])

    assert bookmark_service.list_bookmarks(member) == []
