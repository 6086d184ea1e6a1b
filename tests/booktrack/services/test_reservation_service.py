from __future__ import annotations

from datetime import timedelta

import pytest
from sqlalchemy import select

from booktrack.database import get_db_session
from booktrack.database.models import BookModel, NotificationModel, ReservationModel
from booktrack.errors import Conflict, DuplicateBorrow, Forbidden, NotFound, ValidationError
from booktrack.services.borrowing_service import BorrowingService
from booktrack.services.reservation_service import ReservationService


@pytest.fixture
def reservation_service(clock) -> ReservationService:
    return ReservationService(clock=clock)


def _availability(book_id: int) -> str:
    with get_db_session() as db:
        return db.get(BookModel, book_id).availability


def test_reserving_available_book_holds_it(reservation_service, member, seed, clock) -> None:
    book_id = seed.book_ids[0]

    result = reservation_service.create(member, book_id)

    assert result["expiry_date"] == (clock.now.date() + timedelta(days=7)).isoformat()
    assert _availability(book_id) == "reserved"
    with get_db_session() as db:
        reservation = db.get(ReservationModel, result["reservation_id"])
        assert reservation.status == "available"
        notification = db.execute(
            select(NotificationModel).where(NotificationModel.user_id == member.user_id)
        ).scalar_one()
    assert notification.type == "available"
    assert notification.title == "Reserved Book Ready"


def test_reserving_borrowed_book_queues_pending(reservation_service, member, seed) -> None:
    book_id = seed.book_ids[3]

    result = reservation_service.create(member, book_id, expiry_days=3)

    assert _availability(book_id) == "borrowed"
    with get_db_session() as db:
        assert db.get(ReservationModel, result["reservation_id"]).status == "pending"
        titles = db.execute(select(NotificationModel.title)).scalars().all()
    assert titles == ["Book Reserved"]


def test_second_reservation_for_same_book_conflicts(reservation_service, member, seed) -> None:
    book_id = seed.book_ids[3]
    reservation_service.create(member, book_id)

    with pytest.raises(Conflict) as excinfo:
        reservation_service.create(member, book_id)

    assert excinfo.value.status_code == 409
    assert excinfo.value.message == "You already have a pending reservation for this book"


def test_cannot_reserve_a_book_you_hold(reservation_service, member, seed, clock) -> None:
    book_id = seed.book_ids[0]
    BorrowingService(clock=clock).borrow(member, book_id)

    with pytest.raises(DuplicateBorrow):
        reservation_service.create(member, book_id)


def test_reserving_unknown_book(reservation_service, member) -> None:
    with pytest.raises(NotFound, match="Book not found"):
        reservation_service.create(member, 4242)


def test_cancelling_last_active_reservation_releases_book(reservation_service, member, seed) -> None:
    book_id = seed.book_ids[0]
    created = reservation_service.create(member, book_id)

    reservation_service.cancel(member, created["reservation_id"])

    assert _availability(book_id) == "available"
    with get_db_session() as db:
        assert db.get(ReservationModel, created["reservation_id"]).status == "cancelled"


def test_cancelling_non_last_reservation_keeps_hold(reservation_service, member, other_member, seed) -> None:
    book_id = seed.book_ids[0]
    first = reservation_service.create(member, book_id)
    reservation_service.create(other_member, book_id)

    reservation_service.cancel(member, first["reservation_id"])

    assert _availability(book_id) == "reserved"


def test_cancelling_reservation_on_borrowed_book_leaves_it_borrowed(reservation_service, member, seed) -> None:
    book_id = seed.book_ids[3]
    created = reservation_service.create(member, book_id)

    reservation_service.cancel(member, created["reservation_id"])

    assert _availability(book_id) == "borrowed"


def test_cancel_visibility_and_repeat(reservation_service, member, other_member, moderator, seed) -> None:
    created = reservation_service.create(member, seed.book_ids[0])

    with pytest.raises(NotFound, match="Reservation not found"):
        reservation_service.cancel(other_member, created["reservation_id"])

    reservation_service.cancel(moderator, created["reservation_id"])

    with pytest.raises(Conflict):
        reservation_service.cancel(member, created["reservation_id"])


def test_my_reservations_hide_cancelled_and_mark_expired(reservation_service, member, seed, clock) -> None:
    kept = reservation_service.create(member, seed.book_ids[3], expiry_days=2)
    clock.advance(minutes=1)
    dropped = reservation_service.create(member, seed.book_ids[0])
    reservation_service.cancel(member, dropped["reservation_id"])
    clock.advance(days=3)

    listing = reservation_service.list_for_user(member)

    assert [item["id"] for item in listing] == [kept["reservation_id"]]
    assert listing[0]["status"] == "expired"


def test_list_all_restricted_to_reservation_admins(reservation_service, member, moderator, system_admin, seed) -> None:
    reservation_service.create(member, seed.book_ids[0])

    with pytest.raises(Forbidden):
        reservation_service.list_all(system_admin)

    rows = reservation_service.list_all(moderator)
    assert [row["email"] for row in rows] == ["user@booktrack.com"]


def test_reservation_expiry_is_capped_at_a_year(reservation_service, member, seed) -> None:
    with pytest.raises(ValidationError, match="Expiry days cannot exceed 365"):
        reservation_service.create(member, seed.book_ids[0], 10_000_000)

    assert _availability(seed.book_ids[0]) == "available"
