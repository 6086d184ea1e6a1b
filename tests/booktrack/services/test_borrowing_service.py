from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal

import pytest
from sqlalchemy import select

from booktrack.database import get_db_session
from booktrack.database.models import (
    BookModel,
    BorrowingModel,
    NotificationModel,
    ReservationModel,
    SystemLogModel,
)
from booktrack.errors import (
    BookUnavailable,
    Conflict,
    DuplicateBorrow,
    Forbidden,
    NotFound,
    Unauthenticated,
    ValidationError,
)
from booktrack.services.borrowing_service import BorrowingService, calculate_fine
from booktrack.services.reservation_service import ReservationService


@pytest.fixture
def borrowing_service(clock) -> BorrowingService:
    return BorrowingService(clock=clock)


def _book(book_id: int) -> BookModel:
    with get_db_session() as db:
        return db.get(BookModel, book_id)


def test_calculate_fine_counts_whole_days_past_due() -> None:
    due = date(2024, 3, 1)

    assert calculate_fine(due, date(2024, 2, 28), Decimal("1.00")) == Decimal("0.00")
    assert calculate_fine(due, due, Decimal("1.00")) == Decimal("0.00")
    assert calculate_fine(due, date(2024, 3, 4), Decimal("1.00")) == Decimal("3.00")
    assert calculate_fine(due, date(2024, 3, 4), Decimal("0.25")) == Decimal("0.75")


def test_borrow_marks_book_borrowed_and_records_loan(borrowing_service, member, seed, clock) -> None:
    book_id = seed.book_ids[0]

    result = borrowing_service.borrow(member, book_id)

    assert result["due_date"] == (clock.now.date() + timedelta(days=14)).isoformat()
    book = _book(book_id)
    assert book.availability == "borrowed"
    assert book.total_borrows == 1
    assert book.last_borrowed == clock.now.date()
    with get_db_session() as db:
        loan = db.get(BorrowingModel, result["borrowing_id"])
        assert loan.status == "borrowed"
        assert loan.user_id == member.user_id
        assert loan.book_id == book_id
        actions = db.execute(select(SystemLogModel.action)).scalars().all()
        titles = db.execute(
            select(NotificationModel.title).where(NotificationModel.user_id == member.user_id)
        ).scalars().all()
    assert "Book borrowed: The Silent Harbor" in actions
    assert titles == ["Book Borrowed"]


def test_borrow_unavailable_book_is_rejected(borrowing_service, member, seed) -> None:
    with pytest.raises(BookUnavailable) as excinfo:
        borrowing_service.borrow(member, seed.book_ids[3])

    assert excinfo.value.status_code == 400
    with get_db_session() as db:
        assert db.execute(select(BorrowingModel)).scalars().all() == []


def test_borrow_rejects_missing_and_unknown_books(borrowing_service, member) -> None:
    with pytest.raises(ValidationError, match="Book ID is required"):
        borrowing_service.borrow(member, None)
    with pytest.raises(NotFound, match="Book not found"):
        borrowing_service.borrow(member, 9999)


def test_borrow_requires_authentication(borrowing_service, anonymous, seed) -> None:
    with pytest.raises(Unauthenticated):
        borrowing_service.borrow(anonymous, seed.book_ids[0])


def test_second_borrow_of_same_copy_is_refused(borrowing_service, member, other_member, seed) -> None:
    book_id = seed.book_ids[0]
    borrowing_service.borrow(member, book_id)

    with pytest.raises(BookUnavailable):
        borrowing_service.borrow(other_member, book_id)


def test_duplicate_borrow_detected_when_book_flag_was_reset(borrowing_service, member, seed) -> None:
    book_id = seed.book_ids[0]
    borrowing_service.borrow(member, book_id)
    with get_db_session() as db:
        db.get(BookModel, book_id).availability = "available"

    with pytest.raises(DuplicateBorrow, match="You already have this book borrowed"):
        borrowing_service.borrow(member, book_id)


def test_borrow_cancels_callers_pending_reservation(borrowing_service, member, other_member, seed, clock) -> None:
    book_id = seed.book_ids[1]
    reservations = ReservationService(clock=clock)
    borrowing_service.borrow(other_member, book_id)
    created = reservations.create(member, book_id)
    borrowing_service.return_book(other_member, book_id=book_id)

    borrowing_service.borrow(member, book_id)

    with get_db_session() as db:
        reservation = db.get(ReservationModel, created["reservation_id"])
        assert reservation.status == "cancelled"


def test_return_on_time_has_no_fine(borrowing_service, member, seed, clock) -> None:
    book_id = seed.book_ids[0]
    loan = borrowing_service.borrow(member, book_id)
    clock.advance(days=14)

    result = borrowing_service.return_book(member, borrowing_id=loan["borrowing_id"])

    assert result == {"fine_amount": 0.0}
    assert _book(book_id).availability == "available"


def test_late_return_charges_daily_fine(borrowing_service, member, seed, clock) -> None:
    book_id = seed.book_ids[0]
    loan = borrowing_service.borrow(member, book_id)
    clock.advance(days=17, hours=5)

    result = borrowing_service.return_book(member, book_id=book_id)

    assert result == {"fine_amount": 3.0}
    with get_db_session() as db:
        record = db.get(BorrowingModel, loan["borrowing_id"])
        assert record.status == "returned"
        assert record.return_date == clock.now.date()
        assert record.fine_amount == Decimal("3.00")
    assert _book(book_id).availability == "available"


def test_return_uses_configured_daily_rate(member, seed, clock) -> None:
    service = BorrowingService(daily_fine=Decimal("0.50"), loan_days=7, clock=clock)
    loan = service.borrow(member, seed.book_ids[0])
    assert loan["due_date"] == (clock.now.date() + timedelta(days=7)).isoformat()
    clock.advance(days=10)

    assert service.return_book(member, borrowing_id=loan["borrowing_id"]) == {"fine_amount": 1.5}


def test_return_twice_is_a_conflict(borrowing_service, member, seed) -> None:
    loan = borrowing_service.borrow(member, seed.book_ids[0])
    borrowing_service.return_book(member, borrowing_id=loan["borrowing_id"])

    with pytest.raises(Conflict, match="Book already returned"):
        borrowing_service.return_book(member, borrowing_id=loan["borrowing_id"])


def test_return_validates_identifiers_and_ownership(borrowing_service, member, other_member, library_admin, seed) -> None:
    loan = borrowing_service.borrow(member, seed.book_ids[0])

    with pytest.raises(ValidationError, match="Borrowing ID or Book ID is required"):
        borrowing_service.return_book(member)
    with pytest.raises(NotFound, match="Borrowing record not found"):
        borrowing_service.return_book(other_member, borrowing_id=loan["borrowing_id"])

    result = borrowing_service.return_book(library_admin, borrowing_id=loan["borrowing_id"])
    assert result == {"fine_amount": 0.0}


def test_return_notifies_oldest_pending_reservation(borrowing_service, member, other_member, library_admin, seed, clock) -> None:
    book_id = seed.book_ids[0]
    reservations = ReservationService(clock=clock)
    borrowing_service.borrow(member, book_id)
    reservations.create(other_member, book_id)
    clock.advance(minutes=5)
    reservations.create(library_admin, book_id)
    clock.advance(days=1)

    borrowing_service.return_book(member, book_id=book_id)

    with get_db_session() as db:
        notified = db.execute(
            select(NotificationModel.user_id).where(NotificationModel.title == "Reserved Book Available")
        ).scalars().all()
    assert notified == [other_member.user_id]


def test_my_borrowings_reports_overdue_after_due_date(borrowing_service, member, seed, clock) -> None:
    book_id = seed.book_ids[4]
    loan = borrowing_service.borrow(member, book_id)

    listing = borrowing_service.list_for_user(member)
    assert [(item["book_id"], item["status"]) for item in listing] == [(book_id, "borrowed")]
    assert listing[0]["due_date"] == loan["due_date"]
    assert [item["id"] for item in borrowing_service.list_for_user(member, "borrowed")] == [loan["borrowing_id"]]

    clock.advance(days=15)

    listing = borrowing_service.list_for_user(member)
    assert listing[0]["status"] == "overdue"
    assert [item["id"] for item in borrowing_service.list_for_user(member, "overdue")] == [loan["borrowing_id"]]
    assert borrowing_service.list_for_user(member, "borrowed") == []


def test_list_for_user_rejects_unknown_status(borrowing_service, member) -> None:
    with pytest.raises(ValidationError, match="Invalid status filter"):
        borrowing_service.list_for_user(member, "lost")


def test_list_all_requires_borrowing_admin(borrowing_service, member, moderator, system_admin, seed) -> None:
    borrowing_service.borrow(member, seed.book_ids[0])

    with pytest.raises(Forbidden):
        borrowing_service.list_all(member)
    with pytest.raises(Forbidden):
        borrowing_service.list_all(moderator)

    rows = borrowing_service.list_all(system_admin)
    assert len(rows) == 1
    assert rows[0]["user_name"] == "Regular User"
    assert rows[0]["email"] == "user@booktrack.com"


def test_get_borrowing_hides_other_users_records(borrowing_service, member, other_member, system_admin, seed) -> None:
    loan = borrowing_service.borrow(member, seed.book_ids[0])

    with pytest.raises(NotFound):
        borrowing_service.get_borrowing(other_member, loan["borrowing_id"])
    assert borrowing_service.get_borrowing(member, loan["borrowing_id"])["title"] == "The Silent Harbor"
    assert borrowing_service.get_borrowing(system_admin, loan["borrowing_id"])["user_id"] == member.user_id


@pytest.mark.parametrize("due_days", [366, 10_000_000])
def test_borrow_rejects_loan_periods_beyond_a_year(borrowing_service, member, seed, due_days) -> None:
    with pytest.raises(ValidationError, match="Due days cannot exceed 365"):
        borrowing_service.borrow(member, seed.book_ids[4], due_days)

    assert _book(seed.book_ids[4]).availability == "available"
    assert borrowing_service.borrow(member, seed.book_ids[4], 365)["due_date"] == "2025-03-15"
