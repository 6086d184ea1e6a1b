"""Shared fixtures: a throwaway SQLite database, seeded accounts and a pinned clock."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from pathlib import Path
from typing import Iterator

import bcrypt
import pytest

from booktrack.database import create_schema, dispose_engine, get_db_session
from booktrack.database.models import BookModel, CategoryModel, UserModel
from booktrack.settings import get_settings
from booktrack.user_management import RequestUserContext
from booktrack.webapi import dependencies

PASSWORD = "secret123"
# Low cost factor keeps the suite fast; verification works for any cost.
PASSWORD_HASH = bcrypt.hashpw(PASSWORD.encode("utf-8"), bcrypt.gensalt(rounds=4)).decode("utf-8")

FIXED_NOW = datetime(2024, 3, 15, 10, 0, 0)


class FrozenClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime = FIXED_NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta: float) -> None:
        self.now = self.now + timedelta(**delta)


@dataclass(frozen=True)
class SeedData:
    library_admin_id: int
    moderator_id: int
    admin_id: int
    member_id: int
    other_member_id: int
    suspended_id: int
    fiction_id: int
    science_id: int
    book_ids: tuple[int, ...]


def _clear_dependency_caches() -> None:
    for getter in (
        dependencies.get_auth_service,
        dependencies.get_book_service,
        dependencies.get_bookmark_service,
        dependencies.get_borrowing_service,
        dependencies.get_dashboard_service,
        dependencies.get_notification_service,
        dependencies.get_reservation_service,
        dependencies.get_system_log_service,
        dependencies.get_user_service,
    ):
        getter.cache_clear()


@pytest.fixture
def database(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    db_path = tmp_path / "booktrack.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{db_path}")
    monkeypatch.setenv("APP_ENV", "testing")
    get_settings.cache_clear()
    _clear_dependency_caches()
    dispose_engine()
    create_schema()
    yield db_path
    dispose_engine()
    get_settings.cache_clear()
    _clear_dependency_caches()


def _user(first_name: str, last_name: str, email: str, role: str, status: str = "active") -> UserModel:
    return UserModel(
        first_name=first_name,
        last_name=last_name,
        email=email,
        password_hash=PASSWORD_HASH,
        role=role,
        status=status,
        created_at=FIXED_NOW - timedelta(days=60),
    )


def _book(title: str, author: str, category: CategoryModel, **fields) -> BookModel:
    return BookModel(
        title=title,
        author=author,
        category=category,
        rating=Decimal("4.50"),
        created_at=FIXED_NOW - timedelta(days=90),
        added_date=FIXED_NOW - timedelta(days=90),
        **fields,
    )


@pytest.fixture
def seed(database: Path) -> SeedData:
    with get_db_session() as db:
        users = [
            _user("Libby", "Admin", "admin@booktrack.com", "library_admin"),
            _user("Molly", "Moderator", "moderator@booktrack.com", "library_moderator"),
            _user("Ada", "Admin", "sysadmin@booktrack.com", "admin"),
            _user("Regular", "User", "user@booktrack.com", "user"),
            _user("Otto", "Reader", "otto@booktrack.com", "user"),
            _user("Sam", "Suspended", "suspended@booktrack.com", "user", status="suspended"),
        ]
        fiction = CategoryModel(name="Fiction")
        science = CategoryModel(name="Science")
        books = [
            _book("The Silent Harbor", "Mara Quinn", fiction, isbn="9780000000011"),
            _book("Orbits and Tides", "Ivan Petrov", science, isbn="9780000000028"),
            _book("100% Coverage", "Dana Cole", science, isbn="9780000000035"),
            _book("Borrowed Light", "Mara Quinn", fiction, availability="borrowed"),
            _book("Garden of Numbers", "Lee Park", science, isbn="9780000000059"),
        ]
        db.add_all(users + books + [fiction, science])
        db.flush()
        return SeedData(
            library_admin_id=users[0].id,
            moderator_id=users[1].id,
            admin_id=users[2].id,
            member_id=users[3].id,
            other_member_id=users[4].id,
            suspended_id=users[5].id,
            fiction_id=fiction.id,
            science_id=science.id,
            book_ids=tuple(book.id for book in books),
        )


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


def actor(user_id: int | None, role: str | None = "user") -> RequestUserContext:
    if user_id is None:
        return RequestUserContext.anonymous("127.0.0.1")
    return RequestUserContext(user_id=user_id, role=role, ip_address="127.0.0.1")


@pytest.fixture
def make_actor():
    return actor


@pytest.fixture
def member(seed: SeedData) -> RequestUserContext:
    return actor(seed.member_id, "user")


@pytest.fixture
def other_member(seed: SeedData) -> RequestUserContext:
    return actor(seed.other_member_id, "user")


@pytest.fixture
def library_admin(seed: SeedData) -> RequestUserContext:
    return actor(seed.library_admin_id, "library_admin")


@pytest.fixture
def moderator(seed: SeedData) -> RequestUserContext:
    return actor(seed.moderator_id, "library_moderator")


@pytest.fixture
def system_admin(seed: SeedData) -> RequestUserContext:
    return actor(seed.admin_id, "admin")


@pytest.fixture
def anonymous() -> RequestUserContext:
    return actor(None)
