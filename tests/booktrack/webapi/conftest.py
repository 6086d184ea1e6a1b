"""Shared fixtures for BookTrack route tests."""

from __future__ import annotations

from collections.abc import Callable, Iterator

import pytest
from fastapi.testclient import TestClient

from booktrack.database import get_db_session
from booktrack.database.models import UserModel
from booktrack.services.book_service import BookService
from booktrack.services.bookmark_service import BookmarkService
from booktrack.services.borrowing_service import BorrowingService
from booktrack.services.dashboard_service import DashboardService
from booktrack.services.reservation_service import ReservationService
from booktrack.services.system_log_service import SystemLogService
from booktrack.services.user_service import UserService
from booktrack.user_management import SessionManager
from booktrack.webapi import dependencies
from booktrack.webapi.application import create_app


@pytest.fixture
def client(seed, clock) -> Iterator[TestClient]:
    app = create_app()
    overrides = {
        dependencies.get_book_service: lambda: BookService(clock=clock),
        dependencies.get_bookmark_service: lambda: BookmarkService(clock=clock),
        dependencies.get_borrowing_service: lambda: BorrowingService(clock=clock),
        dependencies.get_dashboard_service: lambda: DashboardService(clock=clock),
        dependencies.get_reservation_service: lambda: ReservationService(clock=clock),
        dependencies.get_system_log_service: lambda: SystemLogService(clock=clock),
        dependencies.get_user_service: lambda: UserService(clock=clock),
    }
    app.dependency_overrides.update(overrides)

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def bearer(seed) -> Callable[[int], dict[str, str]]:
    """Open a session for ``user_id`` and return the matching auth header."""

    manager = SessionManager()

    def _headers(user_id: int) -> dict[str, str]:
        with get_db_session() as db:
            token = manager.create_session(db, db.get(UserModel, user_id))
        return {"Authorization": f"Bearer {token}"}

    return _headers
