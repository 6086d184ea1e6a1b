from __future__ import annotations

from datetime import timedelta

import pytest

from booktrack.database import get_db_session
from booktrack.database.models import UserModel
from booktrack.user_management import SessionManager

pytestmark = pytest.mark.auth


def test_session_lifecycle(seed, clock) -> None:
    manager = SessionManager(ttl_hours=2, clock=clock)
    assert manager.ttl_seconds == 7200

    with get_db_session() as db:
        user = db.get(UserModel, seed.member_id)
        token = manager.create_session(db, user, ip_address="127.0.0.1", user_agent="pytest")

    clock.advance(hours=1)
    with get_db_session() as db:
        session = manager.get_session(db, token)
        assert session is not None
        assert session.last_active_at == clock.now
        assert session.role == "user"

    clock.advance(hours=1)
    with get_db_session() as db:
        assert manager.get_session(db, token) is None


def test_delete_and_clear_sessions(seed, clock) -> None:
    manager = SessionManager(clock=clock)
    with get_db_session() as db:
        user = db.get(UserModel, seed.member_id)
        first = manager.create_session(db, user)
        manager.create_session(db, user)

    with get_db_session() as db:
        assert manager.delete_session(db, first) == seed.member_id
        assert manager.delete_session(db, first) is None
        assert manager.clear_sessions_for_user(db, seed.member_id) == 1

    with get_db_session() as db:
        assert manager.get_session(db, first) is None


def test_tokens_are_unique(seed, clock) -> None:
    manager = SessionManager(clock=clock)
    with get_db_session() as db:
        user = db.get(UserModel, seed.member_id)
        tokens = {manager.create_session(db, user) for _ in range(5)}

    assert len(tokens) == 5
    assert all(len(token) == 32 for token in tokens)
    assert timedelta(hours=24).total_seconds() == manager.ttl_seconds
