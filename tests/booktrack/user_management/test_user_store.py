from __future__ import annotations

import pytest

from booktrack.database import get_db_session
from booktrack.user_management import UserStore

pytestmark = pytest.mark.auth


def test_find_by_email_is_case_insensitive(seed) -> None:
    store = UserStore()
    with get_db_session() as db:
        user = store.find_by_email(db, "  Moderator@BookTrack.com ")
        assert user is not None
        assert user.id == seed.moderator_id
        assert store.email_exists(db, "nobody@booktrack.com") is False


def test_create_user_hashes_password(database) -> None:
    store = UserStore()
    with get_db_session() as db:
        user = store.create_user(
            db, first_name="Hash", last_name="Check", email="hash@example.com", password="p@ssw0rd"
        )
        assert user.password_hash != "p@ssw0rd"
        assert user.password_hash.startswith("$2")
        assert store.verify_password(user, "p@ssw0rd")
        assert not store.verify_password(user, "wrong")
        assert user.role == "user"


def test_verify_password_with_non_bcrypt_hash(database) -> None:
    store = UserStore()
    with get_db_session() as db:
        user = store.create_user(db, first_name="Old", last_name="Hash", email="old@example.com", password="x" * 8)
        user.password_hash = "plaintext"
        assert store.verify_password(user, "plaintext") is False
