from __future__ import annotations

import pytest
from sqlalchemy import select

from booktrack.database import get_db_session
from booktrack.database.models import BorrowingModel, SystemLogModel, UserModel
from booktrack.errors import Forbidden, NotFound, Unauthenticated, ValidationError
from booktrack.services.borrowing_service import BorrowingService
from booktrack.services.patches import ProfilePatch
from booktrack.services.user_service import UserService
from booktrack.user_management import UserStore

PASSWORD = "secret123"


@pytest.fixture
def user_service(clock) -> UserService:
    return UserService(clock=clock)


def _load(user_id: int) -> UserModel:
    with get_db_session() as db:
        return db.get(UserModel, user_id)


def test_profile_reads(user_service, member, other_member, system_admin, seed) -> None:
    profile = user_service.get_profile(member)

    assert profile["email"] == "user@booktrack.com"
    assert profile["full_name"] == "Regular User"
    assert "password" not in profile
    with pytest.raises(Forbidden, match="Access denied"):
        user_service.get_profile(other_member, seed.member_id)
    assert user_service.get_profile(system_admin, seed.member_id)["id"] == seed.member_id


def test_list_users_for_admins(user_service, member, library_admin) -> None:
    with pytest.raises(Forbidden):
        user_service.list_users(member)

    suspended = user_service.list_users(library_admin, status="suspended")
    regular = user_service.list_users(library_admin, role="user")

    assert [user["email"] for user in suspended] == ["suspended@booktrack.com"]
    assert len(regular) == 3
    assert len(user_service.list_users(library_admin, status="unknown")) == 6


def test_member_updates_own_profile_but_not_privileged_fields(user_service, member, seed) -> None:
    user_service.update_profile(
        member, ProfilePatch(phone="555-0100", middle_name="Q", status="suspended", role="library_admin")
    )

    user = _load(seed.member_id)
    assert user.phone == "555-0100"
    assert user.full_name == "Regular Q User"
    assert user.status == "active"
    assert user.role == "user"


def test_member_cannot_update_someone_else(user_service, member, seed) -> None:
    with pytest.raises(Forbidden, match="Access denied"):
        user_service.update_profile(member, ProfilePatch(phone="1"), seed.other_member_id)


def test_admin_sets_status_and_role_for_others_only(user_service, system_admin, seed) -> None:
    user_service.update_profile(
        system_admin, ProfilePatch(status="suspended", role="library_moderator"), seed.other_member_id
    )
    user_service.update_profile(system_admin, ProfilePatch(role="user", first_name="Ada"))

    other = _load(seed.other_member_id)
    assert (other.status, other.role) == ("suspended", "library_moderator")
    assert _load(seed.admin_id).role == "admin"
    with get_db_session() as db:
        actions = db.execute(select(SystemLogModel.action)).scalars().all()
    assert f"Profile updated: User ID {seed.other_member_id}" in actions


def test_empty_profile_patch(user_service, member) -> None:
    with pytest.raises(ValidationError, match="No fields to update"):
        user_service.update_profile(member, ProfilePatch())
    with pytest.raises(ValidationError, match="No fields to update"):
        user_service.update_profile(member, ProfilePatch(password="new-secret"))


def test_password_change_requires_current_password(user_service, member, seed) -> None:
    with pytest.raises(Unauthenticated, match="Current password is incorrect"):
        user_service.update_profile(member, ProfilePatch(password="new-secret", current_password="nope"))

    user_service.update_profile(member, ProfilePatch(password="new-secret", current_password=PASSWORD))

    store = UserStore()
    user = _load(seed.member_id)
    assert store.verify_password(user, "new-secret")
    assert not store.verify_password(user, PASSWORD)


def test_delete_user(user_service, library_admin, member, seed, clock) -> None:
    BorrowingService(clock=clock).borrow(member, seed.book_ids[0])

    with pytest.raises(Forbidden):
        user_service.delete_user(member, seed.other_member_id)
    with pytest.raises(ValidationError, match="Cannot delete your own account"):
        user_service.delete_user(library_admin, seed.library_admin_id)
    with pytest.raises(NotFound, match="User not found"):
        user_service.delete_user(library_admin, 4040)

    user_service.delete_user(library_admin, seed.member_id)

    assert _load(seed.member_id) is None
    with get_db_session() as db:
        assert db.execute(select(BorrowingModel)).scalars().all() == []
        entry = db.execute(
            select(SystemLogModel).where(SystemLogModel.action == "User deleted: user@booktrack.com")
        ).scalar_one()
    assert entry.level == "warning"
