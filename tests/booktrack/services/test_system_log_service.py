from __future__ import annotations

from datetime import timedelta

import pytest

from booktrack.database import get_db_session
from booktrack.database.models import SystemLogModel
from booktrack.errors import Forbidden, NotFound
from booktrack.services.activity_log import log_system_activity
from booktrack.services.system_log_service import SystemLogService


@pytest.fixture
def audit_trail(seed, clock):
    with get_db_session() as db:
        entries = [
            log_system_activity(db, seed.member_id, "User logged in", timestamp=clock.now),
            log_system_activity(
                db, seed.member_id, "Book deleted: Old", level="warning", timestamp=clock.now + timedelta(minutes=1)
            ),
            log_system_activity(db, None, "Nightly cleanup", level="success", timestamp=clock.now + timedelta(minutes=2)),
        ]
        return [entry.id for entry in entries]


def test_logs_require_log_admin(audit_trail, member, system_admin, anonymous) -> None:
    service = SystemLogService()

    for caller in (member, system_admin, anonymous):
        with pytest.raises(Forbidden, match="Admin access required"):
            service.list_logs(caller)


def test_list_logs_newest_first_with_user_names(audit_trail, moderator) -> None:
    logs = SystemLogService().list_logs(moderator)

    assert [entry["id"] for entry in logs] == list(reversed(audit_trail))
    assert logs[0]["user_name"] == "System"
    assert logs[0]["user_email"] is None
    assert logs[1]["user_name"] == "Regular User"


def test_list_logs_filters(audit_trail, library_admin, seed) -> None:
    service = SystemLogService()

    assert [entry["action"] for entry in service.list_logs(library_admin, level="warning")] == ["Book deleted: Old"]
    assert len(service.list_logs(library_admin, level="verbose")) == 3
    assert len(service.list_logs(library_admin, user_id=seed.member_id)) == 2
    assert len(service.list_logs(library_admin, limit=1)) == 1


def test_get_and_delete_log(audit_trail, library_admin, clock) -> None:
    service = SystemLogService(clock=clock)

    assert service.get_log(library_admin, audit_trail[0])["action"] == "User logged in"

    service.delete_log(library_admin, audit_trail[0])

    with pytest.raises(NotFound, match="Log not found"):
        service.get_log(library_admin, audit_trail[0])
    actions = [entry["action"] for entry in service.list_logs(library_admin)]
    assert f"Log deleted: ID {audit_trail[0]}" in actions


def test_deleted_log_ids_are_not_reused(audit_trail, moderator, clock) -> None:
    service = SystemLogService(clock=clock)
    newest = audit_trail[-1]

    clock.advance(minutes=5)
    service.delete_log(moderator, newest)

    with get_db_session() as db:
        assert db.get(SystemLogModel, newest) is None
    with pytest.raises(NotFound):
        service.get_log(moderator, newest)
    latest = service.list_logs(moderator)[0]
    assert latest["action"] == f"Log deleted: ID {newest}"
    assert latest["id"] > newest


def test_activity_log_rejects_unknown_level(seed) -> None:
    with get_db_session() as db:
        with pytest.raises(ValueError):
            log_system_activity(db, seed.member_id, "Odd", level="debug")
