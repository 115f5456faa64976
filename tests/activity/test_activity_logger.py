from __future__ import annotations

from datetime import datetime

import pytest

from src.hrm_portal.hrm_portal.activity.logger import ActivityLogger
from src.hrm_portal.hrm_portal.activity.model import ActivityLogEntry
from src.hrm_portal.hrm_portal.activity.service import ActivityLogService
from src.hrm_portal.hrm_portal.core.enums import ActivityAction, SystemModule
from src.hrm_portal.hrm_portal.core.exceptions import AuthorizationError, ValidationError


def _entry(details="x", when=datetime(2024, 5, 20, 9, 0), action=ActivityAction.VIEW):
    return ActivityLogEntry(
        user_id="emp1",
        user_name="Alice",
        user_role="employee",
        action=action,
        module=SystemModule.SYSTEM,
        details=details,
        timestamp=when,
    )


def test_worker_drains_queue_in_order(activity_repo):
    logger = ActivityLogger(activity_repo)
    logger.start()
    try:
        for i in range(5):
            assert logger.submit(_entry(details=str(i)))
        logger.flush()
    finally:
        logger.stop()

    assert [e.details for e in activity_repo.entries] == ["0", "1", "2", "3", "4"]


def test_write_failure_is_logged_and_dropped(activity_repo, caplog):
    activity_repo.fail = True
    logger = ActivityLogger(activity_repo)
    logger.start()
    try:
        logger.submit(_entry())
        logger.flush()
        activity_repo.fail = False
        logger.submit(_entry(details="after"))
        logger.flush()
    finally:
        logger.stop()

    assert [e.details for e in activity_repo.entries] == ["after"]
    assert "Failed to write activity log entry" in caplog.text


def test_full_queue_drops_instead_of_blocking(activity_repo):
    logger = ActivityLogger(activity_repo, maxsize=1)
    assert logger.submit(_entry(details="kept"))
    assert not logger.submit(_entry(details="dropped"))


def test_failed_request_is_not_recorded(client, login, people, container, activity_repo):
    login("alice@example.com", "alice123")
    container.activity_logger.flush()
    activity_repo.entries.clear()

    res = client.post("/api/leave", json={"leaveType": "annual"})
    container.activity_logger.flush()

    assert res.status_code == 400
    assert activity_repo.entries == []


def test_search_is_for_managers_and_hr(activity_repo, clock, people):
    service = ActivityLogService(activity_repo, clock=clock)
    with pytest.raises(AuthorizationError):
        service.search(current_user=people["alice"], params={})


def test_search_filters_and_paginates(activity_repo, clock, people):
    for day in (18, 19, 20):
        activity_repo.append(_entry(details=f"d{day}", when=datetime(2024, 5, day, 9, 0)))
    activity_repo.append(_entry(details="login", action=ActivityAction.LOGIN))
    service = ActivityLogService(activity_repo, clock=clock)

    page = service.search(
        current_user=people["maria"],
        params={"action": "view", "startDate": "2024-05-19", "endDate": "2024-05-20"},
        limit=1,
    )

    assert page.total == 2
    assert page.pages == 2
    assert [e.details for e in page.logs] == ["d20"]

    with pytest.raises(ValidationError):
        service.search(current_user=people["maria"], params={"action": "dance"})


def test_explicit_post_writes_synchronously(client, login, people, activity_repo, container):
    login("maria@example.com", "maria123")
    container.activity_logger.flush()
    activity_repo.entries.clear()

    res = client.post(
        "/api/activity-logs", json={"action": "download", "module": "payroll", "details": "Exported payroll"}
    )

    assert res.status_code == 201
    assert [e.details for e in activity_repo.entries] == ["Exported payroll"]
    assert res.get_json()["data"]["userRole"] == "manager"


def test_post_requires_fields(client, login, people):
    login("alice@example.com", "alice123")
    res = client.post("/api/activity-logs", json={"action": "view"})
    assert res.status_code == 400
