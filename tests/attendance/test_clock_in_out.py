from __future__ import annotations

from datetime import datetime

import pytest

from src.hrm_portal.hrm_portal.attendance.service import AttendanceService
from src.hrm_portal.hrm_portal.core.exceptions import AuthorizationError, ValidationError


@pytest.fixture
def service(attendance, employees, clock):
    return AttendanceService(attendance, employees, clock=clock)


def test_clock_in_then_out_computes_hours(service, people, clock):
    clock.now = datetime(2024, 5, 20, 9, 0)
    entry = service.clock(current_user=people["alice"], action="clock-in")
    assert entry.is_open

    clock.now = datetime(2024, 5, 20, 17, 15)
    closed = service.clock(current_user=people["alice"], action="clock-out")

    assert closed.clock_out == clock.now
    assert closed.hours_worked == 8.25
    assert not closed.auto_clock_out


def test_one_entry_per_day(service, people):
    service.clock(current_user=people["alice"], action="clock-in")
    with pytest.raises(ValidationError) as exc:
        service.clock(current_user=people["alice"], action="clock-in")
    assert str(exc.value) == "Already clocked in for today"


def test_clock_out_rules(service, people):
    with pytest.raises(ValidationError) as before:
        service.clock(current_user=people["alice"], action="clock-out")
    assert str(before.value) == "Must clock in before clocking out"

    service.clock(current_user=people["alice"], action="clock-in")
    service.clock(current_user=people["alice"], action="clock-out")
    with pytest.raises(ValidationError) as twice:
        service.clock(current_user=people["alice"], action="clock-out")
    assert str(twice.value) == "Already clocked out for today"


def test_action_and_role_checks(service, people):
    with pytest.raises(ValidationError):
        service.clock(current_user=people["alice"], action="lunch")
    with pytest.raises(AuthorizationError):
        service.clock(current_user=people["maria"], action="clock-in")


def test_hr_may_clock_for_an_employee(service, people, employees):
    entry = service.clock(current_user=people["henry"], action="clock-in", employee_id=people["alice"].user_id)
    assert entry.clock_in is not None
    assert employees.get_by_id(people["alice"].user_id).attendance[0].entry_id == entry.entry_id


def test_listing_scopes(service, people, clock):
    service.clock(current_user=people["alice"], action="clock-in")

    mine = service.list_entries(current_user=people["alice"])
    assert len(mine) == 1

    with pytest.raises(AuthorizationError):
        service.list_entries(current_user=people["alice"], employee_id=people["henry"].user_id)

    day = service.list_entries(current_user=people["maria"], day="2024-05-20")
    assert [row["employeeName"] for row in day] == ["Alice"]
    assert service.list_entries(current_user=people["maria"], day="2024-05-19") == []


def test_api_clock_in(client, login, people):
    login("alice@example.com", "alice123")
    res = client.post("/api/employee/attendance", json={"action": "clock-in"})
    assert res.status_code == 200
    assert res.get_json()["data"]["clockOut"] is None

    listed = client.get("/api/employee/attendance").get_json()
    assert listed["success"] is True
    assert len(listed["data"]) == 1
