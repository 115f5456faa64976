from __future__ import annotations

from dataclasses import replace

import pytest

from src.hrm_portal.hrm_portal.core.enums import PayrollStatus
from src.hrm_portal.hrm_portal.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from src.hrm_portal.hrm_portal.payroll.service import PayrollService


@pytest.fixture
def service(payroll, employees, clock):
    return PayrollService(payroll, employees, clock=clock)


def test_listing_generates_current_month_records(service, people, payroll):
    records = service.list_records(current_user=people["admin"])

    assert {r.name for r in records} == {"Alice", "Henry"}
    for r in records:
        assert r.month == "May"
        assert r.year == 2024
        assert r.net_salary == r.base_salary == 1000
    assert len(payroll.items) == 2


def test_listing_past_month_does_not_generate(service, people, payroll):
    assert service.list_records(current_user=people["maria"], month="January") == []
    assert payroll.items == {}


def test_employees_cannot_list_payroll(service, people):
    with pytest.raises(AuthorizationError):
        service.list_records(current_user=people["alice"])


@pytest.mark.parametrize(
    "changes,expected_net",
    [
        ({"bonuses": 200}, 1200),
        ({"deductions": 150.25}, 849.75),
        ({"baseSalary": 2000, "bonuses": 100, "deductions": 50}, 2050),
        ({"netSalary": 999999}, 1000),
    ],
)
def test_net_always_follows_inputs(service, people, changes, expected_net):
    record = service.list_records(current_user=people["admin"])[0]

    updated = service.update_record(current_user=people["admin"], payload={"id": record.record_id, **changes})

    assert updated.net_salary == expected_net
    assert updated.net_salary == round(updated.base_salary + updated.bonuses - updated.deductions, 2)


def test_negative_amounts_are_rejected(service, people):
    record = service.list_records(current_user=people["admin"])[0]
    with pytest.raises(ValidationError):
        service.update_record(current_user=people["admin"], payload={"id": record.record_id, "bonuses": -1})


def test_marking_paid_sets_payment_date(service, people, clock):
    record = service.list_records(current_user=people["admin"])[0]

    updated = service.update_record(current_user=people["admin"], payload={"id": record.record_id, "status": "Paid"})

    assert updated.status == PayrollStatus.PAID
    assert updated.payment_date == clock.now


def test_manager_needs_payroll_permission(service, people):
    record = service.list_records(current_user=people["admin"])[0]
    with pytest.raises(AuthorizationError):
        service.update_record(current_user=people["maria"], payload={"id": record.record_id, "bonuses": 1})

    allowed = replace(people["maria"], permissions={"canManagePayroll": True})
    updated = service.update_record(current_user=allowed, payload={"id": record.record_id, "bonuses": 1})
    assert updated.net_salary == 1001


def test_concurrent_edit_is_detected(service, people, payroll):
    record = service.list_records(current_user=people["admin"])[0]
    payroll.items[record.record_id] = replace(record, bonuses=50, net_salary=1050)

    original_get = payroll.get_by_id
    payroll.get_by_id = lambda record_id: record if record_id == record.record_id else original_get(record_id)

    with pytest.raises(ValidationError):
        service.update_record(current_user=people["admin"], payload={"id": record.record_id, "deductions": 10})


def test_own_records_creates_placeholder(service, people):
    records = service.own_records(current_user=people["alice"])

    assert len(records) == 1
    assert records[0].employee_id == people["alice"].user_id
    assert records[0].status == PayrollStatus.PENDING


def test_own_records_are_for_employee_accounts_only(service, people):
    with pytest.raises(AuthorizationError):
        service.own_records(current_user=people["maria"])
    assert service.own_records(current_user=people["henry"])


def test_own_records_fallback_creates_one_placeholder(service, people, payroll):
    first = service.own_records(current_user=people["alice"], month="January")
    second = service.own_records(current_user=people["alice"], month="January")

    assert [r.record_id for r in first] == [r.record_id for r in second]
    assert [r.month for r in second] == ["May"]
    assert len(payroll.items) == 1


def test_own_records_keeps_existing_current_month(service, people, payroll):
    service.list_records(current_user=people["admin"])
    before = set(payroll.items)

    records = service.own_records(current_user=people["alice"], month="March")

    assert set(payroll.items) == before
    assert [r.employee_id for r in records] == [people["alice"].user_id]


def test_toggle_own_status(service, people, clock):
    record = service.own_records(current_user=people["alice"])[0]

    paid = service.toggle_own_status(current_user=people["alice"], record_id=record.record_id)
    assert paid.status == PayrollStatus.PAID
    assert paid.payment_date == clock.now

    back = service.toggle_own_status(current_user=people["alice"], record_id=record.record_id)
    assert back.status == PayrollStatus.PENDING


def test_processing_record_toggles_back_to_pending(service, people, payroll):
    record = service.own_records(current_user=people["alice"])[0]
    payroll.items[record.record_id] = replace(record, status=PayrollStatus.PROCESSING)

    toggled = service.toggle_own_status(current_user=people["alice"], record_id=record.record_id)

    assert toggled.status == PayrollStatus.PENDING


def test_other_employees_records_are_hidden(service, people):
    record = service.own_records(current_user=people["alice"])[0]

    with pytest.raises(NotFoundError):
        service.toggle_own_status(current_user=people["henry"], record_id=record.record_id)
    with pytest.raises(NotFoundError):
        service.payslip(current_user=people["henry"], record_id=record.record_id)
    with pytest.raises(AuthorizationError):
        service.payslip(current_user=people["maria"], record_id=record.record_id)


def test_payslip_requires_paid_salary(service, people, clock):
    record = service.own_records(current_user=people["alice"])[0]

    with pytest.raises(AuthorizationError):
        service.payslip(current_user=people["alice"], record_id=record.record_id)

    service.toggle_own_status(current_user=people["alice"], record_id=record.record_id)
    slip = service.payslip(current_user=people["alice"], record_id=record.record_id)

    assert slip["employeeName"] == "Alice"
    assert slip["month"] == "May"
    assert slip["year"] == 2024
    assert slip["netSalary"] == 1000
    assert slip["paymentDate"] == clock.now.isoformat()
    assert slip["employeeId"] == people["alice"].user_id
