from __future__ import annotations

from datetime import datetime

import mongomock
import pytest
from bson import ObjectId

from src.hrm_portal.hrm_portal.attendance.mongo_attendance_repository import MongoAttendanceRepository
from src.hrm_portal.hrm_portal.attendance.service import AttendanceService
from src.hrm_portal.hrm_portal.core.enums import LeaveStatus, LeaveType, LoanStatus, LoanType, PayrollStatus
from src.hrm_portal.hrm_portal.database.connection import DatabaseConnection, DBConfig
from src.hrm_portal.hrm_portal.database.mongo_base import EMPLOYEES, LEAVE_REQUESTS, PAYROLL_RECORDS
from src.hrm_portal.hrm_portal.leave.mongo_leave_repository import MongoLeaveRepository
from src.hrm_portal.hrm_portal.loans.model import LoanDraft
from src.hrm_portal.hrm_portal.loans.mongo_loan_repository import MongoLoanRepository
from src.hrm_portal.hrm_portal.payroll.model import PayrollDraft
from src.hrm_portal.hrm_portal.payroll.mongo_payroll_repository import MongoPayrollRepository
from src.hrm_portal.hrm_portal.users.mongo_account_repository import MongoEmployeeRepository

DAY_START = datetime(2024, 5, 20)
DAY_END = datetime(2024, 5, 21)


@pytest.fixture
def conn():
    return DatabaseConnection(DBConfig(uri="mongodb://localhost", database="hrm_test"), client=mongomock.MongoClient())


def _employee(conn, name, attendance=None):
    return conn.collection(EMPLOYEES).insert_one(
        {
            "email": f"{name.lower()}@example.com",
            "name": name,
            "password": "x",
            "role": "employee",
            "department": "Engineering",
            "currentSalary": 1000,
            "status": "Active",
            "attendance": attendance or [],
        }
    ).inserted_id


def _leave(repo, employee_id):
    return repo.create(
        employee_id=str(employee_id),
        employee_name="Alice",
        leave_type=LeaveType.ANNUAL,
        start_date=datetime(2024, 6, 1),
        end_date=datetime(2024, 6, 3),
        reason="Trip",
        created_at=datetime(2024, 5, 20, 10, 0),
    )


def test_leave_decision_only_applies_to_pending(conn):
    repo = MongoLeaveRepository(conn)
    alice, maria = ObjectId(), ObjectId()
    request_id = _leave(repo, alice)

    decided = repo.decide(
        request_id,
        status=LeaveStatus.APPROVED,
        approved_by=str(maria),
        decided_at=datetime(2024, 5, 20, 11, 0),
        approver_name="Maria",
    )
    again = repo.decide(request_id, status=LeaveStatus.REJECTED, approved_by=str(maria), decided_at=datetime(2024, 5, 21))

    assert decided.status == LeaveStatus.APPROVED
    assert decided.approved_by == str(maria)
    assert decided.approver_name == "Maria"
    assert again is None
    stored = conn.collection(LEAVE_REQUESTS).find_one({"_id": ObjectId(request_id)})
    assert stored["approvedBy"] == maria
    assert stored["status"] == "Approved"


def test_leave_delete_requires_owner_and_pending(conn):
    repo = MongoLeaveRepository(conn)
    alice = ObjectId()
    first, second = _leave(repo, alice), _leave(repo, alice)

    assert repo.delete_pending(first, employee_id=str(ObjectId())) is False
    assert repo.delete_pending("not-an-id", employee_id=str(alice)) is False
    assert repo.delete_pending(first, employee_id=str(alice)) is True
    assert repo.get_by_id(first) is None

    repo.decide(second, status=LeaveStatus.REJECTED, approved_by=str(ObjectId()), decided_at=datetime(2024, 5, 20))
    assert repo.delete_pending(second, employee_id=str(alice)) is False
    assert repo.get_by_id(second).status == LeaveStatus.REJECTED


def test_one_attendance_entry_per_day(conn):
    repo = MongoAttendanceRepository(conn)
    alice = _employee(conn, "Alice")

    first = repo.add_entry_once(str(alice), day_start=DAY_START, day_end=DAY_END, clock_in=datetime(2024, 5, 20, 9, 0))
    second = repo.add_entry_once(str(alice), day_start=DAY_START, day_end=DAY_END, clock_in=datetime(2024, 5, 20, 9, 5))
    next_day = repo.add_entry_once(
        str(alice), day_start=DAY_END, day_end=datetime(2024, 5, 22), clock_in=datetime(2024, 5, 21, 9, 0)
    )

    assert first is not None and first.clock_in == datetime(2024, 5, 20, 9, 0)
    assert second is None
    assert next_day is not None
    assert len(conn.collection(EMPLOYEES).find_one({"_id": alice})["attendance"]) == 2

    assert repo.close_entry(str(alice), first.entry_id, clock_out=datetime(2024, 5, 20, 17, 0), hours_worked=8.0)
    assert not repo.close_entry(str(alice), first.entry_id, clock_out=datetime(2024, 5, 20, 18, 0), hours_worked=9.0)


def test_auto_clock_out_tolerates_legacy_entries(conn):
    repo = MongoAttendanceRepository(conn)
    legacy = {"_id": ObjectId(), "date": "2024-05-20", "clockIn": "09:00", "clockOut": None, "status": "present"}
    open_entry = {
        "_id": ObjectId(),
        "date": DAY_START,
        "clockIn": datetime(2024, 5, 20, 9, 0),
        "clockOut": None,
        "status": "present",
        "hoursWorked": 0,
    }
    alice = _employee(conn, "Alice", attendance=[legacy, open_entry])
    _employee(conn, "Bob", attendance=[dict(legacy, _id=ObjectId())])
    service = AttendanceService(repo, MongoEmployeeRepository(conn), clock=lambda: datetime(2024, 5, 20, 23, 59))

    shifts = repo.find_open_shifts(day_start=DAY_START, day_end=DAY_END)
    assert [(s.name, s.entry.entry_id) for s in shifts] == [("Alice", str(open_entry["_id"]))]

    closed = service.auto_clock_out()

    assert [c.employee_id for c in closed] == [str(alice)]
    stored = conn.collection(EMPLOYEES).find_one({"_id": alice})["attendance"]
    assert stored[0]["date"] == "2024-05-20"
    assert stored[1]["clockOut"] == datetime(2024, 5, 20, 23, 59)
    assert stored[1]["autoClockOut"] is True


def test_payroll_update_only_when_unchanged(conn):
    repo = MongoPayrollRepository(conn)
    alice = ObjectId()
    repo.create_many(
        [
            PayrollDraft(
                employee_id=str(alice),
                name="Alice",
                position="Engineer",
                base_salary=1000,
                bonuses=0,
                deductions=0,
                net_salary=1000,
                status=PayrollStatus.PENDING,
                month="May",
                year=2024,
            )
        ]
    )
    record = repo.list_for_employee(str(alice), month="May")[0]

    updated = repo.update_if_unchanged(record, {"bonuses": 200, "netSalary": 1200})
    assert updated.bonuses == 200
    assert updated.net_salary == 1200

    # stale copy still carries bonuses=0
    assert repo.update_if_unchanged(record, {"deductions": 50, "netSalary": 950}) is None
    stored = conn.collection(PAYROLL_RECORDS).find_one({"_id": ObjectId(record.record_id)})
    assert stored["netSalary"] == stored["baseSalary"] + stored["bonuses"] - stored["deductions"]


def test_loan_decision_and_totals(conn):
    repo = MongoLoanRepository(conn)
    alice = str(ObjectId())

    def apply(amount):
        return repo.create(
            LoanDraft(
                employee_id=alice,
                loan_type=LoanType.PERSONAL,
                amount=amount,
                reason="Car repair",
                duration_months=10,
                interest_rate=0.0,
                monthly_installment=amount / 10,
                created_at=datetime(2024, 5, 20, 10, 0),
            )
        )

    first, second, third = apply(1000), apply(500), apply(250)
    approved = repo.decide(
        first,
        status=LoanStatus.APPROVED,
        approved_at=datetime(2024, 5, 20),
        start_date=datetime(2024, 5, 20),
        end_date=datetime(2025, 3, 20),
    )
    repo.decide(second, status=LoanStatus.APPROVED)

    assert approved.end_date == datetime(2025, 3, 20)
    assert repo.decide(first, status=LoanStatus.REJECTED) is None
    assert repo.total_amount(alice, LoanStatus.APPROVED) == 1500.0
    assert repo.total_amount(alice, LoanStatus.PAID) == 0.0
    assert repo.delete_pending(first, employee_id=alice) is False
    assert repo.delete_pending(third, employee_id=alice) is True
    assert {loan.loan_id for loan in repo.list(employee_id=alice, status=LoanStatus.APPROVED)} == {first, second}
