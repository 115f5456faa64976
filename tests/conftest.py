from __future__ import annotations

import itertools
from dataclasses import replace
from datetime import datetime
from typing import Any, Dict, List, Optional

import pytest
from werkzeug.security import generate_password_hash

from src.hrm_portal.hrm_portal.activity.model import ActivityLogEntry, ActivityQuery
from src.hrm_portal.hrm_portal.announcements.model import Announcement
from src.hrm_portal.hrm_portal.attendance.model import OpenShift
from src.hrm_portal.hrm_portal.container import assemble_container
from src.hrm_portal.hrm_portal.core.constants import DEFAULT_TOTAL_LEAVES
from src.hrm_portal.hrm_portal.core.enums import AccountStatus, LeaveStatus, LoanStatus, PayrollStatus
from src.hrm_portal.hrm_portal.leave.model import LeaveRequest
from src.hrm_portal.hrm_portal.loans.model import LoanApplication
from src.hrm_portal.hrm_portal.payroll.model import PayrollRecord
from src.hrm_portal.hrm_portal.users.model import (
    AdminAccount,
    Identity,
    ManagerAccount,
    SessionUser,
    role_for,
)
from src.hrm_portal.hrm_portal.users.mongo_account_repository import attendance_entry_from_doc, employee_from_doc
from src.hrm_portal.hrm_portal.users.tokens import TokenService

# Cheap hashes keep the suite fast.
HASH_METHOD = "pbkdf2:sha256:1000"


class FixedClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


# ---- accounts ------------------------------------------------------------


class FakeAccountRepo:
    prefix = "acc"

    def __init__(self):
        self.docs: Dict[str, dict] = {}
        self._seq = itertools.count(1)

    def _to_model(self, doc: dict):
        raise NotImplementedError

    def add(self, *, password: str = "secret123", **fields) -> str:
        fields["password"] = generate_password_hash(password, method=HASH_METHOD)
        return self.insert(fields)

    def insert(self, fields: Dict[str, Any]) -> str:
        account_id = f"{self.prefix}{next(self._seq)}"
        doc = dict(fields)
        doc["_id"] = account_id
        doc["email"] = str(doc["email"]).strip().lower()
        self.docs[account_id] = doc
        return account_id

    def get_by_email(self, email: str):
        email = (email or "").strip().lower()
        for doc in self.docs.values():
            if doc["email"] == email:
                return self._to_model(doc)
        return None

    def get_by_id(self, account_id: str):
        doc = self.docs.get(str(account_id))
        return self._to_model(doc) if doc else None

    def update_fields(self, account_id: str, fields: Dict[str, Any]) -> bool:
        doc = self.docs.get(str(account_id))
        if doc is None or not fields:
            return False
        doc.update(fields)
        return True


class FakeAdminRepo(FakeAccountRepo):
    prefix = "adm"

    def _to_model(self, doc: dict) -> AdminAccount:
        return AdminAccount(
            account_id=doc["_id"],
            email=doc["email"],
            name=doc.get("name", ""),
            password_hash=doc.get("password", ""),
            status=AccountStatus(doc.get("status", "Active")),
            permissions=dict(doc.get("permissions") or {}),
            last_login=doc.get("lastLogin"),
        )


class FakeManagerRepo(FakeAccountRepo):
    prefix = "mgr"

    def _to_model(self, doc: dict) -> ManagerAccount:
        return ManagerAccount(
            account_id=doc["_id"],
            email=doc["email"],
            name=doc.get("name", ""),
            password_hash=doc.get("password", ""),
            department=doc.get("department", ""),
            phone=doc.get("phone", ""),
            team=tuple(str(t) for t in doc.get("team", [])),
            permissions=dict(doc.get("permissions") or {}),
        )

    def add_team_member(self, manager_id: str, employee_id: str) -> bool:
        doc = self.docs.get(str(manager_id))
        if doc is None:
            return False
        team = doc.setdefault("team", [])
        if str(employee_id) not in team:
            team.append(str(employee_id))
        return True

    def remove_team_member(self, manager_id: str, employee_id: str) -> bool:
        doc = self.docs.get(str(manager_id))
        if doc is None:
            return False
        doc["team"] = [t for t in doc.get("team", []) if t != str(employee_id)]
        return True


class FakeEmployeeRepo(FakeAccountRepo):
    prefix = "emp"

    def _to_model(self, doc: dict):
        return employee_from_doc(doc)

    def add(self, *, password: str = "secret123", **fields) -> str:
        defaults = {
            "cnic": "00000-0000000-0",
            "department": "Engineering",
            "role": "Developer",
            "phone": "555-0000",
            "emergencyContact": "555-9999",
            "initialSalary": 1000,
            "currentSalary": 1000,
            "shift": "Day",
            "status": "Active",
            "attendance": [],
            "totalLeaves": DEFAULT_TOTAL_LEAVES,
        }
        defaults.update(fields)
        return super().add(password=password, **defaults)

    def list_all(self, *, department=None, status=None, ids=None):
        out = []
        for doc in self.docs.values():
            if department and doc.get("department") != department:
                continue
            if status is not None and doc.get("status") != status.value:
                continue
            if ids is not None and doc["_id"] not in set(ids):
                continue
            out.append(self._to_model(doc))
        return sorted(out, key=lambda e: e.name)

    def set_status(self, employee_id, status) -> bool:
        return self.update_fields(employee_id, {"status": status.value})

    def set_password(self, employee_id, password_hash) -> bool:
        return self.update_fields(employee_id, {"password": password_hash})

    def set_manager(self, employee_id, manager_id, *, assigned_at) -> bool:
        return self.update_fields(employee_id, {"managerId": manager_id, "managerAssignedDate": assigned_at})

    def add_leave_allowance(self, employee_id, additional) -> Optional[int]:
        doc = self.docs.get(str(employee_id))
        if doc is None:
            return None
        doc["totalLeaves"] = int(doc.get("totalLeaves", DEFAULT_TOTAL_LEAVES)) + int(additional)
        return doc["totalLeaves"]


class FakeAttendanceRepo:
    """Works on the employee documents of a FakeEmployeeRepo."""

    def __init__(self, employees: FakeEmployeeRepo):
        self._employees = employees
        self._seq = itertools.count(1)
        self.fail_for = set()

    def _day_entries(self, doc, day_start, day_end):
        return [
            a for a in doc.get("attendance", []) if isinstance(a.get("date"), datetime) and day_start <= a["date"] < day_end
        ]

    def add_entry_once(self, employee_id, *, day_start, day_end, clock_in, status=None):
        doc = self._employees.docs.get(str(employee_id))
        if doc is None or self._day_entries(doc, day_start, day_end):
            return None
        entry = {
            "_id": f"att{next(self._seq)}",
            "date": day_start,
            "clockIn": clock_in,
            "clockOut": None,
            "status": "present" if status is None else status.value,
            "hoursWorked": 0,
            "autoClockOut": False,
            "notes": "",
        }
        doc.setdefault("attendance", []).append(entry)
        return attendance_entry_from_doc(entry)

    def close_entry(self, employee_id, entry_id, *, clock_out, hours_worked, auto=False) -> bool:
        if employee_id in self.fail_for:
            raise RuntimeError("store unavailable")
        doc = self._employees.docs.get(str(employee_id))
        for entry in (doc or {}).get("attendance", []):
            if entry["_id"] == entry_id and entry["clockOut"] is None:
                entry.update({"clockOut": clock_out, "hoursWorked": hours_worked, "autoClockOut": bool(auto)})
                return True
        return False

    def find_open_shifts(self, *, day_start, day_end):
        out = []
        for doc in self._employees.docs.values():
            for raw in self._day_entries(doc, day_start, day_end):
                entry = attendance_entry_from_doc(raw)
                if entry.is_open:
                    out.append(OpenShift(employee_id=doc["_id"], name=doc.get("name", ""), entry=entry))
        return out

    def entries_on(self, *, day_start, day_end):
        out = []
        for doc in self._employees.docs.values():
            employee = employee_from_doc(doc)
            for entry in employee.attendance:
                if entry.date and day_start <= entry.date < day_end:
                    out.append((employee, entry))
        return out


# ---- other stores ----------------------------------------------------------


class FakeLeaveRepo:
    def __init__(self):
        self.items: Dict[str, LeaveRequest] = {}
        self._seq = itertools.count(1)

    def create(self, *, employee_id, employee_name, leave_type, start_date, end_date, reason, created_at) -> str:
        request_id = f"lv{next(self._seq)}"
        self.items[request_id] = LeaveRequest(
            request_id=request_id,
            employee_id=employee_id,
            employee_name=employee_name,
            leave_type=leave_type,
            start_date=start_date,
            end_date=end_date,
            reason=reason,
            status=LeaveStatus.PENDING,
            created_at=created_at,
        )
        return request_id

    def get_by_id(self, request_id):
        return self.items.get(str(request_id))

    def list(self, *, employee_ids=None, status=None):
        out = [
            r
            for r in self.items.values()
            if (employee_ids is None or r.employee_id in set(employee_ids)) and (status is None or r.status == status)
        ]
        return sorted(out, key=lambda r: r.created_at, reverse=True)

    def decide(self, request_id, *, status, approved_by, decided_at, approver_name=""):
        req = self.items.get(str(request_id))
        if req is None or req.status != LeaveStatus.PENDING:
            return None
        req = replace(
            req, status=status, approved_by=approved_by, approver_name=approver_name, approval_date=decided_at
        )
        self.items[req.request_id] = req
        return req

    def delete_pending(self, request_id, *, employee_id) -> bool:
        req = self.items.get(str(request_id))
        if req is None or req.employee_id != employee_id or req.status != LeaveStatus.PENDING:
            return False
        del self.items[req.request_id]
        return True

    def count_overlapping(self, *, status, start, end) -> int:
        return sum(1 for r in self.items.values() if r.status == status and r.start_date < end and r.end_date >= start)


PAYROLL_FIELDS = {
    "baseSalary": "base_salary",
    "bonuses": "bonuses",
    "deductions": "deductions",
    "netSalary": "net_salary",
    "bonusDescription": "bonus_description",
    "deductionDescription": "deduction_description",
    "paymentDate": "payment_date",
    "updatedAt": "updated_at",
}


class FakePayrollRepo:
    def __init__(self):
        self.items: Dict[str, PayrollRecord] = {}
        self._seq = itertools.count(1)

    def list(self, *, month=None, name_search=None, employee_ids=None):
        out = []
        for r in self.items.values():
            if month and r.month != month:
                continue
            if name_search and name_search.lower() not in r.name.lower():
                continue
            if employee_ids is not None and r.employee_id not in set(employee_ids):
                continue
            out.append(r)
        return sorted(out, key=lambda r: r.record_id, reverse=True)

    def list_for_employee(self, employee_id, *, month=None):
        return [r for r in self.list(month=month) if r.employee_id == employee_id]

    def get_by_id(self, record_id):
        return self.items.get(str(record_id))

    def create_many(self, drafts) -> int:
        for d in drafts:
            record_id = f"pay{next(self._seq):04d}"
            self.items[record_id] = PayrollRecord(
                record_id=record_id,
                employee_id=d.employee_id,
                name=d.name,
                position=d.position,
                base_salary=d.base_salary,
                bonuses=d.bonuses,
                bonus_description="",
                deductions=d.deductions,
                deduction_description="",
                net_salary=d.net_salary,
                status=d.status,
                month=d.month,
                year=d.year,
            )
        return len(drafts)

    def update_if_unchanged(self, record, fields):
        current = self.items.get(record.record_id)
        if current is None:
            return None
        if (current.base_salary, current.bonuses, current.deductions) != (
            record.base_salary,
            record.bonuses,
            record.deductions,
        ):
            return None
        changes = {PAYROLL_FIELDS[k]: v for k, v in fields.items() if k in PAYROLL_FIELDS}
        if "status" in fields:
            changes["status"] = PayrollStatus(fields["status"])
        updated = replace(current, **changes)
        self.items[updated.record_id] = updated
        return updated


class FakeLoanRepo:
    def __init__(self):
        self.items: Dict[str, LoanApplication] = {}
        self._seq = itertools.count(1)

    def create(self, draft) -> str:
        loan_id = f"loan{next(self._seq)}"
        self.items[loan_id] = LoanApplication(
            loan_id=loan_id,
            employee_id=draft.employee_id,
            loan_type=draft.loan_type,
            amount=draft.amount,
            reason=draft.reason,
            duration_months=draft.duration_months,
            interest_rate=draft.interest_rate,
            monthly_installment=draft.monthly_installment,
            status=LoanStatus.PENDING,
            created_at=draft.created_at,
        )
        return loan_id

    def get_by_id(self, loan_id):
        return self.items.get(str(loan_id))

    def list(self, *, employee_id=None, status=None, created_from=None, created_to=None):
        out = [
            loan
            for loan in self.items.values()
            if (employee_id is None or loan.employee_id == employee_id)
            and (status is None or loan.status == status)
            and (created_from is None or created_from <= loan.created_at < created_to)
        ]
        return sorted(out, key=lambda loan: loan.created_at, reverse=True)

    def decide(self, loan_id, *, status, approved_at=None, start_date=None, end_date=None):
        loan = self.items.get(str(loan_id))
        if loan is None or loan.status != LoanStatus.PENDING:
            return None
        changes = {"status": status}
        if approved_at is not None:
            changes.update(approved_at=approved_at, start_date=start_date, end_date=end_date)
        loan = replace(loan, **changes)
        self.items[loan.loan_id] = loan
        return loan

    def delete_pending(self, loan_id, *, employee_id) -> bool:
        loan = self.items.get(str(loan_id))
        if loan is None or loan.employee_id != employee_id or loan.status != LoanStatus.PENDING:
            return False
        del self.items[loan.loan_id]
        return True

    def total_amount(self, employee_id, status) -> float:
        return sum(loan.amount for loan in self.items.values() if loan.employee_id == employee_id and loan.status == status)


class FakeAnnouncementRepo:
    def __init__(self):
        self.items: List[Announcement] = []

    def create(self, *, title, content, author, category, urgency, date):
        item = Announcement(
            announcement_id=f"ann{len(self.items) + 1}",
            title=title,
            content=content,
            author=author,
            category=category,
            urgency=urgency,
            date=date,
        )
        self.items.append(item)
        return item

    def list_recent(self, *, limit=100):
        return list(reversed(self.items))[:limit]


class FakeActivityRepo:
    def __init__(self):
        self.entries: List[ActivityLogEntry] = []
        self.fail = False

    def append(self, entry: ActivityLogEntry) -> str:
        if self.fail:
            raise RuntimeError("store unavailable")
        self.entries.append(entry)
        return f"log{len(self.entries)}"

    def query(self, q: ActivityQuery):
        out = [
            e
            for e in self.entries
            if (q.user_id is None or e.user_id == q.user_id)
            and (q.action is None or e.action == q.action)
            and (q.module is None or e.module == q.module)
            and (q.user_role is None or e.user_role == q.user_role)
            and (q.start is None or q.start <= e.timestamp < q.end)
        ]
        out.sort(key=lambda e: e.timestamp, reverse=True)
        return out[q.skip : q.skip + q.limit], len(out)


# ---- fixtures ------------------------------------------------------------


def session_for(account) -> SessionUser:
    return SessionUser.from_identity(Identity(account=account, kind=account.kind, role=role_for(account)))


@pytest.fixture
def clock():
    return FixedClock(datetime(2024, 5, 20, 10, 0))


@pytest.fixture
def admins():
    return FakeAdminRepo()


@pytest.fixture
def managers():
    return FakeManagerRepo()


@pytest.fixture
def employees():
    return FakeEmployeeRepo()


@pytest.fixture
def attendance(employees):
    return FakeAttendanceRepo(employees)


@pytest.fixture
def leaves():
    return FakeLeaveRepo()


@pytest.fixture
def payroll():
    return FakePayrollRepo()


@pytest.fixture
def activity_repo():
    return FakeActivityRepo()


@pytest.fixture
def loans():
    return FakeLoanRepo()


@pytest.fixture
def tokens():
    return TokenService("test-secret")


@pytest.fixture
def container(admins, managers, employees, attendance, leaves, payroll, activity_repo, loans, tokens, clock):
    c = assemble_container(
        admins_repo=admins,
        managers_repo=managers,
        employees_repo=employees,
        leaves_repo=leaves,
        payroll_repo=payroll,
        announcements_repo=FakeAnnouncementRepo(),
        attendance_repo=attendance,
        activity_repo=activity_repo,
        loans_repo=loans,
        tokens=tokens,
        clock=clock,
    )
    yield c
    c.activity_logger.stop()


@pytest.fixture
def app(container, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    from src.hrm_portal.hrm_portal.main import create_app

    return create_app(container=container)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def people(admins, managers, employees):
    """One account per variant, with alice on maria's team."""
    admin_id = admins.add(email="admin@example.com", name="Ada Admin", password="admin123")
    alice_id = employees.add(email="alice@example.com", name="Alice", password="alice123")
    hr_staff_id = employees.add(email="henry@example.com", name="Henry", role="hr", password="henry123")
    manager_id = managers.add(
        email="maria@example.com",
        name="Maria",
        department="Engineering",
        phone="555-0100",
        password="maria123",
        team=[alice_id],
        permissions={"canManageLeaves": True, "canManagePayroll": False},
    )
    other_manager_id = managers.add(
        email="omar@example.com", name="Omar", department="Sales", phone="555-0200", password="omar123"
    )
    return {
        "admin": session_for(admins.get_by_id(admin_id)),
        "alice": session_for(employees.get_by_id(alice_id)),
        "henry": session_for(employees.get_by_id(hr_staff_id)),
        "maria": session_for(managers.get_by_id(manager_id)),
        "omar": session_for(managers.get_by_id(other_manager_id)),
    }


@pytest.fixture
def login(client):
    def _login(email: str, password: str):
        return client.post("/api/auth/login", json={"email": email, "password": password})

    return _login
