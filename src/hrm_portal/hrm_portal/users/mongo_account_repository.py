from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from pymongo import ReturnDocument

from ..attendance.model import AttendanceEntry
from ..core.constants import DEFAULT_TOTAL_LEAVES
from ..core.enums import AccountStatus, AttendanceMark
from ..database.mongo_base import ADMINS, EMPLOYEES, MANAGERS, MongoRepository, id_str, to_object_id, to_object_ids
from .model import AdminAccount, EmployeeAccount, ManagerAccount


def _status(value: Any, default: AccountStatus = AccountStatus.ACTIVE) -> AccountStatus:
    try:
        return AccountStatus(value)
    except ValueError:
        return default


def _as_datetime(value: Any) -> Optional[datetime]:
    # legacy entries may carry strings; they never match a day range
    return value if isinstance(value, datetime) else None


def _as_float(value: Any) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


def attendance_entry_from_doc(doc: dict) -> AttendanceEntry:
    try:
        mark = AttendanceMark(doc.get("status") or AttendanceMark.PRESENT.value)
    except ValueError:
        mark = AttendanceMark.PRESENT
    return AttendanceEntry(
        entry_id=id_str(doc.get("_id")) or "",
        date=_as_datetime(doc.get("date")),
        clock_in=_as_datetime(doc.get("clockIn")),
        clock_out=_as_datetime(doc.get("clockOut")),
        status=mark,
        hours_worked=_as_float(doc.get("hoursWorked")),
        auto_clock_out=bool(doc.get("autoClockOut", False)),
        notes=doc.get("notes") or "",
    )


def employee_from_doc(doc: dict) -> EmployeeAccount:
    return EmployeeAccount(
        account_id=str(doc["_id"]),
        email=doc["email"],
        name=doc.get("name", ""),
        password_hash=doc.get("password", ""),
        cnic=doc.get("cnic", ""),
        department=doc.get("department", ""),
        position=doc.get("role", ""),
        phone=doc.get("phone", ""),
        emergency_contact=doc.get("emergencyContact", ""),
        dob=doc.get("dob"),
        initial_salary=float(doc.get("initialSalary") or 0),
        current_salary=float(doc.get("currentSalary") or 0),
        shift=doc.get("shift", ""),
        status=_status(doc.get("status")),
        expiry_date=doc.get("expiryDate"),
        manager_id=id_str(doc.get("managerId")),
        manager_assigned_date=doc.get("managerAssignedDate"),
        total_leaves=int(doc.get("totalLeaves", DEFAULT_TOTAL_LEAVES)),
        attendance=tuple(attendance_entry_from_doc(a) for a in (doc.get("attendance") or [])),
        profile_picture=doc.get("profilePicture"),
        created_at=doc.get("createdAt"),
    )


class MongoAccountRepository(MongoRepository):
    """get/insert/update shared by the three account collections."""

    def _to_model(self, doc: dict):
        raise NotImplementedError

    def get_by_email(self, email: str):
        doc = self._col.find_one({"email": (email or "").strip().lower()})
        return self._to_model(doc) if doc else None

    def get_by_id(self, account_id: str):
        oid = to_object_id(account_id)
        if oid is None:
            return None
        doc = self._col.find_one({"_id": oid})
        return self._to_model(doc) if doc else None

    def insert(self, fields: Dict[str, Any]) -> str:
        doc = dict(fields)
        doc["email"] = str(doc["email"]).strip().lower()
        result = self._col.insert_one(doc)
        return str(result.inserted_id)

    def update_fields(self, account_id: str, fields: Dict[str, Any]) -> bool:
        oid = to_object_id(account_id)
        if oid is None or not fields:
            return False
        result = self._col.update_one({"_id": oid}, {"$set": dict(fields)})
        return result.matched_count > 0


class MongoAdminRepository(MongoAccountRepository):
    collection_name = ADMINS

    def _to_model(self, doc: dict) -> AdminAccount:
        return AdminAccount(
            account_id=str(doc["_id"]),
            email=doc["email"],
            name=doc.get("name", ""),
            password_hash=doc.get("password", ""),
            status=_status(doc.get("status")),
            super_admin=bool(doc.get("superAdmin", False)),
            permissions=dict(doc.get("permissions") or {}),
            phone=doc.get("phone") or "",
            emergency_contact=doc.get("emergencyContact") or "",
            profile_picture=doc.get("profilePicture"),
            last_login=doc.get("lastLogin"),
            created_at=doc.get("createdAt"),
        )


class MongoManagerRepository(MongoAccountRepository):
    collection_name = MANAGERS

    def _to_model(self, doc: dict) -> ManagerAccount:
        return ManagerAccount(
            account_id=str(doc["_id"]),
            email=doc["email"],
            name=doc.get("name", ""),
            password_hash=doc.get("password", ""),
            department=doc.get("department", ""),
            phone=doc.get("phone", ""),
            status=_status(doc.get("status")),
            team=tuple(str(t) for t in (doc.get("team") or [])),
            permissions=dict(doc.get("permissions") or {}),
            emergency_contact=doc.get("emergencyContact") or "",
            profile_picture=doc.get("profilePicture"),
            joining_date=doc.get("joiningDate"),
        )

    def add_team_member(self, manager_id: str, employee_id: str) -> bool:
        mid, eid = to_object_id(manager_id), to_object_id(employee_id)
        if mid is None or eid is None:
            return False
        result = self._col.update_one({"_id": mid}, {"$addToSet": {"team": eid}})
        return result.matched_count > 0

    def remove_team_member(self, manager_id: str, employee_id: str) -> bool:
        mid, eid = to_object_id(manager_id), to_object_id(employee_id)
        if mid is None or eid is None:
            return False
        result = self._col.update_one({"_id": mid}, {"$pull": {"team": eid}})
        return result.matched_count > 0


class MongoEmployeeRepository(MongoAccountRepository):
    collection_name = EMPLOYEES

    def _to_model(self, doc: dict) -> EmployeeAccount:
        return employee_from_doc(doc)

    def list_all(
        self,
        *,
        department: Optional[str] = None,
        status: Optional[AccountStatus] = None,
        ids: Optional[Sequence[str]] = None,
    ) -> Sequence[EmployeeAccount]:
        query: Dict[str, Any] = {}
        if department:
            query["department"] = department
        if status is not None:
            query["status"] = status.value
        if ids is not None:
            query["_id"] = {"$in": to_object_ids(ids)}
        return [self._to_model(doc) for doc in self._col.find(query).sort("name", 1)]

    def set_status(self, employee_id: str, status: AccountStatus) -> bool:
        return self.update_fields(employee_id, {"status": status.value})

    def set_password(self, employee_id: str, password_hash: str) -> bool:
        return self.update_fields(employee_id, {"password": password_hash})

    def set_manager(self, employee_id: str, manager_id: Optional[str], *, assigned_at: Optional[datetime]) -> bool:
        return self.update_fields(
            employee_id,
            {"managerId": to_object_id(manager_id), "managerAssignedDate": assigned_at},
        )

    def add_leave_allowance(self, employee_id: str, additional: int) -> Optional[int]:
        oid = to_object_id(employee_id)
        if oid is None:
            return None
        # documents created before totalLeaves existed count from the default
        self._col.update_one(
            {"_id": oid, "totalLeaves": {"$exists": False}},
            {"$set": {"totalLeaves": DEFAULT_TOTAL_LEAVES}},
        )
        doc = self._col.find_one_and_update(
            {"_id": oid},
            {"$inc": {"totalLeaves": int(additional)}},
            return_document=ReturnDocument.AFTER,
        )
        return int(doc["totalLeaves"]) if doc else None
