from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from bson import ObjectId

from ..core.enums import AttendanceMark
from ..database.mongo_base import EMPLOYEES, MongoRepository, to_object_id
from ..users.model import EmployeeAccount
from ..users.mongo_account_repository import attendance_entry_from_doc, employee_from_doc
from .model import AttendanceEntry, OpenShift

logger = logging.getLogger(__name__)


class MongoAttendanceRepository(MongoRepository):
    collection_name = EMPLOYEES

    @staticmethod
    def _in_day(day_start: datetime, day_end: datetime) -> dict:
        return {"$gte": day_start, "$lt": day_end}

    def add_entry_once(
        self,
        employee_id: str,
        *,
        day_start: datetime,
        day_end: datetime,
        clock_in: datetime,
        status: AttendanceMark = AttendanceMark.PRESENT,
    ) -> Optional[AttendanceEntry]:
        oid = to_object_id(employee_id)
        if oid is None:
            return None
        entry = {
            "_id": ObjectId(),
            "date": day_start,
            "clockIn": clock_in,
            "clockOut": None,
            "status": status.value,
            "hoursWorked": 0,
            "autoClockOut": False,
            "notes": "",
        }
        # single conditional update keeps "one entry per day" atomic
        result = self._col.update_one(
            {"_id": oid, "attendance": {"$not": {"$elemMatch": {"date": self._in_day(day_start, day_end)}}}},
            {"$push": {"attendance": entry}},
        )
        if result.modified_count != 1:
            return None
        return attendance_entry_from_doc(entry)

    def close_entry(
        self,
        employee_id: str,
        entry_id: str,
        *,
        clock_out: datetime,
        hours_worked: float,
        auto: bool = False,
    ) -> bool:
        oid, eid = to_object_id(employee_id), to_object_id(entry_id)
        if oid is None or eid is None:
            return False
        result = self._col.update_one(
            {"_id": oid, "attendance": {"$elemMatch": {"_id": eid, "clockOut": None}}},
            {
                "$set": {
                    "attendance.$.clockOut": clock_out,
                    "attendance.$.hoursWorked": hours_worked,
                    "attendance.$.autoClockOut": bool(auto),
                }
            },
        )
        return result.modified_count == 1

    def find_open_shifts(self, *, day_start: datetime, day_end: datetime) -> Sequence[OpenShift]:
        in_day = self._in_day(day_start, day_end)
        cursor = self._col.find(
            {"attendance": {"$elemMatch": {"date": in_day, "clockIn": {"$ne": None}, "clockOut": None}}},
            {"name": 1, "attendance": 1},
        )
        out: List[OpenShift] = []
        for doc in cursor:
            try:
                shifts = [
                    OpenShift(employee_id=str(doc["_id"]), name=doc.get("name", ""), entry=entry)
                    for entry in map(attendance_entry_from_doc, doc.get("attendance") or [])
                    if entry.date and day_start <= entry.date < day_end and entry.is_open
                ]
            except Exception:
                logger.exception("Skipping unreadable attendance for employee %s", doc.get("_id"))
                continue
            out.extend(shifts)
        return out

    def entries_on(self, *, day_start: datetime, day_end: datetime) -> Sequence[Tuple[EmployeeAccount, AttendanceEntry]]:
        cursor = self._col.find({"attendance": {"$elemMatch": {"date": self._in_day(day_start, day_end)}}})
        out = []
        for doc in cursor:
            employee = employee_from_doc(doc)
            for entry in employee.attendance:
                if entry.date and day_start <= entry.date < day_end:
                    out.append((employee, entry))
        return out
