from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import isoformat
from ..core.enums import AttendanceMark


@dataclass(frozen=True)
class AttendanceEntry:
    """One day of attendance, embedded in the employee document."""

    entry_id: str
    date: Optional[datetime]
    clock_in: Optional[datetime]
    clock_out: Optional[datetime]
    status: AttendanceMark
    hours_worked: float = 0.0
    auto_clock_out: bool = False
    notes: str = ""

    @property
    def is_open(self) -> bool:
        return self.clock_in is not None and self.clock_out is None

    def to_dict(self) -> dict:
        return {
            "_id": self.entry_id,
            "date": isoformat(self.date),
            "clockIn": isoformat(self.clock_in),
            "clockOut": isoformat(self.clock_out),
            "status": self.status.value,
            "hoursWorked": self.hours_worked,
            "autoClockOut": self.auto_clock_out,
            "notes": self.notes,
        }


@dataclass(frozen=True)
class OpenShift:
    """An employee whose entry for the day has a clock-in but no clock-out."""

    employee_id: str
    name: str
    entry: AttendanceEntry


@dataclass(frozen=True)
class ClockedOut:
    employee_id: str
    name: str
    clock_out: datetime

    def to_dict(self) -> dict:
        return {"employeeId": self.employee_id, "name": self.name, "clockOut": isoformat(self.clock_out)}
