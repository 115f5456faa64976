from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence, Tuple

from ..core.enums import AttendanceMark
from ..users.model import EmployeeAccount
from .model import AttendanceEntry, OpenShift


class AttendanceRepository(Protocol):
    """Attendance entries embedded in employee documents."""

    def add_entry_once(
        self,
        employee_id: str,
        *,
        day_start: datetime,
        day_end: datetime,
        clock_in: datetime,
        status: AttendanceMark = AttendanceMark.PRESENT,
    ) -> Optional[AttendanceEntry]:
        """Push a new entry unless the employee already has one in [day_start, day_end).

        Returns None when nothing was added.
        """

        raise NotImplementedError

    def close_entry(
        self,
        employee_id: str,
        entry_id: str,
        *,
        clock_out: datetime,
        hours_worked: float,
        auto: bool = False,
    ) -> bool:
        """Set clockOut on an entry that is still open. False if it was already closed."""

        raise NotImplementedError

    def find_open_shifts(self, *, day_start: datetime, day_end: datetime) -> Sequence[OpenShift]:
        raise NotImplementedError

    def entries_on(self, *, day_start: datetime, day_end: datetime) -> Sequence[Tuple[EmployeeAccount, AttendanceEntry]]:
        raise NotImplementedError
