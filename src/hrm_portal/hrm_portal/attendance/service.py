from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime, timedelta
from typing import Any, Callable, Dict, List, Optional

from ..common.datetime_utils import day_bounds, hours_between, month_bounds, now_local, parse_optional_date, start_of_day
from ..core.constants import AUTO_CLOCKOUT_WORKERS
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..users.model import EmployeeAccount, SessionUser
from ..users.repository import EmployeeRepository
from .model import AttendanceEntry, ClockedOut, OpenShift
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

CLOCK_IN = "clock-in"
CLOCK_OUT = "clock-out"
SUPERVISOR_ROLES = (Role.MANAGER, Role.HR)


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        *,
        clock: Callable[[], datetime] = now_local,
        max_workers: int = AUTO_CLOCKOUT_WORKERS,
    ):
        self._attendance = attendance
        self._employees = employees
        self._clock = clock
        self._max_workers = int(max_workers)

    @staticmethod
    def _today_entry(employee: EmployeeAccount, today: date) -> Optional[AttendanceEntry]:
        start, end = day_bounds(today)
        for entry in employee.attendance:
            if entry.date and start <= entry.date < end:
                return entry
        return None

    def _employee(self, employee_id: str) -> EmployeeAccount:
        employee = self._employees.get_by_id(employee_id)
        if employee is None:
            raise NotFoundError("Employee not found")
        return employee

    # ---- clock in / out ----------------------------------------------

    def check_in(self, employee_id: str, *, now: datetime | None = None) -> AttendanceEntry:
        now = now or self._clock()
        self._employee(employee_id)
        start, end = day_bounds(now.date())
        entry = self._attendance.add_entry_once(employee_id, day_start=start, day_end=end, clock_in=now)
        if entry is None:
            raise ValidationError("Already clocked in for today")
        return entry

    def check_out(self, employee_id: str, *, now: datetime | None = None) -> AttendanceEntry:
        now = now or self._clock()
        employee = self._employee(employee_id)
        entry = self._today_entry(employee, now.date())
        if entry is None or entry.clock_in is None:
            raise ValidationError("Must clock in before clocking out")
        if entry.clock_out is not None:
            raise ValidationError("Already clocked out for today")

        hours = hours_between(entry.clock_in, now)
        if not self._attendance.close_entry(employee_id, entry.entry_id, clock_out=now, hours_worked=hours):
            raise ValidationError("Already clocked out for today")
        return AttendanceEntry(
            entry_id=entry.entry_id,
            date=entry.date,
            clock_in=entry.clock_in,
            clock_out=now,
            status=entry.status,
            hours_worked=hours,
            auto_clock_out=False,
            notes=entry.notes,
        )

    def clock(self, *, current_user: SessionUser, action: Any, employee_id: Optional[str] = None) -> AttendanceEntry:
        if current_user.role not in (Role.EMPLOYEE, Role.HR):
            raise AuthorizationError("Access denied: Only employees and HR can clock in/out")
        if action not in (CLOCK_IN, CLOCK_OUT):
            raise ValidationError("Invalid action: must be clock-in or clock-out")

        target = current_user.user_id
        if employee_id and current_user.role == Role.HR:
            target = str(employee_id)

        if action == CLOCK_IN:
            return self.check_in(target)
        return self.check_out(target)

    # ---- listing -----------------------------------------------------

    def list_entries(
        self,
        *,
        current_user: SessionUser,
        employee_id: Optional[str] = None,
        day: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        on_day = parse_optional_date(day)
        if day and on_day is None:
            raise ValidationError("Invalid date format")

        if on_day and not employee_id and current_user.role in SUPERVISOR_ROLES:
            start, end = day_bounds(on_day)
            rows = []
            for employee, entry in self._attendance.entries_on(day_start=start, day_end=end):
                row = entry.to_dict()
                row.update({"employeeId": employee.account_id, "employeeName": employee.name, "department": employee.department})
                rows.append(row)
            return rows

        target = current_user.user_id
        if employee_id:
            if current_user.role not in SUPERVISOR_ROLES and str(employee_id) != current_user.user_id:
                raise AuthorizationError("Access denied: You can only view your own attendance records")
            target = str(employee_id)
        employee = self._employee(target)

        if on_day:
            start, end = day_bounds(on_day)
        else:
            start, end = month_bounds(self._clock().date())
            range_start, range_end = parse_optional_date(start_date), parse_optional_date(end_date)
            if range_start and range_end:
                start, end = start_of_day(range_start), start_of_day(range_end) + timedelta(days=1)

        entries = [e for e in employee.attendance if e.date and start <= e.date < end]
        entries.sort(key=lambda e: e.date, reverse=True)
        return [e.to_dict() for e in entries]

    # ---- batch -------------------------------------------------------

    def _close_one(self, shift: OpenShift, now: datetime) -> Optional[ClockedOut]:
        try:
            hours = hours_between(shift.entry.clock_in, now)
            closed = self._attendance.close_entry(
                shift.employee_id, shift.entry.entry_id, clock_out=now, hours_worked=hours, auto=True
            )
        except Exception:
            logger.exception("Auto clock-out failed for employee %s", shift.employee_id)
            return None
        if not closed:
            # clocked out manually in the meantime
            return None
        return ClockedOut(employee_id=shift.employee_id, name=shift.name, clock_out=now)

    def auto_clock_out(self, now: datetime | None = None) -> List[ClockedOut]:
        """Close every entry of the day that has a clock-in and no clock-out.

        Employees are processed in parallel; a failure for one employee is
        logged and does not affect the others.
        """
        now = now or self._clock()
        start, end = day_bounds(now.date())
        open_shifts = list(self._attendance.find_open_shifts(day_start=start, day_end=end))
        if not open_shifts:
            return []

        with ThreadPoolExecutor(max_workers=max(1, min(self._max_workers, len(open_shifts)))) as pool:
            results = list(pool.map(lambda s: self._close_one(s, now), open_shifts))

        done = [r for r in results if r is not None]
        logger.info("Auto clock-out closed %d of %d open entries", len(done), len(open_shifts))
        return done
