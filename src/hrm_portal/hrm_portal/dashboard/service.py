from __future__ import annotations

from datetime import date, datetime
from typing import Callable, List, Sequence

from ..common.datetime_utils import day_bounds, month_bounds, now_local
from ..core.enums import AccountStatus, LeaveStatus, Role
from ..leave.repository import LeaveRepository
from ..users.model import EmployeeAccount, SessionUser
from ..users.repository import EmployeeRepository
from ..users.session import require_role
from .model import DashboardSummary


def born_on(employee: EmployeeAccount, day: date) -> bool:
    dob = employee.dob
    return dob is not None and (dob.month, dob.day) == (day.month, day.day)


class DashboardService:
    """Headcount and leave figures for the manager/hr landing pages."""

    def __init__(
        self,
        employees: EmployeeRepository,
        leaves: LeaveRepository,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._employees = employees
        self._leaves = leaves
        self._clock = clock

    def birthdays_today(self, employees: Sequence[EmployeeAccount] | None = None) -> List[str]:
        today = self._clock().date()
        if employees is None:
            employees = self._employees.list_all()
        return [e.name for e in employees if born_on(e, today)]

    def summary(self, *, current_user: SessionUser) -> DashboardSummary:
        require_role(current_user, (Role.MANAGER, Role.HR), "Unauthorized - Manager access only")

        now = self._clock()
        day_start, day_end = day_bounds(now.date())
        month_start, month_end = month_bounds(now.date())

        away_today = {
            r.employee_id
            for r in self._leaves.list(status=LeaveStatus.APPROVED)
            if r.start_date < day_end and r.end_date >= day_start
        }

        employees = self._employees.list_all()
        present = absent = on_leave = 0
        for employee in employees:
            if employee.status == AccountStatus.TERMINATED:
                continue
            if employee.status == AccountStatus.ON_LEAVE or employee.account_id in away_today:
                on_leave += 1
                continue
            clocked_in = any(
                e.clock_in is not None and e.date and day_start <= e.date < day_end for e in employee.attendance
            )
            if clocked_in:
                present += 1
            else:
                absent += 1

        active = [e for e in employees if e.status == AccountStatus.ACTIVE]
        return DashboardSummary(
            total_employees=len(active),
            present_today=present,
            absent_today=absent,
            on_leave_today=on_leave,
            pending_leaves=len(self._leaves.list(status=LeaveStatus.PENDING)),
            approved_leaves_this_month=self._leaves.count_overlapping(
                status=LeaveStatus.APPROVED, start=month_start, end=month_end
            ),
            total_payroll=round(sum(e.current_salary for e in active), 2),
            birthdays_today=self.birthdays_today(employees),
        )
