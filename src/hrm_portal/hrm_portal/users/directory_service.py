from __future__ import annotations

import logging
from collections import Counter, defaultdict
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from werkzeug.security import generate_password_hash

from ..common.datetime_utils import month_bounds, now_local, service_duration
from ..common.validators import require_enum, require_min_length, require_non_empty
from ..core.constants import MIN_PASSWORD_LENGTH
from ..core.enums import STAFF_STATUSES, AccountStatus, AttendanceMark, LeaveStatus, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..leave.repository import LeaveRepository
from .model import EmployeeAccount, SessionUser
from .repository import EmployeeRepository, ManagerRepository

logger = logging.getLogger(__name__)

BulkResult = Tuple[bool, List[Dict[str, Any]]]


class DirectoryService:
    """Employee directory operations for hr and managers."""

    def __init__(
        self,
        employees: EmployeeRepository,
        managers: ManagerRepository,
        leaves: LeaveRepository,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._employees = employees
        self._managers = managers
        self._leaves = leaves
        self._clock = clock

    # ---- reads -------------------------------------------------------

    def _leave_stats(self, employees: Iterable[EmployeeAccount]) -> Dict[str, Counter]:
        ids = [e.account_id for e in employees]
        stats: Dict[str, Counter] = defaultdict(Counter)
        if not ids:
            return stats
        for req in self._leaves.list(employee_ids=ids):
            stats[req.employee_id][req.status] += 1
        return stats

    def _decorate(self, employee: EmployeeAccount, leave_counts: Counter, now: datetime) -> Dict[str, Any]:
        data = employee.to_public_dict()
        if employee.dob:
            data["formattedDob"] = employee.dob.strftime("%d/%m/%Y")
        if employee.created_at:
            data["formattedJoiningDate"] = employee.created_at.strftime("%d/%m/%Y")
        data["serviceDuration"] = service_duration(employee.created_at, now)
        data["leaveStats"] = {
            "approved": leave_counts[LeaveStatus.APPROVED],
            "pending": leave_counts[LeaveStatus.PENDING],
            "rejected": leave_counts[LeaveStatus.REJECTED],
            "total": sum(leave_counts.values()),
        }
        marks = Counter(a.status for a in employee.attendance)
        data["attendanceStats"] = {
            "present": marks[AttendanceMark.PRESENT],
            "absent": marks[AttendanceMark.ABSENT],
            "leave": marks[AttendanceMark.LEAVE],
        }
        return data

    def list_profiles(self, *, current_user: SessionUser, employee_id: Optional[str] = None) -> List[Dict[str, Any]]:
        """Managers see every employee here as well, not only their team."""
        if current_user.role in (Role.HR, Role.MANAGER):
            if employee_id:
                employee = self._employees.get_by_id(employee_id)
                if employee is None:
                    raise NotFoundError("Employee not found")
                employees = [employee]
            else:
                employees = list(self._employees.list_all())
        elif current_user.role == Role.EMPLOYEE:
            own = self._employees.get_by_id(current_user.user_id)
            employees = [own] if own else []
        else:
            raise AuthorizationError("Unauthorized role")

        stats = self._leave_stats(employees)
        now = self._clock()
        return [self._decorate(e, stats[e.account_id], now) for e in employees]

    def list_employees(self, *, current_user: SessionUser, department: Optional[str] = None) -> List[Dict[str, Any]]:
        if current_user.role not in (Role.HR, Role.MANAGER):
            raise AuthorizationError("Access denied: Insufficient permissions")
        return [e.to_public_dict() for e in self._employees.list_all(department=department or None)]

    def own_status(self, *, current_user: SessionUser) -> Dict[str, Any]:
        employee = self._employees.get_by_id(current_user.user_id)
        if employee is None:
            raise NotFoundError("Employee not found")

        now = self._clock()
        start, end = month_bounds(now.date())
        month_entries = [a for a in employee.attendance if a.date and start <= a.date < end]
        present = sum(1 for a in month_entries if a.status == AttendanceMark.PRESENT)
        attendance_pct = round(100 * present / len(month_entries)) if month_entries else 0

        approved = self._leaves.list(employee_ids=[employee.account_id], status=LeaveStatus.APPROVED)
        taken = sum(r.days for r in approved if r.start_date.year == now.year)

        return {
            "success": True,
            "status": employee.status.value,
            "attendance": f"{attendance_pct}%",
            "leavesRemaining": max(employee.total_leaves - taken, 0),
            "leavesTaken": taken,
            "salary": employee.current_salary,
        }

    # ---- writes ------------------------------------------------------

    def set_status(
        self,
        *,
        current_user: SessionUser,
        employee_id: Any,
        status: Any,
        allowed: Iterable[Role] = (Role.MANAGER, Role.HR),
        denied_message: str = "Access denied: Insufficient permissions",
    ) -> Dict[str, Any]:
        if current_user.role not in set(allowed):
            raise AuthorizationError(denied_message)
        employee_id = require_non_empty(employee_id, "Employee ID")
        new_status = require_enum(require_non_empty(status, "Status"), AccountStatus, "status")
        if new_status not in STAFF_STATUSES:
            raise ValidationError("Invalid status. Must be one of: Active, On Leave, Terminated")

        if not self._employees.set_status(employee_id, new_status):
            raise NotFoundError("Employee not found")
        updated = self._employees.get_by_id(employee_id)
        if updated is None:
            raise NotFoundError("Employee not found")
        return updated.to_public_dict(include_attendance=False)

    def reset_passwords(self, *, current_user: SessionUser, employee_ids: Any, new_password: Any) -> BulkResult:
        """Per-employee results; one failure never aborts the others."""
        if current_user.role != Role.HR:
            raise AuthorizationError("Access denied: HR access only")
        if not isinstance(employee_ids, list) or not isinstance(new_password, str) or not new_password:
            raise ValidationError("Invalid request format. Expected employee IDs array and new password.")
        require_min_length(new_password, "Password", MIN_PASSWORD_LENGTH)

        password_hash = generate_password_hash(new_password)
        results = []
        for employee_id in employee_ids:
            try:
                ok = self._employees.set_password(str(employee_id), password_hash)
            except Exception:
                logger.exception("Password reset failed for employee %s", employee_id)
                results.append({"success": False, "employeeId": employee_id, "message": "Failed to reset password"})
                continue
            if ok:
                results.append({"success": True, "employeeId": employee_id, "message": "Password reset successfully"})
            else:
                results.append({"success": False, "employeeId": employee_id, "message": "Employee not found"})
        return any(r["success"] for r in results), results

    def add_leave_allowance(self, *, current_user: SessionUser, updates: Any) -> BulkResult:
        if current_user.role != Role.HR:
            raise AuthorizationError("Access denied: HR access only")
        if not isinstance(updates, list):
            raise ValidationError("Invalid request format. Expected an array of updates.")

        results = []
        for update in updates:
            employee_id = update.get("employeeId") if isinstance(update, dict) else None
            additional = update.get("additionalLeaves") if isinstance(update, dict) else None
            if not employee_id or isinstance(additional, bool) or not isinstance(additional, int):
                results.append({"success": False, "employeeId": employee_id or "unknown", "message": "Invalid update data"})
                continue
            try:
                total = self._employees.add_leave_allowance(str(employee_id), additional)
            except Exception:
                logger.exception("Leave allocation failed for employee %s", employee_id)
                results.append({"success": False, "employeeId": employee_id, "message": "Failed to update employee record"})
                continue
            if total is None:
                results.append({"success": False, "employeeId": employee_id, "message": "Employee not found"})
            else:
                results.append(
                    {
                        "success": True,
                        "employeeId": employee_id,
                        "message": "Leave allocation updated successfully",
                        "newLeaveCount": total,
                    }
                )
        return any(r["success"] for r in results), results

    def _team_target(self, current_user: SessionUser, manager_id: Optional[str]) -> str:
        if current_user.role == Role.MANAGER:
            return current_user.user_id
        if current_user.role == Role.HR:
            return require_non_empty(manager_id, "Manager ID")
        raise AuthorizationError("Access denied: Manager access only")

    def add_team_member(self, *, current_user: SessionUser, employee_id: Any, manager_id: Optional[str] = None) -> List[str]:
        target = self._team_target(current_user, manager_id)
        employee_id = require_non_empty(employee_id, "Employee ID")
        if self._employees.get_by_id(employee_id) is None:
            raise NotFoundError("Employee not found")
        if not self._managers.add_team_member(target, employee_id):
            raise NotFoundError("Manager not found")
        self._employees.set_manager(employee_id, target, assigned_at=self._clock())
        return self._team_of(target)

    def remove_team_member(self, *, current_user: SessionUser, employee_id: Any, manager_id: Optional[str] = None) -> List[str]:
        target = self._team_target(current_user, manager_id)
        employee_id = require_non_empty(employee_id, "Employee ID")
        if not self._managers.remove_team_member(target, employee_id):
            raise NotFoundError("Manager not found")
        employee = self._employees.get_by_id(employee_id)
        if employee is not None and employee.manager_id == target:
            self._employees.set_manager(employee_id, None, assigned_at=None)
        return self._team_of(target)

    def _team_of(self, manager_id: str) -> List[str]:
        manager = self._managers.get_by_id(manager_id)
        return list(manager.team) if manager else []
