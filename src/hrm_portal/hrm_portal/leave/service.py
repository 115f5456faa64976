from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Dict, Optional, Sequence

from ..common.datetime_utils import now_local, parse_iso_date, start_of_day
from ..common.validators import require_enum, require_non_empty
from ..core.enums import LeaveStatus, LeaveType, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..users.model import ManagerAccount, SessionUser
from ..users.repository import EmployeeRepository, ManagerRepository
from .model import LeaveRequest
from .repository import LeaveRepository

DECISIONS = (LeaveStatus.APPROVED, LeaveStatus.REJECTED)


class LeaveService:
    """Leave workflow: Pending -> Approved | Rejected, nothing else.

    Visibility: employees see their own requests, managers their team's,
    hr everyone's.
    """

    def __init__(
        self,
        leaves: LeaveRepository,
        employees: EmployeeRepository,
        managers: ManagerRepository,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._leaves = leaves
        self._employees = employees
        self._managers = managers
        self._clock = clock

    def _manager(self, current_user: SessionUser) -> ManagerAccount:
        manager = self._managers.get_by_id(current_user.user_id)
        if manager is None:
            raise NotFoundError("Manager not found")
        return manager

    @staticmethod
    def _parse_day(value: str) -> datetime:
        try:
            return start_of_day(parse_iso_date(value.strip()[:10]))
        except ValueError:
            raise ValidationError("Invalid date format")

    def create(self, *, current_user: SessionUser, payload: Dict[str, Any]) -> LeaveRequest:
        if current_user.role != Role.EMPLOYEE:
            raise AuthorizationError("Only employees can submit leave requests")

        leave_type = require_enum(require_non_empty(payload.get("leaveType"), "Leave type"), LeaveType, "leave type")
        start_raw = require_non_empty(payload.get("startDate"), "Start date")
        end_raw = require_non_empty(payload.get("endDate"), "End date")
        reason = require_non_empty(payload.get("reason"), "Reason")

        employee = self._employees.get_by_id(current_user.user_id)
        if employee is None:
            raise NotFoundError("Employee not found")

        start = self._parse_day(start_raw)
        end = self._parse_day(end_raw)
        if end < start:
            raise ValidationError("End date must be on or after start date")
        today = start_of_day(self._clock().date())
        if start < today:
            raise ValidationError("Start date cannot be in the past")

        request_id = self._leaves.create(
            employee_id=employee.account_id,
            employee_name=employee.name,
            leave_type=leave_type,
            start_date=start,
            end_date=end,
            reason=reason,
            created_at=self._clock(),
        )
        created = self._leaves.get_by_id(request_id)
        if created is None:
            raise NotFoundError("Leave request not found")
        return created

    def list_for(self, *, current_user: SessionUser, status: Optional[LeaveStatus] = None) -> Sequence[LeaveRequest]:
        if current_user.role == Role.EMPLOYEE:
            return self._leaves.list(employee_ids=[current_user.user_id], status=status)
        if current_user.role == Role.MANAGER:
            team = self._manager(current_user).team
            return self._leaves.list(employee_ids=list(team), status=status)
        if current_user.role == Role.HR:
            return self._leaves.list(status=status)
        raise AuthorizationError("Invalid role")

    def list_for_approver(self, *, current_user: SessionUser) -> Sequence[LeaveRequest]:
        if current_user.role not in (Role.MANAGER, Role.HR):
            raise AuthorizationError("Access denied: Managers and HR only")
        return self.list_for(current_user=current_user)

    def _can_view(self, current_user: SessionUser, req: LeaveRequest) -> bool:
        if current_user.role == Role.HR:
            return True
        if current_user.role == Role.MANAGER:
            return self._manager(current_user).has_team_member(req.employee_id)
        return req.employee_id == current_user.user_id

    def get(self, *, current_user: SessionUser, request_id: str) -> LeaveRequest:
        req = self._leaves.get_by_id(request_id)
        if req is None:
            raise NotFoundError("Request not found")
        if not self._can_view(current_user, req):
            raise AuthorizationError("Not authorized to view this request")
        return req

    def decide(self, *, current_user: SessionUser, request_id: str, status: Any) -> LeaveRequest:
        if current_user.role not in (Role.MANAGER, Role.HR):
            raise AuthorizationError("Only managers and HR can approve or reject leave requests")

        new_status = require_enum(status, LeaveStatus, "status")
        if new_status not in DECISIONS:
            raise ValidationError("Invalid status. Must be one of: Approved, Rejected")

        req = self._leaves.get_by_id(request_id)
        if req is None:
            raise NotFoundError("Request not found")
        if current_user.role == Role.MANAGER and not self._manager(current_user).has_team_member(req.employee_id):
            raise AuthorizationError("Not authorized to manage this employee")

        decided = self._leaves.decide(
            req.request_id,
            status=new_status,
            approved_by=current_user.user_id,
            approver_name=current_user.name,
            decided_at=self._clock(),
        )
        if decided is None:
            raise NotFoundError("No pending leave request found")
        return decided

    def delete(self, *, current_user: SessionUser, request_id: str) -> None:
        req = self._leaves.get_by_id(request_id)
        if req is None:
            raise NotFoundError("Request not found")
        if current_user.role != Role.EMPLOYEE or req.employee_id != current_user.user_id:
            raise AuthorizationError("Only the employee who submitted the request can delete it")
        if req.status != LeaveStatus.PENDING:
            raise AuthorizationError("Only pending requests can be deleted")
        if not self._leaves.delete_pending(req.request_id, employee_id=current_user.user_id):
            raise NotFoundError("No pending leave request found")
