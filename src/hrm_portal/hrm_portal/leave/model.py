from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import isoformat
from ..core.enums import LeaveStatus, LeaveType


@dataclass(frozen=True)
class LeaveRequest:
    request_id: str
    employee_id: str
    employee_name: str
    leave_type: LeaveType
    start_date: datetime
    end_date: datetime
    reason: str
    status: LeaveStatus
    created_at: datetime
    approved_by: Optional[str] = None
    approver_name: Optional[str] = None
    approval_date: Optional[datetime] = None

    @property
    def days(self) -> int:
        return (self.end_date.date() - self.start_date.date()).days + 1

    def to_dict(self) -> dict:
        return {
            "_id": self.request_id,
            "employeeId": self.employee_id,
            "employeeName": self.employee_name,
            "leaveType": self.leave_type.value,
            "startDate": isoformat(self.start_date),
            "endDate": isoformat(self.end_date),
            "reason": self.reason,
            "status": self.status.value,
            "createdAt": isoformat(self.created_at),
            "approvedBy": self.approved_by,
            "approverName": self.approver_name,
            "approvalDate": isoformat(self.approval_date),
        }
