from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import LeaveStatus, LeaveType
from .model import LeaveRequest


class LeaveRepository(Protocol):
    def create(
        self,
        *,
        employee_id: str,
        employee_name: str,
        leave_type: LeaveType,
        start_date: datetime,
        end_date: datetime,
        reason: str,
        created_at: datetime,
    ) -> str:
        raise NotImplementedError

    def get_by_id(self, request_id: str) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def list(
        self,
        *,
        employee_ids: Optional[Sequence[str]] = None,
        status: Optional[LeaveStatus] = None,
    ) -> Sequence[LeaveRequest]:
        """Newest first. employee_ids=None means every employee."""

        raise NotImplementedError

    def decide(
        self,
        request_id: str,
        *,
        status: LeaveStatus,
        approved_by: str,
        decided_at: datetime,
        approver_name: str = "",
    ) -> Optional[LeaveRequest]:
        """Move a Pending request to status in one conditional update.

        approved_by is the deciding account id; approver_name is kept for display.

        Returns the updated request, or None when no Pending request with
        that id exists (already decided, or absent).
        """

        raise NotImplementedError

    def delete_pending(self, request_id: str, *, employee_id: str) -> bool:
        raise NotImplementedError

    def count_overlapping(self, *, status: LeaveStatus, start: datetime, end: datetime) -> int:
        """Requests in status whose [startDate, endDate] intersects [start, end)."""

        raise NotImplementedError
