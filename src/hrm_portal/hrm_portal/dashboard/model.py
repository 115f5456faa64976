from __future__ import annotations

from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class DashboardSummary:
    total_employees: int
    present_today: int
    absent_today: int
    on_leave_today: int
    pending_leaves: int
    approved_leaves_this_month: int
    total_payroll: float
    birthdays_today: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "totalEmployees": self.total_employees,
            "presentToday": self.present_today,
            "todayAbsent": self.absent_today,
            "todayOnLeave": self.on_leave_today,
            "pendingLeaves": self.pending_leaves,
            "totalLeaves": self.approved_leaves_this_month,
            "birthdaysToday": list(self.birthdays_today),
            "totalPayroll": self.total_payroll,
        }
