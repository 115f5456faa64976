from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import isoformat
from ..core.enums import LoanStatus, LoanType


@dataclass(frozen=True)
class LoanDraft:
    """A validated application before it is stored."""

    employee_id: str
    loan_type: LoanType
    amount: float
    reason: str
    duration_months: int
    interest_rate: float
    monthly_installment: float
    created_at: datetime


@dataclass(frozen=True)
class LoanApplication:
    loan_id: str
    employee_id: str
    loan_type: LoanType
    amount: float
    reason: str
    duration_months: int
    interest_rate: float
    monthly_installment: float
    status: LoanStatus
    created_at: Optional[datetime] = None
    approved_at: Optional[datetime] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "_id": self.loan_id,
            "employeeId": self.employee_id,
            "loanType": self.loan_type.value,
            "amount": self.amount,
            "reason": self.reason,
            "durationMonths": self.duration_months,
            "interestRate": self.interest_rate,
            "monthlyInstallment": self.monthly_installment,
            "status": self.status.value,
            "createdAt": isoformat(self.created_at),
            "approvedAt": isoformat(self.approved_at),
            "startDate": isoformat(self.start_date),
            "endDate": isoformat(self.end_date),
        }


@dataclass(frozen=True)
class LoanBalance:
    total_approved: float
    total_paid: float

    @property
    def total_outstanding(self) -> float:
        return round(self.total_approved - self.total_paid, 2)

    def to_dict(self) -> dict:
        return {
            "totalOutstanding": self.total_outstanding,
            "totalApproved": self.total_approved,
            "totalPaid": self.total_paid,
        }
