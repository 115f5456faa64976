from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import isoformat
from ..core.enums import PayrollStatus


@dataclass(frozen=True)
class PayrollDraft:
    """Fields of a payroll record before it is stored."""

    employee_id: str
    name: str
    position: str
    base_salary: float
    net_salary: float
    month: str
    year: int
    bonuses: float = 0.0
    deductions: float = 0.0
    status: PayrollStatus = PayrollStatus.PENDING


@dataclass(frozen=True)
class PayrollRecord:
    record_id: str
    employee_id: str
    name: str
    position: str
    base_salary: float
    bonuses: float
    bonus_description: str
    deductions: float
    deduction_description: str
    net_salary: float
    status: PayrollStatus
    month: str
    year: int
    payment_date: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "_id": self.record_id,
            "employeeId": self.employee_id,
            "name": self.name,
            "position": self.position,
            "baseSalary": self.base_salary,
            "bonuses": self.bonuses,
            "bonusDescription": self.bonus_description,
            "deductions": self.deductions,
            "deductionDescription": self.deduction_description,
            "netSalary": self.net_salary,
            "status": self.status.value,
            "month": self.month,
            "year": self.year,
            "paymentDate": isoformat(self.payment_date),
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
        }
