from __future__ import annotations

from .base import PayrollCalculator


class StandardPayrollCalculator(PayrollCalculator):
    """Standard rule: base + bonuses - deductions (may go negative)."""

    def net_salary(self, *, base_salary: float, bonuses: float, deductions: float) -> float:
        return round(float(base_salary) + float(bonuses) - float(deductions), 2)
