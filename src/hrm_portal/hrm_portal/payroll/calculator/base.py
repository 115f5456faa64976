from __future__ import annotations

from abc import ABC, abstractmethod


class PayrollCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll)."""

    @abstractmethod
    def net_salary(self, *, base_salary: float, bonuses: float, deductions: float) -> float:
        raise NotImplementedError
