from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import LoanStatus
from .model import LoanApplication, LoanDraft


class LoanRepository(Protocol):
    def create(self, draft: LoanDraft) -> str:
        raise NotImplementedError

    def get_by_id(self, loan_id: str) -> Optional[LoanApplication]:
        raise NotImplementedError

    def list(
        self,
        *,
        employee_id: Optional[str] = None,
        status: Optional[LoanStatus] = None,
        created_from: Optional[datetime] = None,
        created_to: Optional[datetime] = None,
    ) -> Sequence[LoanApplication]:
        """Newest first; created_from/created_to bound createdAt as [from, to)."""

        raise NotImplementedError

    def decide(
        self,
        loan_id: str,
        *,
        status: LoanStatus,
        approved_at: Optional[datetime] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> Optional[LoanApplication]:
        """Conditional update that only matches a Pending application."""

        raise NotImplementedError

    def delete_pending(self, loan_id: str, *, employee_id: str) -> bool:
        raise NotImplementedError

    def total_amount(self, employee_id: str, status: LoanStatus) -> float:
        raise NotImplementedError
