from __future__ import annotations

from typing import Any, Dict, Optional, Protocol, Sequence

from .model import PayrollDraft, PayrollRecord


class PayrollRepository(Protocol):
    def list(
        self,
        *,
        month: Optional[str] = None,
        name_search: Optional[str] = None,
        employee_ids: Optional[Sequence[str]] = None,
    ) -> Sequence[PayrollRecord]:
        """Newest first."""

        raise NotImplementedError

    def list_for_employee(self, employee_id: str, *, month: Optional[str] = None) -> Sequence[PayrollRecord]:
        raise NotImplementedError

    def get_by_id(self, record_id: str) -> Optional[PayrollRecord]:
        raise NotImplementedError

    def create_many(self, drafts: Sequence[PayrollDraft]) -> int:
        raise NotImplementedError

    def update_if_unchanged(
        self,
        record: PayrollRecord,
        fields: Dict[str, Any],
    ) -> Optional[PayrollRecord]:
        """Apply fields in one update, only if the salary inputs still match record.

        Returns None when the record is gone or was changed in between.
        """

        raise NotImplementedError
