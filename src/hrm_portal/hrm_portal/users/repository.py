from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Protocol, Sequence

from ..core.enums import AccountStatus
from .model import Account, AdminAccount, EmployeeAccount, ManagerAccount


class AccountRepository(Protocol):
    """Operations every account store supports.

    Note: services depend on these interfaces, never on pymongo directly.
    """

    def get_by_email(self, email: str) -> Optional[Account]:
        raise NotImplementedError

    def get_by_id(self, account_id: str) -> Optional[Account]:
        raise NotImplementedError

    def insert(self, fields: Dict[str, Any]) -> str:
        """Insert a new account document, returning its id as str."""

        raise NotImplementedError

    def update_fields(self, account_id: str, fields: Dict[str, Any]) -> bool:
        raise NotImplementedError


class AdminRepository(AccountRepository, Protocol):
    def get_by_email(self, email: str) -> Optional[AdminAccount]:
        raise NotImplementedError

    def get_by_id(self, account_id: str) -> Optional[AdminAccount]:
        raise NotImplementedError


class ManagerRepository(AccountRepository, Protocol):
    def get_by_email(self, email: str) -> Optional[ManagerAccount]:
        raise NotImplementedError

    def get_by_id(self, account_id: str) -> Optional[ManagerAccount]:
        raise NotImplementedError

    def add_team_member(self, manager_id: str, employee_id: str) -> bool:
        raise NotImplementedError

    def remove_team_member(self, manager_id: str, employee_id: str) -> bool:
        raise NotImplementedError


class EmployeeRepository(AccountRepository, Protocol):
    def get_by_email(self, email: str) -> Optional[EmployeeAccount]:
        raise NotImplementedError

    def get_by_id(self, account_id: str) -> Optional[EmployeeAccount]:
        raise NotImplementedError

    def list_all(
        self,
        *,
        department: Optional[str] = None,
        status: Optional[AccountStatus] = None,
        ids: Optional[Sequence[str]] = None,
    ) -> Sequence[EmployeeAccount]:
        raise NotImplementedError

    def set_status(self, employee_id: str, status: AccountStatus) -> bool:
        raise NotImplementedError

    def set_password(self, employee_id: str, password_hash: str) -> bool:
        raise NotImplementedError

    def set_manager(self, employee_id: str, manager_id: Optional[str], *, assigned_at: Optional[datetime]) -> bool:
        raise NotImplementedError

    def add_leave_allowance(self, employee_id: str, additional: int) -> Optional[int]:
        """Increment totalLeaves, returning the new value (None if not found)."""

        raise NotImplementedError
