from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional, Tuple, Union

from ..attendance.model import AttendanceEntry
from ..common.datetime_utils import isoformat
from ..core.constants import DEFAULT_TOTAL_LEAVES
from ..core.enums import AccountKind, AccountStatus, Role

HR_POSITION = "hr"


@dataclass(frozen=True)
class AdminAccount:
    """HR administrator account. Always authenticates with role hr."""

    account_id: str
    email: str
    name: str
    password_hash: str
    status: AccountStatus = AccountStatus.ACTIVE
    super_admin: bool = False
    permissions: Dict[str, bool] = field(default_factory=dict)
    phone: str = ""
    emergency_contact: str = ""
    profile_picture: Optional[str] = None
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None

    kind = AccountKind.ADMIN

    def to_public_dict(self) -> dict:
        return {
            "_id": self.account_id,
            "email": self.email,
            "name": self.name,
            "role": Role.HR.value,
            "status": self.status.value,
            "superAdmin": self.super_admin,
            "permissions": dict(self.permissions),
            "phone": self.phone,
            "emergencyContact": self.emergency_contact,
            "profilePicture": self.profile_picture,
            "lastLogin": isoformat(self.last_login),
            "createdAt": isoformat(self.created_at),
        }


@dataclass(frozen=True)
class ManagerAccount:
    account_id: str
    email: str
    name: str
    password_hash: str
    department: str
    phone: str
    status: AccountStatus = AccountStatus.ACTIVE
    team: Tuple[str, ...] = ()
    permissions: Dict[str, bool] = field(default_factory=dict)
    emergency_contact: str = ""
    profile_picture: Optional[str] = None
    joining_date: Optional[datetime] = None

    kind = AccountKind.MANAGER

    def has_team_member(self, employee_id: Any) -> bool:
        # team ids are normalized to str by the repository
        return str(employee_id) in self.team

    def can(self, permission: str) -> bool:
        return bool(self.permissions.get(permission, False))

    def to_public_dict(self) -> dict:
        return {
            "_id": self.account_id,
            "email": self.email,
            "name": self.name,
            "role": Role.MANAGER.value,
            "department": self.department,
            "phone": self.phone,
            "status": self.status.value,
            "team": list(self.team),
            "permissions": dict(self.permissions),
            "emergencyContact": self.emergency_contact,
            "profilePicture": self.profile_picture,
            "joiningDate": isoformat(self.joining_date),
        }


@dataclass(frozen=True)
class EmployeeAccount:
    account_id: str
    email: str
    name: str
    password_hash: str
    cnic: str
    department: str
    position: str
    phone: str
    emergency_contact: str
    dob: Optional[datetime]
    initial_salary: float
    current_salary: float
    shift: str
    status: AccountStatus = AccountStatus.ACTIVE
    expiry_date: Optional[datetime] = None
    manager_id: Optional[str] = None
    manager_assigned_date: Optional[datetime] = None
    total_leaves: int = DEFAULT_TOTAL_LEAVES
    attendance: Tuple[AttendanceEntry, ...] = ()
    profile_picture: Optional[str] = None
    created_at: Optional[datetime] = None

    kind = AccountKind.EMPLOYEE

    @property
    def is_hr(self) -> bool:
        return (self.position or "").strip().lower() == HR_POSITION

    def to_public_dict(self, *, include_attendance: bool = True) -> dict:
        data = {
            "_id": self.account_id,
            "email": self.email,
            "name": self.name,
            "cnic": self.cnic,
            "department": self.department,
            "role": self.position,
            "phone": self.phone,
            "emergencyContact": self.emergency_contact,
            "dob": isoformat(self.dob),
            "initialSalary": self.initial_salary,
            "currentSalary": self.current_salary,
            "shift": self.shift,
            "status": self.status.value,
            "expiryDate": isoformat(self.expiry_date),
            "managerId": self.manager_id,
            "managerAssignedDate": isoformat(self.manager_assigned_date),
            "totalLeaves": self.total_leaves,
            "profilePicture": self.profile_picture,
            "createdAt": isoformat(self.created_at),
        }
        if include_attendance:
            data["attendance"] = [a.to_dict() for a in self.attendance]
        return data


Account = Union[AdminAccount, ManagerAccount, EmployeeAccount]

ROLE_BY_KIND = {
    AccountKind.ADMIN: Role.HR,
    AccountKind.MANAGER: Role.MANAGER,
    AccountKind.EMPLOYEE: Role.EMPLOYEE,
}


def role_for(account: Account) -> Role:
    """Role tag derived from the account variant.

    Employees holding the hr position authenticate as hr.
    """
    if isinstance(account, EmployeeAccount) and account.is_hr:
        return Role.HR
    return ROLE_BY_KIND[account.kind]


@dataclass(frozen=True)
class Identity:
    account: Account
    kind: AccountKind
    role: Role


@dataclass(frozen=True)
class SessionUser:
    """Claims carried by the signed session token."""

    user_id: str
    email: str
    name: str
    role: Role
    kind: AccountKind
    department: Optional[str] = None
    permissions: Dict[str, bool] = field(default_factory=dict)

    def to_claims(self) -> dict:
        claims: Dict[str, Any] = {
            "id": self.user_id,
            "email": self.email,
            "name": self.name,
            "role": self.role.value,
            "kind": self.kind.value,
        }
        if self.department is not None:
            claims["department"] = self.department
        if self.permissions:
            claims["permissions"] = dict(self.permissions)
        return claims

    @classmethod
    def from_claims(cls, claims: dict) -> "SessionUser":
        return cls(
            user_id=str(claims["id"]),
            email=str(claims["email"]),
            name=str(claims.get("name", "")),
            role=Role(claims["role"]),
            kind=AccountKind(claims["kind"]),
            department=claims.get("department"),
            permissions=dict(claims.get("permissions") or {}),
        )

    @classmethod
    def from_identity(cls, identity: Identity) -> "SessionUser":
        account = identity.account
        department = getattr(account, "department", None)
        permissions = getattr(account, "permissions", None) or {}
        return cls(
            user_id=account.account_id,
            email=account.email,
            name=account.name,
            role=identity.role,
            kind=identity.kind,
            department=department,
            permissions=dict(permissions) if identity.kind != AccountKind.EMPLOYEE else {},
        )
