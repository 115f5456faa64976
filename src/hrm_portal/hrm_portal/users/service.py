from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.datetime_utils import now_local, parse_iso_date, start_of_day
from ..common.validators import require_min_length, require_non_empty, require_non_negative_number
from ..core.constants import DEFAULT_TOTAL_LEAVES, MIN_PASSWORD_LENGTH
from ..core.enums import AccountKind, AccountStatus, Role
from ..core.exceptions import AuthenticationError, ConflictError, ValidationError
from .model import Account, Identity, SessionUser, role_for
from .repository import AccountRepository, AdminRepository, EmployeeRepository, ManagerRepository
from .tokens import TokenService

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"

ADMIN_DEFAULT_PERMISSIONS = {
    "canManageUsers": True,
    "canManageRoles": True,
    "canManageSettings": True,
    "canViewAuditLogs": True,
}

MANAGER_DEFAULT_PERMISSIONS = {
    "canManageLeaves": True,
    "canManageAttendance": True,
    "canManagePayroll": False,
}


class IdentityResolver:
    """Single place that maps an email to an account across the three stores.

    Stores are consulted in a declared precedence (admin, manager, employee).
    The same email in more than one store is a data problem: it is logged and
    the higher-precedence store wins.
    """

    PRECEDENCE = (AccountKind.ADMIN, AccountKind.MANAGER, AccountKind.EMPLOYEE)

    def __init__(self, admins: AdminRepository, managers: ManagerRepository, employees: EmployeeRepository):
        self._stores: Dict[AccountKind, AccountRepository] = {
            AccountKind.ADMIN: admins,
            AccountKind.MANAGER: managers,
            AccountKind.EMPLOYEE: employees,
        }

    def store_for(self, kind: AccountKind) -> AccountRepository:
        return self._stores[kind]

    def _matches(self, email: str) -> List[Tuple[AccountKind, Account]]:
        found = []
        for kind in self.PRECEDENCE:
            account = self._stores[kind].get_by_email(email)
            if account is not None:
                found.append((kind, account))
        return found

    def resolve(self, email: str) -> Optional[Identity]:
        email = (email or "").strip().lower()
        matches = self._matches(email)
        if not matches:
            return None
        if len(matches) > 1:
            logger.warning(
                "Email %s exists in several account stores (%s); using %s",
                email,
                ", ".join(k.value for k, _ in matches),
                matches[0][0].value,
            )
        kind, account = matches[0]
        return Identity(account=account, kind=kind, role=role_for(account))

    def email_taken(self, email: str) -> bool:
        return bool(self._matches((email or "").strip().lower()))

    def load(self, user: SessionUser) -> Optional[Account]:
        """Re-read the account behind a session from its own store."""
        return self._stores[user.kind].get_by_id(user.user_id)


@dataclass(frozen=True)
class LoginResult:
    token: str
    user: SessionUser


class AuthService:
    """Use case: authenticate (login) and verify sessions."""

    def __init__(self, resolver: IdentityResolver, tokens: TokenService, *, clock: Callable[[], datetime] = now_local):
        self._resolver = resolver
        self._tokens = tokens
        self._clock = clock

    def login(self, email: Any, password: Any) -> LoginResult:
        if not email or not password:
            raise ValidationError("Email and password are required")

        identity = self._resolver.resolve(str(email))
        if identity is None:
            raise AuthenticationError(INVALID_CREDENTIALS)

        try:
            ok = check_password_hash(identity.account.password_hash, str(password))
        except (TypeError, ValueError):
            # e.g. placeholder hashes or corrupted values
            ok = False
        if not ok:
            raise AuthenticationError(INVALID_CREDENTIALS)

        if identity.kind == AccountKind.ADMIN:
            self._resolver.store_for(AccountKind.ADMIN).update_fields(
                identity.account.account_id, {"lastLogin": self._clock()}
            )

        user = SessionUser.from_identity(identity)
        return LoginResult(token=self._tokens.issue(user), user=user)

    def verify(self, token: Optional[str]) -> SessionUser:
        return self._tokens.verify(token)


class RegistrationService:
    """Use case: create accounts of each variant.

    Email must be unused in every store, not only in the target one.
    """

    def __init__(
        self,
        resolver: IdentityResolver,
        admins: AdminRepository,
        managers: ManagerRepository,
        employees: EmployeeRepository,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._resolver = resolver
        self._admins = admins
        self._managers = managers
        self._employees = employees
        self._clock = clock

    def _common(self, payload: Dict[str, Any]) -> Tuple[str, str, str]:
        email = require_non_empty(payload.get("email"), "Email").lower()
        if "@" not in email:
            raise ValidationError("Invalid email address")
        name = require_non_empty(payload.get("name"), "Name")
        password = require_min_length(str(payload.get("password") or ""), "Password", MIN_PASSWORD_LENGTH)
        if self._resolver.email_taken(email):
            raise ConflictError("User with this email already exists")
        return email, name, generate_password_hash(password)

    def register_admin(self, payload: Dict[str, Any]) -> str:
        email, name, password_hash = self._common(payload)
        return self._admins.insert(
            {
                "email": email,
                "name": name,
                "password": password_hash,
                "superAdmin": bool(payload.get("superAdmin", False)),
                "permissions": dict(ADMIN_DEFAULT_PERMISSIONS),
                "status": AccountStatus.ACTIVE.value,
                "createdAt": self._clock(),
            }
        )

    def register_manager(self, payload: Dict[str, Any]) -> str:
        department = require_non_empty(payload.get("department"), "Department")
        phone = require_non_empty(payload.get("phone"), "Phone")
        role = payload.get("role")
        if role not in (None, "", Role.MANAGER.value):
            raise ValidationError("Invalid role for manager registration")
        email, name, password_hash = self._common(payload)
        return self._managers.insert(
            {
                "email": email,
                "name": name,
                "password": password_hash,
                "role": Role.MANAGER.value,
                "department": department,
                "phone": phone,
                "team": [],
                "status": AccountStatus.ACTIVE.value,
                "permissions": dict(MANAGER_DEFAULT_PERMISSIONS),
                "joiningDate": self._clock(),
            }
        )

    def register_employee(self, payload: Dict[str, Any]) -> str:
        fields = {
            "cnic": require_non_empty(payload.get("cnic"), "CNIC"),
            "department": require_non_empty(payload.get("department"), "Department"),
            "role": require_non_empty(payload.get("role") or payload.get("position"), "Role"),
            "phone": require_non_empty(payload.get("phone"), "Phone"),
            "emergencyContact": require_non_empty(payload.get("emergencyContact"), "Emergency contact"),
            "shift": require_non_empty(payload.get("shift"), "Shift"),
            "dob": _parse_date_field(payload.get("dob"), "Date of birth"),
            "initialSalary": require_non_negative_number(payload.get("initialSalary"), "Initial salary"),
            "currentSalary": require_non_negative_number(payload.get("currentSalary"), "Current salary"),
        }
        expiry = payload.get("expiryDate")
        fields["expiryDate"] = _parse_date_field(expiry, "Expiry date") if expiry else None

        email, name, password_hash = self._common(payload)
        fields.update(
            {
                "email": email,
                "name": name,
                "password": password_hash,
                "status": AccountStatus.ACTIVE.value,
                "attendance": [],
                "totalLeaves": DEFAULT_TOTAL_LEAVES,
                "createdAt": self._clock(),
            }
        )
        return self._employees.insert(fields)


def _parse_date_field(value: Any, field_name: str) -> datetime:
    raw = require_non_empty(value, field_name)
    try:
        return start_of_day(parse_iso_date(raw[:10]))
    except ValueError:
        raise ValidationError(f"{field_name} must be a date (YYYY-MM-DD)")
