from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Authorization role carried by a session."""

    HR = "hr"
    MANAGER = "manager"
    EMPLOYEE = "employee"


class AccountKind(str, Enum):
    """Which account store an identity was resolved from."""

    ADMIN = "admin"
    MANAGER = "manager"
    EMPLOYEE = "employee"


class AccountStatus(str, Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"
    ON_LEAVE = "On Leave"
    TERMINATED = "Terminated"


# Admin accounts only toggle Active/Inactive; staff accounts use the rest.
ADMIN_STATUSES = frozenset({AccountStatus.ACTIVE, AccountStatus.INACTIVE})
STAFF_STATUSES = frozenset({AccountStatus.ACTIVE, AccountStatus.ON_LEAVE, AccountStatus.TERMINATED})


class LeaveStatus(str, Enum):
    """Leave workflow states. Only PENDING may transition."""

    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class LeaveType(str, Enum):
    ANNUAL = "annual"
    SICK = "sick"
    PERSONAL = "personal"
    OTHER = "other"


class PayrollStatus(str, Enum):
    PENDING = "Pending"
    PROCESSING = "Processing"
    PAID = "Paid"


class LoanType(str, Enum):
    PERSONAL = "personal"
    EDUCATION = "education"
    MEDICAL = "medical"
    HOUSING = "housing"
    EMERGENCY = "emergency"


class LoanStatus(str, Enum):
    """Only PENDING applications may be decided or withdrawn."""

    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    PAID = "Paid"


class Urgency(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class AttendanceMark(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    LEAVE = "leave"


class ActivityAction(str, Enum):
    LOGIN = "login"
    LOGOUT = "logout"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    VIEW = "view"
    DOWNLOAD = "download"
    APPROVE = "approve"
    REJECT = "reject"


class SystemModule(str, Enum):
    PROFILE = "profile"
    ATTENDANCE = "attendance"
    PAYROLL = "payroll"
    LEAVE = "leave"
    EMPLOYEE = "employee"
    SETTINGS = "settings"
    LOAN = "loan"
    NOTIFICATION = "notification"
    DASHBOARD = "dashboard"
    REPORTS = "reports"
    SYSTEM = "system"
    LOGS = "logs"
    ANNOUNCEMENT = "announcement"
