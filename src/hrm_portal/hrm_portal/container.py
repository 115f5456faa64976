from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from .activity.logger import ActivityLogger
from .activity.mongo_activity_repository import MongoActivityLogRepository
from .activity.recorder import ActivityRecorder
from .activity.repository import ActivityLogRepository
from .activity.service import ActivityLogService
from .announcements.mongo_announcement_repository import MongoAnnouncementRepository
from .announcements.repository import AnnouncementRepository
from .announcements.service import AnnouncementService
from .attendance.mongo_attendance_repository import MongoAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .common.datetime_utils import now_local
from .core.constants import DEFAULT_TOKEN_MAX_AGE_SECONDS
from .dashboard.service import DashboardService
from .database.connection import DBConfig, DatabaseConnection
from .leave.mongo_leave_repository import MongoLeaveRepository
from .leave.repository import LeaveRepository
from .leave.service import LeaveService
from .loans.mongo_loan_repository import MongoLoanRepository
from .loans.repository import LoanRepository
from .loans.service import LoanService
from .payroll.calculator.standard_calculator import StandardPayrollCalculator
from .payroll.mongo_payroll_repository import MongoPayrollRepository
from .payroll.repository import PayrollRepository
from .payroll.service import PayrollService
from .users.directory_service import DirectoryService
from .users.mongo_account_repository import MongoAdminRepository, MongoEmployeeRepository, MongoManagerRepository
from .users.profile_service import ProfileService
from .users.repository import AdminRepository, EmployeeRepository, ManagerRepository
from .users.service import AuthService, IdentityResolver, RegistrationService
from .users.tokens import TokenService


@dataclass(frozen=True)
class Container:
    admins_repo: AdminRepository
    managers_repo: ManagerRepository
    employees_repo: EmployeeRepository
    leaves_repo: LeaveRepository
    payroll_repo: PayrollRepository
    announcements_repo: AnnouncementRepository
    attendance_repo: AttendanceRepository
    activity_repo: ActivityLogRepository
    loans_repo: LoanRepository

    tokens: TokenService
    identity_resolver: IdentityResolver
    auth_service: AuthService
    registration_service: RegistrationService
    profile_service: ProfileService
    directory_service: DirectoryService
    leave_service: LeaveService
    loan_service: LoanService
    payroll_service: PayrollService
    announcement_service: AnnouncementService
    attendance_service: AttendanceService
    dashboard_service: DashboardService
    activity_service: ActivityLogService
    activity_logger: ActivityLogger
    activity_recorder: ActivityRecorder

    conn: Optional[DatabaseConnection] = None


def assemble_container(
    *,
    admins_repo: AdminRepository,
    managers_repo: ManagerRepository,
    employees_repo: EmployeeRepository,
    leaves_repo: LeaveRepository,
    payroll_repo: PayrollRepository,
    announcements_repo: AnnouncementRepository,
    attendance_repo: AttendanceRepository,
    activity_repo: ActivityLogRepository,
    loans_repo: LoanRepository,
    tokens: TokenService,
    clock: Callable[[], datetime] = now_local,
    activity_enabled: bool = True,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Wire services on top of already-built repositories."""
    resolver = IdentityResolver(admins_repo, managers_repo, employees_repo)
    activity_service = ActivityLogService(activity_repo, clock=clock)
    activity_logger = ActivityLogger(activity_repo)

    return Container(
        admins_repo=admins_repo,
        managers_repo=managers_repo,
        employees_repo=employees_repo,
        leaves_repo=leaves_repo,
        payroll_repo=payroll_repo,
        announcements_repo=announcements_repo,
        attendance_repo=attendance_repo,
        activity_repo=activity_repo,
        loans_repo=loans_repo,
        tokens=tokens,
        identity_resolver=resolver,
        auth_service=AuthService(resolver, tokens, clock=clock),
        registration_service=RegistrationService(resolver, admins_repo, managers_repo, employees_repo, clock=clock),
        profile_service=ProfileService(resolver, clock=clock),
        directory_service=DirectoryService(employees_repo, managers_repo, leaves_repo, clock=clock),
        leave_service=LeaveService(leaves_repo, employees_repo, managers_repo, clock=clock),
        loan_service=LoanService(loans_repo, employees_repo, clock=clock),
        payroll_service=PayrollService(
            payroll_repo, employees_repo, calculator=StandardPayrollCalculator(), clock=clock
        ),
        announcement_service=AnnouncementService(announcements_repo, clock=clock),
        attendance_service=AttendanceService(attendance_repo, employees_repo, clock=clock),
        dashboard_service=DashboardService(employees_repo, leaves_repo, clock=clock),
        activity_service=activity_service,
        activity_logger=activity_logger,
        activity_recorder=ActivityRecorder(activity_service, activity_logger, enabled=activity_enabled),
        conn=conn,
    )


def build_container(
    *,
    mongo_config: dict,
    secret_key: str,
    token_max_age: int = DEFAULT_TOKEN_MAX_AGE_SECONDS,
    activity_enabled: bool = True,
) -> Container:
    config = DBConfig(
        uri=str(mongo_config["uri"]),
        database=str(mongo_config["database"]),
        server_selection_timeout_ms=int(mongo_config.get("server_selection_timeout_ms", 5000)),
    )
    conn = DatabaseConnection(config)

    return assemble_container(
        admins_repo=MongoAdminRepository(conn),
        managers_repo=MongoManagerRepository(conn),
        employees_repo=MongoEmployeeRepository(conn),
        leaves_repo=MongoLeaveRepository(conn),
        payroll_repo=MongoPayrollRepository(conn),
        announcements_repo=MongoAnnouncementRepository(conn),
        attendance_repo=MongoAttendanceRepository(conn),
        activity_repo=MongoActivityLogRepository(conn),
        loans_repo=MongoLoanRepository(conn),
        tokens=TokenService(secret_key, max_age_seconds=token_max_age),
        activity_enabled=activity_enabled,
        conn=conn,
    )
