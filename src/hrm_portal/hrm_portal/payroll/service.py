from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Dict, Optional, Sequence

from ..common.datetime_utils import isoformat, month_name, now_local
from ..common.validators import require_enum, require_non_empty, require_non_negative_number
from ..core.enums import AccountKind, PayrollStatus, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..users.model import EmployeeAccount, SessionUser
from ..users.repository import EmployeeRepository
from .calculator.base import PayrollCalculator
from .calculator.standard_calculator import StandardPayrollCalculator
from .model import PayrollDraft, PayrollRecord
from .repository import PayrollRepository

logger = logging.getLogger(__name__)

ALL = "All"
MANAGE_PAYROLL = "canManagePayroll"


class PayrollService:
    """Payroll listing and edits. netSalary is always derived, never accepted from input."""

    def __init__(
        self,
        payroll: PayrollRepository,
        employees: EmployeeRepository,
        *,
        calculator: Optional[PayrollCalculator] = None,
        clock: Callable[[], datetime] = now_local,
    ):
        self._payroll = payroll
        self._employees = employees
        self._calculator = calculator or StandardPayrollCalculator()
        self._clock = clock

    def _draft_for(self, employee: EmployeeAccount, now: datetime) -> PayrollDraft:
        base = employee.current_salary
        return PayrollDraft(
            employee_id=employee.account_id,
            name=employee.name,
            position=employee.position,
            base_salary=base,
            net_salary=self._calculator.net_salary(base_salary=base, bonuses=0, deductions=0),
            month=month_name(now),
            year=now.year,
        )

    def list_records(
        self,
        *,
        current_user: SessionUser,
        month: Optional[str] = None,
        search: Optional[str] = None,
        department: Optional[str] = None,
    ) -> Sequence[PayrollRecord]:
        if current_user.role not in (Role.HR, Role.MANAGER):
            raise AuthorizationError("Access denied: Managers and HR only")

        month = (month or ALL).strip() or ALL
        department = (department or ALL).strip() or ALL

        def run() -> Sequence[PayrollRecord]:
            employee_ids = None
            if department != ALL:
                employee_ids = [e.account_id for e in self._employees.list_all(department=department)]
            return self._payroll.list(
                month=None if month == ALL else month,
                name_search=(search or "").strip() or None,
                employee_ids=employee_ids,
            )

        records = run()
        now = self._clock()
        if not records and month in (ALL, month_name(now)):
            employees = self._employees.list_all()
            if employees:
                created = self._payroll.create_many([self._draft_for(e, now) for e in employees])
                logger.info("Generated %d payroll records for %s %d", created, month_name(now), now.year)
                records = run()
        return records

    def update_record(self, *, current_user: SessionUser, payload: Dict[str, Any]) -> PayrollRecord:
        if current_user.role == Role.MANAGER:
            if not current_user.permissions.get(MANAGE_PAYROLL, False):
                raise AuthorizationError("Access denied: payroll management permission required")
        elif current_user.role != Role.HR:
            raise AuthorizationError("Access denied: HR access only")

        record_id = require_non_empty(payload.get("id"), "Record ID")
        record = self._payroll.get_by_id(record_id)
        if record is None:
            raise NotFoundError("Payroll record not found")

        base = record.base_salary
        bonuses = record.bonuses
        deductions = record.deductions
        if payload.get("baseSalary") is not None:
            base = require_non_negative_number(payload["baseSalary"], "baseSalary")
        if payload.get("bonuses") is not None:
            bonuses = require_non_negative_number(payload["bonuses"], "bonuses")
        if payload.get("deductions") is not None:
            deductions = require_non_negative_number(payload["deductions"], "deductions")

        now = self._clock()
        # inputs and derived net are always written together
        fields: Dict[str, Any] = {
            "baseSalary": base,
            "bonuses": bonuses,
            "deductions": deductions,
            "netSalary": self._calculator.net_salary(base_salary=base, bonuses=bonuses, deductions=deductions),
            "updatedAt": now,
        }
        if payload.get("bonusDescription") is not None:
            fields["bonusDescription"] = str(payload["bonusDescription"])
        if payload.get("deductionDescription") is not None:
            fields["deductionDescription"] = str(payload["deductionDescription"])
        if payload.get("status") is not None:
            status = require_enum(payload["status"], PayrollStatus, "status")
            fields["status"] = status.value
            if status == PayrollStatus.PAID and record.status != PayrollStatus.PAID:
                fields["paymentDate"] = now

        updated = self._payroll.update_if_unchanged(record, fields)
        if updated is None:
            raise ValidationError("Payroll record was modified by another request, reload and try again")
        return updated

    def own_records(self, *, current_user: SessionUser, month: Optional[str] = None) -> Sequence[PayrollRecord]:
        # hr staff stored as employees have a payslip too
        if current_user.kind != AccountKind.EMPLOYEE:
            raise AuthorizationError("Access denied: Employee access only")
        employee = self._employees.get_by_id(current_user.user_id)
        if employee is None:
            raise NotFoundError("Employee not found")

        month = None if (month or ALL) == ALL else month
        records = self._payroll.list_for_employee(employee.account_id, month=month)
        if records:
            return records

        # nothing for the requested month: fall back to the current month,
        # creating its placeholder only once
        now = self._clock()
        current = self._payroll.list_for_employee(employee.account_id, month=month_name(now))
        if not current:
            self._payroll.create_many([self._draft_for(employee, now)])
            current = self._payroll.list_for_employee(employee.account_id, month=month_name(now))
        return current

    def _own_record(self, current_user: SessionUser, record_id: Any) -> PayrollRecord:
        if current_user.kind != AccountKind.EMPLOYEE:
            raise AuthorizationError("Access denied: Employee access only")
        record_id = require_non_empty(record_id, "Record ID")
        record = self._payroll.get_by_id(record_id)
        if record is None or record.employee_id != current_user.user_id:
            raise NotFoundError("Payroll record not found")
        return record

    def toggle_own_status(self, *, current_user: SessionUser, record_id: Any) -> PayrollRecord:
        """Flip an own record between Pending and Paid; Processing goes back to Pending."""
        record = self._own_record(current_user, record_id)
        now = self._clock()
        if record.status == PayrollStatus.PENDING:
            fields: Dict[str, Any] = {"status": PayrollStatus.PAID.value, "paymentDate": now, "updatedAt": now}
        else:
            fields = {"status": PayrollStatus.PENDING.value, "updatedAt": now}
        updated = self._payroll.update_if_unchanged(record, fields)
        if updated is None:
            raise ValidationError("Payroll record was modified by another request, reload and try again")
        return updated

    def payslip(self, *, current_user: SessionUser, record_id: Any) -> Dict[str, Any]:
        record = self._own_record(current_user, record_id)
        if record.status != PayrollStatus.PAID:
            raise AuthorizationError("Payslip is only available for paid salaries")
        return {
            "employeeName": record.name,
            "position": record.position,
            "month": record.month,
            "year": record.year,
            "baseSalary": record.base_salary,
            "bonuses": record.bonuses,
            "bonusDescription": record.bonus_description or "",
            "deductions": record.deductions,
            "deductionDescription": record.deduction_description or "",
            "netSalary": record.net_salary,
            "paymentDate": isoformat(record.payment_date or self._clock()),
            "employeeId": record.employee_id,
        }
