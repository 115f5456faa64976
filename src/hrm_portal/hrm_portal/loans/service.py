from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..common.datetime_utils import add_months, now_local
from ..common.validators import require_enum, require_non_empty, require_non_negative_number
from ..core.constants import MAX_LOAN_MONTHS, MIN_LOAN_MONTHS
from ..core.enums import AccountKind, LoanStatus, LoanType, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..users.model import SessionUser
from ..users.repository import EmployeeRepository
from .model import LoanApplication, LoanBalance, LoanDraft
from .repository import LoanRepository

DECISIONS = (LoanStatus.APPROVED, LoanStatus.REJECTED)
SUPERVISOR_ROLES = (Role.MANAGER, Role.HR)


def monthly_installment(amount: float, duration_months: int, interest_rate: float = 0.0) -> float:
    """Flat interest on the principal, repaid in equal monthly parts."""
    total = amount * (1 + interest_rate / 100)
    return round(total / duration_months, 2)


def _duration(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not MIN_LOAN_MONTHS <= value <= MAX_LOAN_MONTHS:
        raise ValidationError(f"durationMonths must be a whole number between {MIN_LOAN_MONTHS} and {MAX_LOAN_MONTHS}")
    return value


class LoanService:
    """Employee loan applications: Pending -> Approved | Rejected."""

    def __init__(
        self,
        loans: LoanRepository,
        employees: EmployeeRepository,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._loans = loans
        self._employees = employees
        self._clock = clock

    def apply(self, *, current_user: SessionUser, payload: Dict[str, Any]) -> LoanApplication:
        if current_user.kind != AccountKind.EMPLOYEE:
            raise AuthorizationError("Only employees can apply for loans")

        loan_type = require_enum(require_non_empty(payload.get("loanType"), "Loan type"), LoanType, "loan type")
        amount = require_non_negative_number(require_non_empty(payload.get("amount"), "Amount"), "amount")
        if amount <= 0:
            raise ValidationError("amount must be greater than zero")
        reason = require_non_empty(payload.get("reason"), "Reason")
        months = _duration(payload.get("durationMonths"))
        rate = payload.get("interestRate")
        rate = 0.0 if rate is None else require_non_negative_number(rate, "interestRate")

        loan_id = self._loans.create(
            LoanDraft(
                employee_id=current_user.user_id,
                loan_type=loan_type,
                amount=amount,
                reason=reason,
                duration_months=months,
                interest_rate=rate,
                monthly_installment=monthly_installment(amount, months, rate),
                created_at=self._clock(),
            )
        )
        created = self._loans.get_by_id(loan_id)
        if created is None:
            raise NotFoundError("Loan application not found")
        return created

    def list_for(
        self,
        *,
        current_user: SessionUser,
        year: Optional[str] = None,
        status: Optional[str] = None,
        loan_id: Optional[str] = None,
    ) -> Tuple[List[Dict[str, Any]], Optional[LoanBalance]]:
        """Supervisors see every application with applicant details; employees
        see their own plus their balance."""
        created_from = created_to = None
        if year:
            try:
                y = int(year)
            except ValueError:
                raise ValidationError("Invalid year")
            created_from, created_to = datetime(y, 1, 1), datetime(y + 1, 1, 1)

        if current_user.role not in SUPERVISOR_ROLES:
            own = self._loans.list(employee_id=current_user.user_id, created_from=created_from, created_to=created_to)
            balance = LoanBalance(
                total_approved=self._loans.total_amount(current_user.user_id, LoanStatus.APPROVED),
                total_paid=self._loans.total_amount(current_user.user_id, LoanStatus.PAID),
            )
            return [loan.to_dict() for loan in own], balance

        if loan_id:
            found = self._loans.get_by_id(loan_id)
            loans = [found] if found else []
        else:
            wanted = None
            if status and status.lower() != "all":
                wanted = require_enum(status, LoanStatus, "status")
            loans = list(self._loans.list(status=wanted, created_from=created_from, created_to=created_to))

        applicants = {e.account_id: e for e in self._employees.list_all(ids=sorted({loan.employee_id for loan in loans}))}
        rows = []
        for loan in loans:
            row = loan.to_dict()
            applicant = applicants.get(loan.employee_id)
            row.update(
                {
                    "employeeName": applicant.name if applicant else "",
                    "employeeEmail": applicant.email if applicant else "",
                    "employeeDepartment": applicant.department if applicant else "",
                }
            )
            rows.append(row)
        return rows, None

    def decide(self, *, current_user: SessionUser, loan_id: Any, status: Any) -> LoanApplication:
        if current_user.role not in SUPERVISOR_ROLES:
            raise AuthorizationError("Only managers can update loan application status")
        loan_id = require_non_empty(loan_id, "Loan ID")
        new_status = require_enum(require_non_empty(status, "Status"), LoanStatus, "status")
        if new_status not in DECISIONS:
            raise ValidationError("Status must be either Approved or Rejected")

        loan = self._loans.get_by_id(loan_id)
        if loan is None:
            raise NotFoundError("Loan application not found")
        if loan.status != LoanStatus.PENDING:
            raise ValidationError("Only pending applications can be updated")

        if new_status == LoanStatus.APPROVED:
            now = self._clock()
            decided = self._loans.decide(
                loan.loan_id,
                status=new_status,
                approved_at=now,
                start_date=now,
                end_date=add_months(now, loan.duration_months),
            )
        else:
            decided = self._loans.decide(loan.loan_id, status=new_status)
        if decided is None:
            raise ValidationError("Only pending applications can be updated")
        return decided

    def withdraw(self, *, current_user: SessionUser, loan_id: Any) -> None:
        loan_id = require_non_empty(loan_id, "Loan application ID")
        loan = self._loans.get_by_id(loan_id)
        if loan is None:
            raise NotFoundError("Loan application not found")
        if loan.employee_id != current_user.user_id:
            raise AuthorizationError("You are not authorized to delete this loan application")
        if loan.status != LoanStatus.PENDING or not self._loans.delete_pending(loan.loan_id, employee_id=current_user.user_id):
            raise ValidationError("Only pending applications can be deleted")
