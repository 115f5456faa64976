from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from pymongo import DESCENDING, ReturnDocument

from ..core.enums import LoanStatus, LoanType
from ..database.mongo_base import LOAN_APPLICATIONS, MongoRepository, id_str, to_object_id
from .model import LoanApplication, LoanDraft


class MongoLoanRepository(MongoRepository):
    collection_name = LOAN_APPLICATIONS

    @staticmethod
    def _to_model(doc: dict) -> LoanApplication:
        return LoanApplication(
            loan_id=str(doc["_id"]),
            employee_id=id_str(doc.get("employeeId")) or "",
            loan_type=LoanType(doc.get("loanType", LoanType.PERSONAL.value)),
            amount=float(doc.get("amount") or 0),
            reason=doc.get("reason", ""),
            duration_months=int(doc.get("durationMonths") or 0),
            interest_rate=float(doc.get("interestRate") or 0),
            monthly_installment=float(doc.get("monthlyInstallment") or 0),
            status=LoanStatus(doc.get("status", LoanStatus.PENDING.value)),
            created_at=doc.get("createdAt"),
            approved_at=doc.get("approvedAt"),
            start_date=doc.get("startDate"),
            end_date=doc.get("endDate"),
        )

    def create(self, draft: LoanDraft) -> str:
        result = self._col.insert_one(
            {
                "employeeId": to_object_id(draft.employee_id),
                "loanType": draft.loan_type.value,
                "amount": draft.amount,
                "reason": draft.reason,
                "durationMonths": draft.duration_months,
                "interestRate": draft.interest_rate,
                "monthlyInstallment": draft.monthly_installment,
                "status": LoanStatus.PENDING.value,
                "createdAt": draft.created_at,
            }
        )
        return str(result.inserted_id)

    def get_by_id(self, loan_id: str) -> Optional[LoanApplication]:
        oid = to_object_id(loan_id)
        if oid is None:
            return None
        doc = self._col.find_one({"_id": oid})
        return self._to_model(doc) if doc else None

    def list(
        self,
        *,
        employee_id: Optional[str] = None,
        status: Optional[LoanStatus] = None,
        created_from: Optional[datetime] = None,
        created_to: Optional[datetime] = None,
    ) -> Sequence[LoanApplication]:
        query: Dict[str, Any] = {}
        if employee_id is not None:
            query["employeeId"] = to_object_id(employee_id)
        if status is not None:
            query["status"] = status.value
        if created_from is not None and created_to is not None:
            query["createdAt"] = {"$gte": created_from, "$lt": created_to}
        return [self._to_model(doc) for doc in self._col.find(query).sort("createdAt", DESCENDING)]

    def decide(
        self,
        loan_id: str,
        *,
        status: LoanStatus,
        approved_at: Optional[datetime] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> Optional[LoanApplication]:
        oid = to_object_id(loan_id)
        if oid is None:
            return None
        changes: Dict[str, Any] = {"status": status.value}
        if approved_at is not None:
            changes.update({"approvedAt": approved_at, "startDate": start_date, "endDate": end_date})
        doc = self._col.find_one_and_update(
            {"_id": oid, "status": LoanStatus.PENDING.value},
            {"$set": changes},
            return_document=ReturnDocument.AFTER,
        )
        return self._to_model(doc) if doc else None

    def delete_pending(self, loan_id: str, *, employee_id: str) -> bool:
        oid, eid = to_object_id(loan_id), to_object_id(employee_id)
        if oid is None or eid is None:
            return False
        result = self._col.delete_one({"_id": oid, "employeeId": eid, "status": LoanStatus.PENDING.value})
        return result.deleted_count == 1

    def total_amount(self, employee_id: str, status: LoanStatus) -> float:
        eid = to_object_id(employee_id)
        if eid is None:
            return 0.0
        rows = list(
            self._col.aggregate(
                [
                    {"$match": {"employeeId": eid, "status": status.value}},
                    {"$group": {"_id": None, "total": {"$sum": "$amount"}}},
                ]
            )
        )
        return float(rows[0]["total"]) if rows else 0.0
