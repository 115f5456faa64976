from __future__ import annotations

import re
from typing import Any, Dict, Optional, Sequence

from pymongo import DESCENDING, ReturnDocument

from ..common.datetime_utils import now_local
from ..core.enums import PayrollStatus
from ..database.mongo_base import PAYROLL_RECORDS, MongoRepository, id_str, to_object_id, to_object_ids
from .model import PayrollDraft, PayrollRecord


class MongoPayrollRepository(MongoRepository):
    collection_name = PAYROLL_RECORDS

    @staticmethod
    def _to_model(doc: dict) -> PayrollRecord:
        return PayrollRecord(
            record_id=str(doc["_id"]),
            employee_id=id_str(doc.get("employeeId")) or "",
            name=doc.get("name", ""),
            position=doc.get("position", ""),
            base_salary=float(doc.get("baseSalary") or 0),
            bonuses=float(doc.get("bonuses") or 0),
            bonus_description=doc.get("bonusDescription") or "",
            deductions=float(doc.get("deductions") or 0),
            deduction_description=doc.get("deductionDescription") or "",
            net_salary=float(doc.get("netSalary") or 0),
            status=PayrollStatus(doc.get("status", PayrollStatus.PENDING.value)),
            month=doc.get("month", ""),
            year=int(doc.get("year") or 0),
            payment_date=doc.get("paymentDate"),
            created_at=doc.get("createdAt"),
            updated_at=doc.get("updatedAt"),
        )

    def list(
        self,
        *,
        month: Optional[str] = None,
        name_search: Optional[str] = None,
        employee_ids: Optional[Sequence[str]] = None,
    ) -> Sequence[PayrollRecord]:
        query: Dict[str, Any] = {}
        if month:
            query["month"] = month
        if name_search:
            query["name"] = {"$regex": re.escape(name_search), "$options": "i"}
        if employee_ids is not None:
            query["employeeId"] = {"$in": to_object_ids(employee_ids)}
        return [self._to_model(doc) for doc in self._col.find(query).sort("createdAt", DESCENDING)]

    def list_for_employee(self, employee_id: str, *, month: Optional[str] = None) -> Sequence[PayrollRecord]:
        query: Dict[str, Any] = {"employeeId": to_object_id(employee_id)}
        if month:
            query["month"] = month
        cursor = self._col.find(query).sort([("year", DESCENDING), ("createdAt", DESCENDING)])
        return [self._to_model(doc) for doc in cursor]

    def get_by_id(self, record_id: str) -> Optional[PayrollRecord]:
        oid = to_object_id(record_id)
        if oid is None:
            return None
        doc = self._col.find_one({"_id": oid})
        return self._to_model(doc) if doc else None

    def create_many(self, drafts: Sequence[PayrollDraft]) -> int:
        if not drafts:
            return 0
        now = now_local()
        docs = [
            {
                "employeeId": to_object_id(d.employee_id),
                "name": d.name,
                "position": d.position,
                "baseSalary": d.base_salary,
                "bonuses": d.bonuses,
                "bonusDescription": "",
                "deductions": d.deductions,
                "deductionDescription": "",
                "netSalary": d.net_salary,
                "status": d.status.value,
                "month": d.month,
                "year": d.year,
                "paymentDate": None,
                "createdAt": now,
                "updatedAt": now,
            }
            for d in drafts
        ]
        return len(self._col.insert_many(docs).inserted_ids)

    def update_if_unchanged(self, record: PayrollRecord, fields: Dict[str, Any]) -> Optional[PayrollRecord]:
        oid = to_object_id(record.record_id)
        if oid is None:
            return None
        doc = self._col.find_one_and_update(
            {
                "_id": oid,
                "baseSalary": record.base_salary,
                "bonuses": record.bonuses,
                "deductions": record.deductions,
            },
            {"$set": dict(fields)},
            return_document=ReturnDocument.AFTER,
        )
        return self._to_model(doc) if doc else None
