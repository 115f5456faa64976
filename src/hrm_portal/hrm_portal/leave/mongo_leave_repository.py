from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from pymongo import DESCENDING, ReturnDocument

from ..core.enums import LeaveStatus, LeaveType
from ..database.mongo_base import LEAVE_REQUESTS, MongoRepository, id_str, to_object_id, to_object_ids
from .model import LeaveRequest


class MongoLeaveRepository(MongoRepository):
    collection_name = LEAVE_REQUESTS

    @staticmethod
    def _to_model(doc: dict) -> LeaveRequest:
        return LeaveRequest(
            request_id=str(doc["_id"]),
            employee_id=id_str(doc.get("employeeId")) or "",
            employee_name=doc.get("employeeName", ""),
            leave_type=LeaveType(doc.get("leaveType", LeaveType.OTHER.value)),
            start_date=doc["startDate"],
            end_date=doc["endDate"],
            reason=doc.get("reason", ""),
            status=LeaveStatus(doc.get("status", LeaveStatus.PENDING.value)),
            created_at=doc.get("createdAt"),
            approved_by=id_str(doc.get("approvedBy")),
            approver_name=doc.get("approverName"),
            approval_date=doc.get("approvalDate"),
        )

    def create(
        self,
        *,
        employee_id: str,
        employee_name: str,
        leave_type: LeaveType,
        start_date: datetime,
        end_date: datetime,
        reason: str,
        created_at: datetime,
    ) -> str:
        result = self._col.insert_one(
            {
                "employeeId": to_object_id(employee_id),
                "employeeName": employee_name,
                "leaveType": leave_type.value,
                "startDate": start_date,
                "endDate": end_date,
                "reason": reason,
                "status": LeaveStatus.PENDING.value,
                "createdAt": created_at,
                "approvedBy": None,
                "approvalDate": None,
            }
        )
        return str(result.inserted_id)

    def get_by_id(self, request_id: str) -> Optional[LeaveRequest]:
        oid = to_object_id(request_id)
        if oid is None:
            return None
        doc = self._col.find_one({"_id": oid})
        return self._to_model(doc) if doc else None

    def list(
        self,
        *,
        employee_ids: Optional[Sequence[str]] = None,
        status: Optional[LeaveStatus] = None,
    ) -> Sequence[LeaveRequest]:
        query: Dict[str, Any] = {}
        if employee_ids is not None:
            query["employeeId"] = {"$in": to_object_ids(employee_ids)}
        if status is not None:
            query["status"] = status.value
        cursor = self._col.find(query).sort("createdAt", DESCENDING)
        return [self._to_model(doc) for doc in cursor]

    def decide(
        self,
        request_id: str,
        *,
        status: LeaveStatus,
        approved_by: str,
        decided_at: datetime,
        approver_name: str = "",
    ) -> Optional[LeaveRequest]:
        oid = to_object_id(request_id)
        if oid is None:
            return None
        doc = self._col.find_one_and_update(
            {"_id": oid, "status": LeaveStatus.PENDING.value},
            {
                "$set": {
                    "status": status.value,
                    "approvedBy": to_object_id(approved_by),
                    "approverName": approver_name,
                    "approvalDate": decided_at,
                }
            },
            return_document=ReturnDocument.AFTER,
        )
        return self._to_model(doc) if doc else None

    def delete_pending(self, request_id: str, *, employee_id: str) -> bool:
        oid, eid = to_object_id(request_id), to_object_id(employee_id)
        if oid is None or eid is None:
            return False
        result = self._col.delete_one({"_id": oid, "employeeId": eid, "status": LeaveStatus.PENDING.value})
        return result.deleted_count == 1

    def count_overlapping(self, *, status: LeaveStatus, start: datetime, end: datetime) -> int:
        return self._col.count_documents(
            {"status": status.value, "startDate": {"$lt": end}, "endDate": {"$gte": start}}
        )
