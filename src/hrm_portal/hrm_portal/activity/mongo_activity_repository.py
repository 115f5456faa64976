from __future__ import annotations

from typing import Any, Dict, Sequence, Tuple

from pymongo import DESCENDING

from ..core.enums import ActivityAction, SystemModule
from ..database.mongo_base import ACTIVITY_LOGS, MongoRepository, id_str, to_object_id
from .model import ActivityLogEntry, ActivityQuery


class MongoActivityLogRepository(MongoRepository):
    collection_name = ACTIVITY_LOGS

    @staticmethod
    def _to_model(doc: dict) -> ActivityLogEntry:
        return ActivityLogEntry(
            entry_id=str(doc["_id"]),
            user_id=id_str(doc.get("userId")) or "",
            user_name=doc.get("userName", ""),
            user_role=doc.get("userRole", ""),
            action=ActivityAction(doc.get("action", ActivityAction.VIEW.value)),
            module=SystemModule(doc.get("module", SystemModule.SYSTEM.value)),
            details=doc.get("details", ""),
            timestamp=doc.get("timestamp"),
            ip_address=doc.get("ipAddress") or "unknown",
        )

    def append(self, entry: ActivityLogEntry) -> str:
        result = self._col.insert_one(
            {
                "userId": to_object_id(entry.user_id) or entry.user_id,
                "userName": entry.user_name,
                "userRole": entry.user_role,
                "action": entry.action.value,
                "module": entry.module.value,
                "details": entry.details,
                "timestamp": entry.timestamp,
                "ipAddress": entry.ip_address,
            }
        )
        return str(result.inserted_id)

    def query(self, q: ActivityQuery) -> Tuple[Sequence[ActivityLogEntry], int]:
        filters: Dict[str, Any] = {}
        if q.user_id:
            filters["userId"] = to_object_id(q.user_id) or q.user_id
        if q.action is not None:
            filters["action"] = q.action.value
        if q.module is not None:
            filters["module"] = q.module.value
        if q.user_role:
            filters["userRole"] = q.user_role
        if q.start is not None and q.end is not None:
            filters["timestamp"] = {"$gte": q.start, "$lt": q.end}

        total = self._col.count_documents(filters)
        cursor = self._col.find(filters).sort("timestamp", DESCENDING).skip(q.skip).limit(q.limit)
        return [self._to_model(doc) for doc in cursor], total
