from __future__ import annotations

from typing import Any, Iterable, List, Optional

from bson import ObjectId
from bson.errors import InvalidId

from .connection import DatabaseConnection

ADMINS = "admins"
MANAGERS = "managers"
EMPLOYEES = "employees"
LEAVE_REQUESTS = "leave_requests"
PAYROLL_RECORDS = "payroll_records"
ANNOUNCEMENTS = "announcements"
ACTIVITY_LOGS = "activity_logs"
LOAN_APPLICATIONS = "loan_applications"

ACCOUNT_COLLECTIONS = (ADMINS, MANAGERS, EMPLOYEES)


def to_object_id(value: Any) -> Optional[ObjectId]:
    """Parse an identifier coming from a URL/body; invalid ids give None."""
    if isinstance(value, ObjectId):
        return value
    if value is None:
        return None
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        return None


def to_object_ids(values: Iterable[Any]) -> List[ObjectId]:
    out = []
    for v in values:
        oid = to_object_id(v)
        if oid is not None:
            out.append(oid)
    return out


def id_str(value: Any) -> Optional[str]:
    """Normalize ObjectId/str identifiers to their string form."""
    if value is None:
        return None
    return str(value)


class MongoRepository:
    """Shared plumbing for collection-backed repositories."""

    collection_name: str = ""

    def __init__(self, conn: DatabaseConnection):
        self._conn = conn

    @property
    def _col(self):
        return self._conn.collection(self.collection_name)
