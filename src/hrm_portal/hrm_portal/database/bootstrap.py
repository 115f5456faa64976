from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict

from pymongo import ASCENDING, DESCENDING
from werkzeug.security import generate_password_hash

from ..core.constants import DEFAULT_TOTAL_LEAVES
from .connection import DatabaseConnection
from .mongo_base import (
    ACCOUNT_COLLECTIONS,
    ACTIVITY_LOGS,
    ADMINS,
    ANNOUNCEMENTS,
    EMPLOYEES,
    LEAVE_REQUESTS,
    LOAN_APPLICATIONS,
    MANAGERS,
    PAYROLL_RECORDS,
)

logger = logging.getLogger(__name__)


def ensure_indexes(conn: DatabaseConnection) -> None:
    """Create the indexes the application relies on. Safe to re-run."""
    for name in ACCOUNT_COLLECTIONS:
        conn.collection(name).create_index([("email", ASCENDING)], unique=True, name="email_unique")

    conn.collection(LEAVE_REQUESTS).create_index([("employeeId", ASCENDING), ("status", ASCENDING)])
    conn.collection(LEAVE_REQUESTS).create_index([("createdAt", DESCENDING)])
    conn.collection(PAYROLL_RECORDS).create_index([("employeeId", ASCENDING), ("month", ASCENDING), ("year", ASCENDING)])
    conn.collection(LOAN_APPLICATIONS).create_index([("employeeId", ASCENDING), ("createdAt", DESCENDING)])
    conn.collection(ANNOUNCEMENTS).create_index([("date", DESCENDING)])
    conn.collection(ACTIVITY_LOGS).create_index([("timestamp", DESCENDING)])
    conn.collection(ACTIVITY_LOGS).create_index([("userId", ASCENDING), ("timestamp", DESCENDING)])
    logger.info("Indexes ready")


def list_collections(conn: DatabaseConnection) -> list[str]:
    return sorted(conn.db.list_collection_names())


def seed_demo_accounts(conn: DatabaseConnection, *, now: datetime | None = None) -> Dict[str, str]:
    """Upsert one demo account per role and put the employee on the manager's team.

    Returns the ids keyed by account kind.
    """
    now = now or datetime.now()

    def upsert(collection: str, email: str, password: str, fields: Dict[str, Any]) -> str:
        doc = dict(fields)
        doc["password"] = generate_password_hash(password)
        conn.collection(collection).update_one(
            {"email": email},
            {"$set": doc, "$setOnInsert": {"email": email, "createdAt": now}},
            upsert=True,
        )
        return str(conn.collection(collection).find_one({"email": email}, {"_id": 1})["_id"])

    admin_id = upsert(
        ADMINS,
        "admin@example.com",
        "admin123",
        {
            "name": "Admin Demo",
            "status": "Active",
            "superAdmin": True,
            "permissions": {
                "canManageUsers": True,
                "canManageRoles": True,
                "canManageSettings": True,
                "canViewAuditLogs": True,
            },
        },
    )
    manager_id = upsert(
        MANAGERS,
        "manager@example.com",
        "manager123",
        {
            "name": "Maria Manager",
            "department": "Engineering",
            "phone": "555-0100",
            "status": "Active",
            "permissions": {"canManageLeaves": True, "canManageAttendance": True, "canManagePayroll": True},
            "joiningDate": now,
        },
    )
    employee_id = upsert(
        EMPLOYEES,
        "alice@example.com",
        "alice123",
        {
            "name": "Alice Employee",
            "cnic": "12345-6789012-3",
            "department": "Engineering",
            "role": "Software Engineer",
            "phone": "555-0101",
            "emergencyContact": "555-0199",
            "dob": datetime(1995, 3, 14),
            "initialSalary": 4000,
            "currentSalary": 4500,
            "shift": "Day",
            "status": "Active",
            "totalLeaves": DEFAULT_TOTAL_LEAVES,
        },
    )

    managers = conn.collection(MANAGERS)
    employees = conn.collection(EMPLOYEES)
    manager = managers.find_one({"email": "manager@example.com"})
    employee = employees.find_one({"email": "alice@example.com"})
    managers.update_one({"_id": manager["_id"]}, {"$addToSet": {"team": employee["_id"]}})
    employees.update_one(
        {"_id": employee["_id"], "managerId": {"$ne": manager["_id"]}},
        {"$set": {"managerId": manager["_id"], "managerAssignedDate": now}},
    )

    logger.info("Demo accounts ready")
    return {"admin": admin_id, "manager": manager_id, "employee": employee_id}
