from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import isoformat
from ..core.enums import ActivityAction, SystemModule


@dataclass(frozen=True)
class ActivityLogEntry:
    user_id: str
    user_name: str
    user_role: str
    action: ActivityAction
    module: SystemModule
    details: str
    timestamp: datetime
    ip_address: str = "unknown"
    entry_id: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "_id": self.entry_id,
            "userId": self.user_id,
            "userName": self.user_name,
            "userRole": self.user_role,
            "action": self.action.value,
            "module": self.module.value,
            "details": self.details,
            "timestamp": isoformat(self.timestamp),
            "ipAddress": self.ip_address,
        }


@dataclass(frozen=True)
class ActivityQuery:
    user_id: Optional[str] = None
    action: Optional[ActivityAction] = None
    module: Optional[SystemModule] = None
    user_role: Optional[str] = None
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    page: int = 1
    limit: int = 50

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True)
class ActivityPage:
    logs: list = field(default_factory=list)
    total: int = 0
    page: int = 1
    limit: int = 50

    @property
    def pages(self) -> int:
        return -(-self.total // self.limit) if self.limit else 0

    def to_dict(self) -> dict:
        return {
            "logs": [e.to_dict() for e in self.logs],
            "pagination": {"total": self.total, "page": self.page, "limit": self.limit, "pages": self.pages},
        }
