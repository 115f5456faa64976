from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Optional

from ..common.datetime_utils import now_local, parse_optional_date, start_of_day
from ..common.validators import require_enum, require_non_empty
from ..core.constants import DEFAULT_LOG_PAGE_LIMIT, MAX_LOG_PAGE_LIMIT
from ..core.enums import ActivityAction, Role, SystemModule
from ..core.exceptions import AuthorizationError
from ..users.model import SessionUser
from .model import ActivityLogEntry, ActivityPage, ActivityQuery
from .repository import ActivityLogRepository


class ActivityLogService:
    def __init__(self, repository: ActivityLogRepository, *, clock: Callable[[], datetime] = now_local):
        self._repository = repository
        self._clock = clock

    def entry_for(
        self,
        user: SessionUser,
        *,
        action: ActivityAction,
        module: SystemModule,
        details: str,
        ip_address: str = "unknown",
    ) -> ActivityLogEntry:
        return ActivityLogEntry(
            user_id=user.user_id,
            user_name=user.name,
            user_role=user.role.value,
            action=action,
            module=module,
            details=details,
            timestamp=self._clock(),
            ip_address=ip_address or "unknown",
        )

    def record(self, *, current_user: SessionUser, payload: Dict[str, Any], ip_address: str) -> ActivityLogEntry:
        """Synchronous write for the explicit POST endpoint."""
        action = require_enum(require_non_empty(payload.get("action"), "action"), ActivityAction, "action")
        module = require_enum(require_non_empty(payload.get("module"), "module"), SystemModule, "module")
        details = require_non_empty(payload.get("details"), "details")
        entry = self.entry_for(
            current_user,
            action=action,
            module=module,
            details=details,
            ip_address=str(payload.get("ipAddress") or ip_address),
        )
        entry_id = self._repository.append(entry)
        return replace(entry, entry_id=entry_id)

    def search(
        self,
        *,
        current_user: SessionUser,
        params: Dict[str, Any],
        page: int = 1,
        limit: int = DEFAULT_LOG_PAGE_LIMIT,
    ) -> ActivityPage:
        if current_user.role not in (Role.MANAGER, Role.HR):
            raise AuthorizationError("Access denied: Managers and HR only")

        limit = min(max(int(limit), 1), MAX_LOG_PAGE_LIMIT)
        page = max(int(page), 1)

        action = params.get("action")
        module = params.get("module")
        start_day = parse_optional_date(params.get("startDate"))
        end_day = parse_optional_date(params.get("endDate"))
        start: Optional[datetime] = None
        end: Optional[datetime] = None
        if start_day and end_day:
            start = start_of_day(start_day)
            end = start_of_day(end_day) + timedelta(days=1)

        q = ActivityQuery(
            user_id=params.get("userId") or None,
            action=require_enum(action, ActivityAction, "action") if action else None,
            module=require_enum(module, SystemModule, "module") if module else None,
            user_role=params.get("userRole") or None,
            start=start,
            end=end,
            page=page,
            limit=limit,
        )
        logs, total = self._repository.query(q)
        return ActivityPage(logs=list(logs), total=total, page=page, limit=limit)
