from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Dict, Sequence

from ..common.datetime_utils import now_local
from ..common.validators import require_enum, require_non_empty
from ..core.enums import Role, Urgency
from ..core.exceptions import AuthorizationError
from ..users.model import SessionUser
from .model import Announcement
from .repository import AnnouncementRepository


class AnnouncementService:
    def __init__(self, announcements: AnnouncementRepository, *, clock: Callable[[], datetime] = now_local):
        self._announcements = announcements
        self._clock = clock

    def post(self, *, current_user: SessionUser, payload: Dict[str, Any]) -> Announcement:
        if current_user.role not in (Role.HR, Role.MANAGER):
            raise AuthorizationError("Only managers and HR can post announcements")
        return self._announcements.create(
            title=require_non_empty(payload.get("title"), "Title"),
            content=require_non_empty(payload.get("content"), "Content"),
            category=require_non_empty(payload.get("category"), "Category"),
            urgency=require_enum(require_non_empty(payload.get("urgency"), "Urgency"), Urgency, "urgency"),
            author=current_user.name,
            date=self._clock(),
        )

    def list_recent(self, *, current_user: SessionUser) -> Sequence[Announcement]:
        return self._announcements.list_recent()
