from __future__ import annotations

from datetime import datetime
from typing import Protocol, Sequence

from ..core.enums import Urgency
from .model import Announcement


class AnnouncementRepository(Protocol):
    def create(
        self,
        *,
        title: str,
        content: str,
        author: str,
        category: str,
        urgency: Urgency,
        date: datetime,
    ) -> Announcement:
        raise NotImplementedError

    def list_recent(self, *, limit: int = 100) -> Sequence[Announcement]:
        raise NotImplementedError
