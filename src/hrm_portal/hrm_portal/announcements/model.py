from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from ..common.datetime_utils import isoformat
from ..core.enums import Urgency


@dataclass(frozen=True)
class Announcement:
    announcement_id: str
    title: str
    content: str
    author: str
    category: str
    urgency: Urgency
    date: datetime

    def to_dict(self) -> dict:
        return {
            "_id": self.announcement_id,
            "title": self.title,
            "content": self.content,
            "author": self.author,
            "category": self.category,
            "urgency": self.urgency.value,
            "date": isoformat(self.date),
        }
