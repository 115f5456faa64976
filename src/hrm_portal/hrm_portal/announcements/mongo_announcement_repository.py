from __future__ import annotations

from datetime import datetime
from typing import Sequence

from pymongo import DESCENDING

from ..core.enums import Urgency
from ..database.mongo_base import ANNOUNCEMENTS, MongoRepository
from .model import Announcement


class MongoAnnouncementRepository(MongoRepository):
    collection_name = ANNOUNCEMENTS

    @staticmethod
    def _to_model(doc: dict) -> Announcement:
        return Announcement(
            announcement_id=str(doc["_id"]),
            title=doc.get("title", ""),
            content=doc.get("content", ""),
            author=doc.get("author", ""),
            category=doc.get("category", ""),
            urgency=Urgency(doc.get("urgency", Urgency.MEDIUM.value)),
            date=doc.get("date"),
        )

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
        doc = {
            "title": title,
            "content": content,
            "author": author,
            "category": category,
            "urgency": urgency.value,
            "date": date,
        }
        doc["_id"] = self._col.insert_one(doc).inserted_id
        return self._to_model(doc)

    def list_recent(self, *, limit: int = 100) -> Sequence[Announcement]:
        return [self._to_model(doc) for doc in self._col.find({}).sort("date", DESCENDING).limit(limit)]
