from __future__ import annotations

from typing import Protocol, Sequence, Tuple

from .model import ActivityLogEntry, ActivityQuery


class ActivityLogRepository(Protocol):
    """Append-only store of activity entries."""

    def append(self, entry: ActivityLogEntry) -> str:
        raise NotImplementedError

    def query(self, q: ActivityQuery) -> Tuple[Sequence[ActivityLogEntry], int]:
        """Newest first page of matching entries, plus the total match count."""

        raise NotImplementedError
