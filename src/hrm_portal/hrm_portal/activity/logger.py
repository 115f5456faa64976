from __future__ import annotations

import logging
import queue
import threading
from typing import Optional

from .model import ActivityLogEntry
from .repository import ActivityLogRepository

logger = logging.getLogger(__name__)

_STOP = object()


class ActivityLogger:
    """Fire-and-forget writer for activity entries.

    Request handlers call submit() and return immediately; a single daemon
    worker drains the queue into the repository. A failed write is logged
    and dropped, it never reaches the request that produced it.
    """

    def __init__(self, repository: ActivityLogRepository, *, maxsize: int = 1000):
        self._repository = repository
        self._queue: "queue.Queue[object]" = queue.Queue(maxsize=maxsize)
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        with self._lock:
            if self.running:
                return
            self._thread = threading.Thread(target=self._run, name="activity-logger", daemon=True)
            self._thread.start()

    def submit(self, entry: ActivityLogEntry) -> bool:
        """Queue an entry without blocking. Returns False if it was dropped."""
        try:
            self._queue.put_nowait(entry)
        except queue.Full:
            logger.warning("Activity queue full, dropping %s/%s entry", entry.module.value, entry.action.value)
            return False
        return True

    def flush(self) -> None:
        """Block until every queued entry has been handled."""
        self._queue.join()

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        with self._lock:
            thread = self._thread
            if thread is None:
                return
            self._queue.put(_STOP)
            thread.join(timeout)
            self._thread = None

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    return
                self._write(item)
            finally:
                self._queue.task_done()

    def _write(self, entry: ActivityLogEntry) -> None:
        try:
            self._repository.append(entry)
        except Exception:
            logger.exception("Failed to write activity log entry (%s/%s)", entry.module.value, entry.action.value)
