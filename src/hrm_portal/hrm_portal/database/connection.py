from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.database import Database

logger = logging.getLogger(__name__)


@dataclass
class DBConfig:
    uri: str
    database: str
    server_selection_timeout_ms: int = 5000


class DatabaseConnection:
    """Owns the process-wide MongoClient.

    Note: Built once by the container at startup. MongoClient keeps its own
    connection pool, so repositories share this object instead of
    reconnecting per operation.
    """

    def __init__(self, config: DBConfig, *, client: Optional[MongoClient] = None):
        self._config = config
        self._client = client if client is not None else MongoClient(
            config.uri,
            serverSelectionTimeoutMS=int(config.server_selection_timeout_ms),
            tz_aware=False,
        )
        logger.info("Mongo client ready for database %r", config.database)

    @property
    def db(self) -> Database:
        return self._client[self._config.database]

    def collection(self, name: str) -> Collection:
        return self.db[name]

    def ping(self) -> bool:
        self._client.admin.command("ping")
        return True

    def close(self) -> None:
        self._client.close()
