from __future__ import annotations

import sys
from pathlib import Path

import importlib

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.hrm_portal.hrm_portal.database.bootstrap import ensure_indexes, list_collections
from src.hrm_portal.hrm_portal.database.connection import DBConfig, DatabaseConnection


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    conn = DatabaseConnection(DBConfig(uri=settings.MONGO_URI, database=settings.MONGO_DB_NAME))
    try:
        ensure_indexes(conn)
        collections = list_collections(conn)
    finally:
        conn.close()
    print(f"OK: Indexes ready -> {settings.MONGO_DB_NAME} (collections={len(collections)})")


if __name__ == "__main__":
    main()
