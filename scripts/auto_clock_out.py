"""Close every open attendance entry of today.

Meant to be run by cron/a scheduler at the end of the working day, in place
of calling POST /api/employee/attendance/auto-clock-out over HTTP.
"""
from __future__ import annotations

import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.hrm_portal.hrm_portal.container import build_container


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    logging.basicConfig(level=str(getattr(settings, "LOG_LEVEL", "INFO")).upper())
    container = build_container(
        mongo_config={"uri": settings.MONGO_URI, "database": settings.MONGO_DB_NAME},
        secret_key=settings.SECRET_KEY,
    )
    try:
        done = container.attendance_service.auto_clock_out()
    finally:
        container.conn.close()

    print(f"OK: Auto clock-out completed for {len(done)} employee(s)")
    for item in done:
        print(f"  {item.name} ({item.employee_id}) at {item.clock_out:%H:%M}")


if __name__ == "__main__":
    main()
