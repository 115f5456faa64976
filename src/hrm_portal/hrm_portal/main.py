from __future__ import annotations

import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .activity.controller import register as register_activity
from .announcements.controller import register as register_announcements
from .attendance.controller import register as register_attendance
from .container import Container, build_container
from .core.constants import DEFAULT_TOKEN_MAX_AGE_SECONDS
from .dashboard.controller import register as register_dashboard
from .database.bootstrap import ensure_indexes, list_collections, seed_demo_accounts
from .leave.controller import register as register_leave
from .loans.controller import register as register_loans
from .payroll.controller import register as register_payroll
from .routing.controller import register as register_routing
from .users.controller import register as register_users

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"

logger = logging.getLogger(__name__)


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__, template_folder="../../../templates", static_folder="../../../static")

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    logging.basicConfig(level=str(getattr(settings, "LOG_LEVEL", "INFO")).upper(), format=LOG_FORMAT)

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["COOKIE_SECURE"] = bool(getattr(settings, "COOKIE_SECURE", False))
    app.config["AUTO_CLOCKOUT_API_KEY"] = getattr(settings, "AUTO_CLOCKOUT_API_KEY", "") or ""

    if container is None:
        mongo_config = {
            "uri": getattr(settings, "MONGO_URI"),
            "database": getattr(settings, "MONGO_DB_NAME"),
        }
        logger.info("settings=%s db=%s", settings_module, mongo_config["database"])

        container = build_container(
            mongo_config=mongo_config,
            secret_key=app.secret_key,
            token_max_age=int(getattr(settings, "TOKEN_MAX_AGE_SECONDS", DEFAULT_TOKEN_MAX_AGE_SECONDS)),
            activity_enabled=bool(getattr(settings, "ACTIVITY_LOG_ENABLED", True)),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            ensure_indexes(container.conn)
            logger.info("schema ready (collections=%d)", len(list_collections(container.conn)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            seed_demo_accounts(container.conn)

    container.activity_logger.start()
    app.extensions["hrm_container"] = container

    register_routing(app, container)
    register_users(app, container)
    register_leave(app, container)
    register_loans(app, container)
    register_payroll(app, container)
    register_announcements(app, container)
    register_attendance(app, container)
    register_activity(app, container)
    register_dashboard(app, container)

    return app
