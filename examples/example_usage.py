"""Example: call the service layer directly, without Flask.

Controllers stay thin; the business rules live in the services.
"""

import importlib

from config import get_settings_module

from src.hrm_portal.hrm_portal.container import build_container


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(
        mongo_config={"uri": settings.MONGO_URI, "database": settings.MONGO_DB_NAME},
        secret_key=settings.SECRET_KEY,
    )
    result = container.auth_service.login("manager@example.com", "manager123")
    print("token:", result.token[:24] + "...")

    manager = result.user
    for req in container.leave_service.list_for(current_user=manager):
        print(req.employee_name, req.leave_type.value, req.status.value, req.days, "day(s)")


if __name__ == "__main__":
    main()
