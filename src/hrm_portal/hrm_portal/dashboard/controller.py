from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import api_endpoint
from ..container import Container
from ..users.session import current_session


def register(app: Flask, container: Container) -> None:
    service = container.dashboard_service

    @app.route("/api/manager/summary", methods=["GET"], endpoint="api_manager_summary")
    @api_endpoint
    def api_manager_summary():
        user = current_session(container.tokens)
        return jsonify(service.summary(current_user=user).to_dict())

    @app.route("/api/employee/birthdays", methods=["GET"], endpoint="api_birthdays")
    @api_endpoint
    def api_birthdays():
        current_session(container.tokens)
        return jsonify({"success": True, "birthdaysToday": service.birthdays_today()})
