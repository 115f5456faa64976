from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import api_endpoint, client_ip, json_body, query_int
from ..container import Container
from ..core.constants import DEFAULT_LOG_PAGE_LIMIT, MAX_LOG_PAGE_LIMIT
from ..users.session import current_session


def register(app: Flask, container: Container) -> None:
    @app.route("/api/activity-logs", methods=["GET"], endpoint="api_activity_logs")
    @api_endpoint
    def list_activity_logs():
        user = current_session(container.tokens)
        page = container.activity_service.search(
            current_user=user,
            params=request.args.to_dict(),
            page=query_int("page", 1),
            limit=query_int("limit", DEFAULT_LOG_PAGE_LIMIT, maximum=MAX_LOG_PAGE_LIMIT),
        )
        return jsonify(page.to_dict())

    @app.route("/api/activity-logs", methods=["POST"], endpoint="api_create_activity_log")
    @api_endpoint
    def create_activity_log():
        user = current_session(container.tokens)
        entry = container.activity_service.record(current_user=user, payload=json_body(), ip_address=client_ip())
        return jsonify({"success": True, "data": entry.to_dict()}), 201
