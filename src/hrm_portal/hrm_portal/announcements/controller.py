from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import api_endpoint, json_body
from ..container import Container
from ..core.enums import ActivityAction, SystemModule
from ..users.session import current_session


def register(app: Flask, container: Container) -> None:
    @app.route("/api/announcements", methods=["POST"], endpoint="api_announcement_create")
    @api_endpoint
    def api_announcement_create():
        user = current_session(container.tokens)
        announcement = container.announcement_service.post(current_user=user, payload=json_body())
        container.activity_recorder.after_response(
            user,
            action=ActivityAction.CREATE,
            module=SystemModule.ANNOUNCEMENT,
            details=f"Posted announcement: {announcement.title}",
        )
        return (
            jsonify(
                {
                    "success": True,
                    "message": "Announcement posted successfully",
                    "announcement": announcement.to_dict(),
                }
            ),
            201,
        )

    @app.route("/api/announcements", methods=["GET"], endpoint="api_announcement_list")
    @api_endpoint
    def api_announcement_list():
        user = current_session(container.tokens)
        return jsonify([a.to_dict() for a in container.announcement_service.list_recent(current_user=user)])
