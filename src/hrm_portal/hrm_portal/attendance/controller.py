from __future__ import annotations

import hmac

from flask import Flask, current_app, jsonify, request

from ..common.datetime_utils import isoformat, now_local
from ..common.http import api_endpoint, json_body
from ..container import Container
from ..core.enums import ActivityAction, SystemModule
from ..core.exceptions import AuthenticationError
from ..users.session import current_session


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    @app.route("/api/employee/attendance", methods=["GET"], endpoint="api_attendance_list")
    @api_endpoint
    def api_attendance_list():
        user = current_session(container.tokens)
        data = service.list_entries(
            current_user=user,
            employee_id=request.args.get("employeeId"),
            day=request.args.get("date"),
            start_date=request.args.get("startDate"),
            end_date=request.args.get("endDate"),
        )
        return jsonify({"success": True, "data": data})

    @app.route("/api/employee/attendance", methods=["POST"], endpoint="api_attendance_clock")
    @api_endpoint
    def api_attendance_clock():
        user = current_session(container.tokens)
        body = json_body()
        action = body.get("action")
        entry = service.clock(current_user=user, action=action, employee_id=body.get("employeeId"))
        container.activity_recorder.after_response(
            user,
            action=ActivityAction.CREATE if action == "clock-in" else ActivityAction.UPDATE,
            module=SystemModule.ATTENDANCE,
            details="Clocked in" if action == "clock-in" else f"Clocked out ({entry.hours_worked} h)",
        )
        message = "Clocked in successfully" if action == "clock-in" else "Clocked out successfully"
        return jsonify({"success": True, "message": message, "data": entry.to_dict()})

    @app.route("/api/employee/attendance/auto-clock-out", methods=["POST"], endpoint="api_auto_clock_out")
    @api_endpoint
    def api_auto_clock_out():
        expected = current_app.config.get("AUTO_CLOCKOUT_API_KEY") or ""
        if expected:
            supplied = request.headers.get("X-API-Key", "")
            if not hmac.compare_digest(supplied, expected):
                raise AuthenticationError("Invalid API key")
        processed_at = now_local()
        done = service.auto_clock_out(processed_at)
        return jsonify(
            {
                "success": True,
                "message": f"Auto clock-out completed for {len(done)} employee(s)",
                "data": [d.to_dict() for d in done],
                "processedAt": isoformat(processed_at),
            }
        )
