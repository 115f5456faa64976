from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import api_endpoint, json_body
from ..common.validators import require_non_empty
from ..container import Container
from ..core.enums import ActivityAction, LeaveStatus, SystemModule
from ..users.session import current_session

DECISION_ACTIONS = {
    LeaveStatus.APPROVED: ActivityAction.APPROVE,
    LeaveStatus.REJECTED: ActivityAction.REJECT,
}


def register(app: Flask, container: Container) -> None:
    service = container.leave_service

    def _decide(user, request_id, status):
        decided = service.decide(current_user=user, request_id=request_id, status=status)
        container.activity_recorder.after_response(
            user,
            action=DECISION_ACTIONS[decided.status],
            module=SystemModule.LEAVE,
            details=f"{decided.status.value} {decided.leave_type.value} leave for {decided.employee_name}",
        )
        return decided

    @app.route("/api/leave", methods=["GET"], endpoint="api_leave_list")
    @api_endpoint
    def api_leave_list():
        user = current_session(container.tokens)
        return jsonify([r.to_dict() for r in service.list_for(current_user=user)])

    @app.route("/api/leave", methods=["POST"], endpoint="api_leave_create")
    @api_endpoint
    def api_leave_create():
        user = current_session(container.tokens)
        created = service.create(current_user=user, payload=json_body())
        container.activity_recorder.after_response(
            user,
            action=ActivityAction.CREATE,
            module=SystemModule.LEAVE,
            details=f"Requested {created.leave_type.value} leave ({created.days} day(s))",
        )
        return jsonify({"success": True, "message": "Leave request submitted successfully", "data": created.to_dict()}), 201

    @app.route("/api/leave/<request_id>", methods=["GET"], endpoint="api_leave_get")
    @api_endpoint
    def api_leave_get(request_id: str):
        user = current_session(container.tokens)
        return jsonify(service.get(current_user=user, request_id=request_id).to_dict())

    @app.route("/api/leave/<request_id>", methods=["PUT"], endpoint="api_leave_decide")
    @api_endpoint
    def api_leave_decide(request_id: str):
        user = current_session(container.tokens)
        decided = _decide(user, request_id, json_body().get("status"))
        return jsonify(decided.to_dict())

    @app.route("/api/leave/<request_id>", methods=["DELETE"], endpoint="api_leave_delete")
    @api_endpoint
    def api_leave_delete(request_id: str):
        user = current_session(container.tokens)
        service.delete(current_user=user, request_id=request_id)
        container.activity_recorder.after_response(
            user, action=ActivityAction.DELETE, module=SystemModule.LEAVE, details="Deleted pending leave request"
        )
        return jsonify({"message": "Request deleted successfully"})

    # Bulk manager view: same scoping and transition rules as /api/leave.
    @app.route("/api/manager/leave-requests", methods=["GET"], endpoint="api_manager_leave_requests")
    @api_endpoint
    def api_manager_leave_requests():
        user = current_session(container.tokens)
        return jsonify([r.to_dict() for r in service.list_for_approver(current_user=user)])

    @app.route("/api/manager/leave-requests", methods=["PUT"], endpoint="api_manager_leave_decide")
    @api_endpoint
    def api_manager_leave_decide():
        user = current_session(container.tokens)
        body = json_body()
        request_id = body.get("requestId") or body.get("id")
        decided = _decide(user, require_non_empty(request_id, "Request ID"), body.get("status"))
        return jsonify(decided.to_dict())
