from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import api_endpoint, json_body
from ..container import Container
from ..core.enums import ActivityAction, SystemModule
from ..users.session import current_session


def register(app: Flask, container: Container) -> None:
    @app.route("/api/payroll", methods=["GET"], endpoint="api_payroll_list")
    @api_endpoint
    def api_payroll_list():
        user = current_session(container.tokens)
        records = container.payroll_service.list_records(
            current_user=user,
            month=request.args.get("month"),
            search=request.args.get("search"),
            department=request.args.get("department"),
        )
        return jsonify({"success": True, "data": [r.to_dict() for r in records]})

    @app.route("/api/payroll", methods=["PATCH"], endpoint="api_payroll_update")
    @api_endpoint
    def api_payroll_update():
        user = current_session(container.tokens)
        record = container.payroll_service.update_record(current_user=user, payload=json_body())
        container.activity_recorder.after_response(
            user,
            action=ActivityAction.UPDATE,
            module=SystemModule.PAYROLL,
            details=f"Updated payroll for {record.name} ({record.month} {record.year})",
        )
        return jsonify({"success": True, "data": record.to_dict()})

    @app.route("/api/employee/payroll", methods=["GET"], endpoint="api_employee_payroll")
    @api_endpoint
    def api_employee_payroll():
        user = current_session(container.tokens)
        records = container.payroll_service.own_records(current_user=user, month=request.args.get("month"))
        return jsonify({"success": True, "data": [r.to_dict() for r in records]})

    @app.route("/api/employee/payroll", methods=["PATCH"], endpoint="api_employee_payroll_toggle")
    @api_endpoint
    def api_employee_payroll_toggle():
        user = current_session(container.tokens)
        record = container.payroll_service.toggle_own_status(current_user=user, record_id=json_body().get("recordId"))
        container.activity_recorder.after_response(
            user,
            action=ActivityAction.UPDATE,
            module=SystemModule.PAYROLL,
            details=f"Marked {record.month} {record.year} payroll as {record.status.value}",
        )
        return jsonify({"success": True, "data": record.to_dict()})

    @app.route("/api/employee/payroll/payslip", methods=["POST"], endpoint="api_employee_payslip")
    @api_endpoint
    def api_employee_payslip():
        user = current_session(container.tokens)
        data = container.payroll_service.payslip(current_user=user, record_id=json_body().get("recordId"))
        container.activity_recorder.after_response(
            user,
            action=ActivityAction.DOWNLOAD,
            module=SystemModule.PAYROLL,
            details=f"Payslip for {data['month']} {data['year']}",
        )
        return jsonify({"success": True, "data": data})
