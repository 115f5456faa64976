from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import api_endpoint, json_body
from ..container import Container
from ..core.enums import ActivityAction, LoanStatus, SystemModule
from ..users.session import current_session

DECISION_ACTIONS = {
    LoanStatus.APPROVED: ActivityAction.APPROVE,
    LoanStatus.REJECTED: ActivityAction.REJECT,
}


def register(app: Flask, container: Container) -> None:
    service = container.loan_service

    @app.route("/api/employee/loans", methods=["GET"], endpoint="api_loan_list")
    @api_endpoint
    def api_loan_list():
        user = current_session(container.tokens)
        rows, balance = service.list_for(
            current_user=user,
            year=request.args.get("year"),
            status=request.args.get("status"),
            loan_id=request.args.get("id"),
        )
        return jsonify({"success": True, "data": rows, "balance": balance.to_dict() if balance else None})

    @app.route("/api/employee/loans", methods=["POST"], endpoint="api_loan_apply")
    @api_endpoint
    def api_loan_apply():
        user = current_session(container.tokens)
        loan = service.apply(current_user=user, payload=json_body())
        container.activity_recorder.after_response(
            user,
            action=ActivityAction.CREATE,
            module=SystemModule.LOAN,
            details=f"Applied for a {loan.loan_type.value} loan of {loan.amount:g}",
        )
        return (
            jsonify({"success": True, "data": loan.to_dict(), "message": "Loan application submitted successfully"}),
            201,
        )

    @app.route("/api/employee/loans", methods=["PATCH"], endpoint="api_loan_decide")
    @api_endpoint
    def api_loan_decide():
        user = current_session(container.tokens)
        body = json_body()
        loan = service.decide(current_user=user, loan_id=body.get("id"), status=body.get("status"))
        container.activity_recorder.after_response(
            user,
            action=DECISION_ACTIONS[loan.status],
            module=SystemModule.LOAN,
            details=f"{loan.status.value} {loan.loan_type.value} loan {loan.loan_id}",
        )
        return jsonify(
            {
                "success": True,
                "data": loan.to_dict(),
                "message": f"Loan application {loan.status.value.lower()} successfully",
            }
        )

    @app.route("/api/employee/loans", methods=["DELETE"], endpoint="api_loan_withdraw")
    @api_endpoint
    def api_loan_withdraw():
        user = current_session(container.tokens)
        service.withdraw(current_user=user, loan_id=request.args.get("id"))
        container.activity_recorder.after_response(
            user, action=ActivityAction.DELETE, module=SystemModule.LOAN, details="Withdrew pending loan application"
        )
        return jsonify({"success": True, "message": "Loan application deleted successfully"})
