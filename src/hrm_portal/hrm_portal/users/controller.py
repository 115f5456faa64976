from __future__ import annotations

import logging

from flask import Flask, current_app, jsonify, redirect, render_template, request
from werkzeug.utils import secure_filename

from ..common.http import api_endpoint, error_response, form_or_json, json_body
from ..container import Container
from ..core.constants import ROLE_COOKIE, TOKEN_COOKIE
from ..core.enums import AccountKind, ActivityAction, Role, SystemModule
from ..routing.guard import ROLE_HOME
from .session import current_session, optional_session

logger = logging.getLogger(__name__)

PROFILE_PREFIXES = {
    Role.EMPLOYEE: "/api/employee/profile",
    Role.MANAGER: "/api/manager/profile",
    Role.HR: "/api/hr/profile",
}


def register(app: Flask, container: Container) -> None:
    registrations = {
        AccountKind.ADMIN: container.registration_service.register_admin,
        AccountKind.MANAGER: container.registration_service.register_manager,
        AccountKind.EMPLOYEE: container.registration_service.register_employee,
    }

    def _set_session_cookies(response, token: str, role: Role):
        # both cookies go on the same response, after the token exists
        options = dict(
            max_age=container.tokens.max_age_seconds,
            httponly=True,
            samesite="Strict",
            secure=bool(current_app.config.get("COOKIE_SECURE", False)),
            path="/",
        )
        response.set_cookie(TOKEN_COOKIE, token, **options)
        response.set_cookie(ROLE_COOKIE, role.value, **options)
        return response

    @app.route("/", methods=["GET"], endpoint="login")
    def login_page():
        user = optional_session(container.tokens)
        if user is not None:
            return redirect(ROLE_HOME[user.role])
        return render_template("login.html")

    @app.route("/api/auth/login", methods=["POST"], endpoint="api_login")
    @api_endpoint
    def api_login():
        body = json_body() if request.is_json else request.form.to_dict()
        result = container.auth_service.login(body.get("email"), body.get("password"))
        logger.info("Login ok for %s (%s)", result.user.email, result.user.role.value)
        container.activity_recorder.after_response(
            result.user,
            action=ActivityAction.LOGIN,
            module=SystemModule.SYSTEM,
            details="Logged in",
        )
        response = jsonify({"token": result.token, "role": result.user.role.value})
        return _set_session_cookies(response, result.token, result.user.role)

    @app.route("/api/auth/logout", methods=["POST"], endpoint="api_logout")
    @api_endpoint
    def api_logout():
        user = optional_session(container.tokens)
        if user is not None:
            container.activity_recorder.after_response(
                user, action=ActivityAction.LOGOUT, module=SystemModule.SYSTEM, details="Logged out"
            )
        response = jsonify({"success": True})
        response.delete_cookie(TOKEN_COOKIE, path="/")
        response.delete_cookie(ROLE_COOKIE, path="/")
        return response

    @app.route("/api/auth/register/<kind>", methods=["POST"], endpoint="api_register")
    @api_endpoint
    def api_register(kind: str):
        try:
            account_kind = AccountKind(kind)
        except ValueError:
            return error_response("Unknown account type", 404)
        account_id = registrations[account_kind](json_body())
        return jsonify({"success": True, "message": f"{account_kind.value.capitalize()} registered successfully", "id": account_id}), 201

    # ---- profiles ----------------------------------------------------

    def _profile_routes(role: Role, path: str) -> None:
        def get_profile():
            user = current_session(container.tokens)
            data = container.profile_service.get_profile(current_user=user, role=role)
            return jsonify({"success": True, "data": data})

        def update_profile():
            user = current_session(container.tokens)
            fields = form_or_json()
            picture = request.files.get("profilePicture")
            filename = secure_filename(picture.filename) if picture and picture.filename else None
            data = container.profile_service.update_profile(
                current_user=user,
                role=role,
                phone=fields.get("phone"),
                emergency_contact=fields.get("emergencyContact"),
                picture_filename=filename,
            )
            container.activity_recorder.after_response(
                user, action=ActivityAction.UPDATE, module=SystemModule.PROFILE, details="Updated profile"
            )
            return jsonify({"success": True, "message": "Profile updated successfully", "data": data})

        app.add_url_rule(path, endpoint=f"api_{role.value}_profile", view_func=api_endpoint(get_profile), methods=["GET"])
        app.add_url_rule(
            path, endpoint=f"api_{role.value}_profile_update", view_func=api_endpoint(update_profile), methods=["PATCH"]
        )

    for role, path in PROFILE_PREFIXES.items():
        _profile_routes(role, path)

    @app.route("/api/employee/profile/all", methods=["GET"], endpoint="api_employee_profiles")
    @api_endpoint
    def api_employee_profiles():
        user = current_session(container.tokens)
        data = container.directory_service.list_profiles(current_user=user, employee_id=request.args.get("id"))
        return jsonify({"success": True, "count": len(data), "data": data})

    # ---- directory ---------------------------------------------------

    @app.route("/api/employee/status", methods=["GET"], endpoint="api_employee_status")
    @api_endpoint
    def api_employee_status():
        user = current_session(container.tokens)
        return jsonify(container.directory_service.own_status(current_user=user))

    @app.route("/api/employee/status", methods=["PUT"], endpoint="api_employee_status_update")
    @api_endpoint
    def api_employee_status_update():
        user = current_session(container.tokens)
        body = json_body()
        data = container.directory_service.set_status(
            current_user=user, employee_id=body.get("employeeId"), status=body.get("status")
        )
        container.activity_recorder.after_response(
            user,
            action=ActivityAction.UPDATE,
            module=SystemModule.EMPLOYEE,
            details=f"Changed status of {data['name']} to {data['status']}",
        )
        return jsonify({"success": True, "message": "Employee status updated successfully", "data": data})

    @app.route("/api/hr/employees", methods=["GET"], endpoint="api_hr_employees")
    @api_endpoint
    def api_hr_employees():
        user = current_session(container.tokens)
        data = container.directory_service.list_employees(current_user=user, department=request.args.get("department"))
        return jsonify({"success": True, "data": data})

    @app.route("/api/hr/employees/status", methods=["PATCH"], endpoint="api_hr_employee_status")
    @api_endpoint
    def api_hr_employee_status():
        user = current_session(container.tokens)
        body = json_body()
        data = container.directory_service.set_status(
            current_user=user,
            employee_id=body.get("employeeId"),
            status=body.get("status"),
            allowed=(Role.HR,),
            denied_message="Access denied: HR access only",
        )
        container.activity_recorder.after_response(
            user,
            action=ActivityAction.UPDATE,
            module=SystemModule.EMPLOYEE,
            details=f"Changed status of {data['name']} to {data['status']}",
        )
        return jsonify({"success": True, "message": "Employee status updated successfully", "data": data})

    @app.route("/api/hr/employees/reset-password", methods=["POST"], endpoint="api_hr_reset_password")
    @api_endpoint
    def api_hr_reset_password():
        user = current_session(container.tokens)
        body = json_body()
        success, results = container.directory_service.reset_passwords(
            current_user=user, employee_ids=body.get("employeeIds"), new_password=body.get("newPassword")
        )
        container.activity_recorder.after_response(
            user,
            action=ActivityAction.UPDATE,
            module=SystemModule.EMPLOYEE,
            details=f"Reset password for {sum(1 for r in results if r['success'])} employee(s)",
        )
        return jsonify({"success": success, "results": results})

    @app.route("/api/hr/employees/leaves", methods=["POST"], endpoint="api_hr_leave_allowance")
    @api_endpoint
    def api_hr_leave_allowance():
        user = current_session(container.tokens)
        success, results = container.directory_service.add_leave_allowance(
            current_user=user, updates=json_body().get("updates")
        )
        return jsonify({"success": success, "results": results})

    @app.route("/api/manager/team/add", methods=["POST"], endpoint="api_team_add")
    @api_endpoint
    def api_team_add():
        user = current_session(container.tokens)
        body = json_body()
        team = container.directory_service.add_team_member(
            current_user=user, employee_id=body.get("employeeId"), manager_id=body.get("managerId")
        )
        return jsonify({"success": True, "message": "Employee added to team", "team": team})

    @app.route("/api/manager/team/remove", methods=["POST"], endpoint="api_team_remove")
    @api_endpoint
    def api_team_remove():
        user = current_session(container.tokens)
        body = json_body()
        team = container.directory_service.remove_team_member(
            current_user=user, employee_id=body.get("employeeId"), manager_id=body.get("managerId")
        )
        return jsonify({"success": True, "message": "Employee removed from team", "team": team})
