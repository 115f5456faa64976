from __future__ import annotations

import logging

from flask import Flask, redirect, render_template, request, url_for

from ..activity.pages import infer_module, page_details
from ..container import Container
from ..core.enums import ActivityAction, Role
from ..users.session import optional_session
from .guard import ROLE_HOME, is_guarded, resolve_page_access

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.before_request
    def guard_role_pages():
        path = request.path.rstrip("/") or "/"
        if not is_guarded(path):
            return None

        user = optional_session(container.tokens)
        if user is None:
            return redirect(url_for("login"))

        target = resolve_page_access(user.role, path)
        if target is not None:
            logger.info("Redirecting %s from %s to %s", user.role.value, path, target)
            return redirect(target)

        container.activity_recorder.after_response(
            user,
            action=ActivityAction.VIEW,
            module=infer_module(path),
            details=page_details(path),
        )
        return None

    def _page(role: Role):
        def view(sub: str = ""):
            user = optional_session(container.tokens)
            return render_template("page.html", role=role.value, user=user, section=sub or "dashboard")

        return view

    for role, root in ROLE_HOME.items():
        view = _page(role)
        app.add_url_rule(root, endpoint=f"{role.value}_home", view_func=view, methods=["GET"])
        app.add_url_rule(f"{root}/<path:sub>", endpoint=f"{role.value}_page", view_func=view, methods=["GET"])
