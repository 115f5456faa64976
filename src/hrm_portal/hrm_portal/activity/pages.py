from __future__ import annotations

from ..core.enums import SystemModule

# first match wins
MODULE_BY_PATH_FRAGMENT = (
    ("/profile", SystemModule.PROFILE),
    ("/attendance", SystemModule.ATTENDANCE),
    ("/payroll", SystemModule.PAYROLL),
    ("/leave", SystemModule.LEAVE),
    ("/loan", SystemModule.LOAN),
    ("/logs", SystemModule.LOGS),
    ("/usermanagement", SystemModule.EMPLOYEE),
    ("/employee", SystemModule.EMPLOYEE),
)


def infer_module(path: str) -> SystemModule:
    lowered = (path or "").lower()
    for fragment, module in MODULE_BY_PATH_FRAGMENT:
        if fragment in lowered:
            return module
    return SystemModule.SYSTEM


def page_details(path: str) -> str:
    segments = [s for s in (path or "").split("/") if s]
    page = segments[-1] if segments else "dashboard"
    return f"Accessed {page} page"
