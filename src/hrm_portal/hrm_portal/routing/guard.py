from __future__ import annotations

from typing import Optional

from ..core.enums import Role

ROLE_HOME = {
    Role.HR: "/hr",
    Role.MANAGER: "/manager",
    Role.EMPLOYEE: "/employee",
}

# Page trees each role is bounced away from, and where it is sent instead.
FORBIDDEN_TREES = {
    Role.HR: (ROLE_HOME[Role.EMPLOYEE], ROLE_HOME[Role.MANAGER]),
    Role.MANAGER: (ROLE_HOME[Role.EMPLOYEE], ROLE_HOME[Role.HR]),
    Role.EMPLOYEE: (ROLE_HOME[Role.MANAGER], ROLE_HOME[Role.HR]),
}


def in_tree(path: str, root: str) -> bool:
    """Segment-exact prefix test: /hr matches /hr and /hr/x, not /hrx."""
    return path == root or path.startswith(root + "/")


def is_guarded(path: str) -> bool:
    return any(in_tree(path, root) for root in ROLE_HOME.values())


def resolve_page_access(role: Role, path: str) -> Optional[str]:
    """Where to redirect role for path, or None when the page may be served."""
    for root in FORBIDDEN_TREES[role]:
        if in_tree(path, root):
            return ROLE_HOME[role]
    return None
