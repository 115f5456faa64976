from __future__ import annotations

from typing import Iterable, Optional

from flask import g

from ..common.http import read_token
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError
from .model import SessionUser
from .tokens import TokenService


def current_session(tokens: TokenService) -> SessionUser:
    """Verified session of the current request (cached on flask.g)."""
    user: Optional[SessionUser] = g.get("session_user")
    if user is None:
        user = tokens.verify(read_token())
        g.session_user = user
    return user


def optional_session(tokens: TokenService) -> Optional[SessionUser]:
    """Like current_session, but None instead of a 401 for a missing or bad token."""
    if not read_token():
        return None
    try:
        return current_session(tokens)
    except AuthenticationError:
        return None


def require_role(user: SessionUser, allowed: Iterable[Role], message: str = "Access denied: Insufficient permissions") -> None:
    if user.role not in set(allowed):
        raise AuthorizationError(message)
