from __future__ import annotations

import logging
from functools import wraps
from typing import Any, Dict, Optional

from flask import jsonify, request

from ..core.constants import TOKEN_COOKIE
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DomainError,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Order matters: subclasses before their bases.
STATUS_BY_ERROR = (
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (ValidationError, 400),
)


def error_response(message: str, status: int):
    return jsonify({"error": message}), status


def api_endpoint(view):
    """Turn domain exceptions raised by a JSON view into error responses.

    Anything that is not a DomainError is a server fault: it is logged with
    its traceback and the client only gets a generic 500.
    """

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except DomainError as e:
            for error_cls, status in STATUS_BY_ERROR:
                if isinstance(e, error_cls):
                    return error_response(str(e), status)
            return error_response(str(e), 400)
        except Exception:
            logger.exception("Unhandled error in %s %s", request.method, request.path)
            return error_response("Internal server error", 500)

    return wrapper


def json_body() -> Dict[str, Any]:
    """Request JSON object; a missing or malformed body is a 400."""
    if not request.data:
        return {}
    payload = request.get_json(silent=True)
    if payload is None:
        raise ValidationError("Invalid JSON in request body")
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    return payload


def form_or_json() -> Dict[str, Any]:
    """Profile updates arrive as multipart forms; accept JSON too."""
    if request.form:
        return request.form.to_dict()
    return json_body()


def read_token() -> Optional[str]:
    """Session token from the `token` cookie, or an `Authorization: Bearer` header."""
    token = request.cookies.get(TOKEN_COOKIE)
    if token:
        return token
    header = request.headers.get("Authorization", "")
    if header.lower().startswith("bearer "):
        return header.split(" ", 1)[1].strip() or None
    return None


def client_ip() -> str:
    forwarded = request.headers.get("X-Forwarded-For", "")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.remote_addr or "unknown"


def query_int(name: str, default: int, *, minimum: int = 1, maximum: Optional[int] = None) -> int:
    raw = request.args.get(name)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValidationError(f"{name} must be an integer")
    value = max(value, minimum)
    if maximum is not None:
        value = min(value, maximum)
    return value


def not_found_if_none(value, message: str):
    if value is None:
        raise NotFoundError(message)
    return value
