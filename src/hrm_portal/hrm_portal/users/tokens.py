from __future__ import annotations

from typing import Optional

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from ..core.constants import DEFAULT_TOKEN_MAX_AGE_SECONDS, TOKEN_SALT
from ..core.exceptions import AuthenticationError
from .model import SessionUser


class TokenService:
    """Signs and verifies session tokens (1 day lifetime by default)."""

    def __init__(self, secret_key: str, *, max_age_seconds: int = DEFAULT_TOKEN_MAX_AGE_SECONDS):
        if not secret_key:
            raise ValueError("secret_key is required to sign session tokens")
        self._serializer = URLSafeTimedSerializer(secret_key, salt=TOKEN_SALT)
        self.max_age_seconds = int(max_age_seconds)

    def issue(self, user: SessionUser) -> str:
        return self._serializer.dumps(user.to_claims())

    def verify(self, token: Optional[str]) -> SessionUser:
        if not token:
            raise AuthenticationError("Authentication required")
        try:
            claims = self._serializer.loads(token, max_age=self.max_age_seconds)
        except SignatureExpired:
            raise AuthenticationError("Session expired")
        except BadSignature:
            raise AuthenticationError("Authentication required")
        try:
            return SessionUser.from_claims(claims)
        except (KeyError, TypeError, ValueError):
            raise AuthenticationError("Authentication required")
