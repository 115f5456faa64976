from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Dict, Optional

from ..common.datetime_utils import now_local
from ..core.constants import PROFILE_UPLOAD_PREFIX
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError
from .model import SessionUser
from .service import IdentityResolver

ACCESS_MESSAGES = {
    Role.EMPLOYEE: "Access denied: Employee access only",
    Role.MANAGER: "Access denied: Manager access only",
    Role.HR: "Access denied: HR access only",
}

NOT_FOUND_MESSAGES = {
    Role.EMPLOYEE: "Employee not found",
    Role.MANAGER: "Manager not found",
    Role.HR: "HR profile not found",
}


class ProfileService:
    """Self-service profile read/update for each role.

    Only contact fields and the picture path are editable here.
    """

    def __init__(self, resolver: IdentityResolver, *, clock: Callable[[], datetime] = now_local):
        self._resolver = resolver
        self._clock = clock

    def _check(self, current_user: SessionUser, role: Role) -> None:
        if current_user.role != role:
            raise AuthorizationError(ACCESS_MESSAGES[role])

    def get_profile(self, *, current_user: SessionUser, role: Role) -> Dict[str, Any]:
        self._check(current_user, role)
        account = self._resolver.load(current_user)
        if account is None:
            raise NotFoundError(NOT_FOUND_MESSAGES[role])
        return account.to_public_dict()

    def picture_path(self, email: str, filename: str) -> str:
        stamp = int(self._clock().timestamp() * 1000)
        return f"{PROFILE_UPLOAD_PREFIX}/{email}-{stamp}-{filename}"

    def update_profile(
        self,
        *,
        current_user: SessionUser,
        role: Role,
        phone: Optional[str] = None,
        emergency_contact: Optional[str] = None,
        picture_filename: Optional[str] = None,
    ) -> Dict[str, Any]:
        self._check(current_user, role)

        fields: Dict[str, Any] = {}
        if phone:
            fields["phone"] = phone.strip()
        if emergency_contact:
            fields["emergencyContact"] = emergency_contact.strip()
        if picture_filename:
            # file bytes are not stored; only the would-be upload path
            fields["profilePicture"] = self.picture_path(current_user.email, picture_filename)

        store = self._resolver.store_for(current_user.kind)
        if fields and not store.update_fields(current_user.user_id, fields):
            raise NotFoundError(NOT_FOUND_MESSAGES[role])
        return self.get_profile(current_user=current_user, role=role)
