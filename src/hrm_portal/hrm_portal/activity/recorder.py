from __future__ import annotations

from flask import after_this_request

from ..common.http import client_ip
from ..core.enums import ActivityAction, SystemModule
from ..users.model import SessionUser
from .logger import ActivityLogger
from .service import ActivityLogService


class ActivityRecorder:
    """Builds an entry during the request and hands it to the logger once
    the response exists. Failed responses (status >= 400) are not recorded.
    """

    def __init__(self, service: ActivityLogService, logger: ActivityLogger, *, enabled: bool = True):
        self._service = service
        self._logger = logger
        self.enabled = enabled

    def after_response(self, user: SessionUser, *, action: ActivityAction, module: SystemModule, details: str) -> None:
        if not self.enabled:
            return
        entry = self._service.entry_for(user, action=action, module=module, details=details, ip_address=client_ip())

        @after_this_request
        def _hand_off(response):
            if response.status_code < 400:
                self._logger.submit(entry)
            return response
