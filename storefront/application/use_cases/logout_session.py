from __future__ import annotations

from storefront.application.dto.auth import LogoutInput

from .session_credentials import SessionCredentials


class LogoutSessionUseCase:
    def __init__(self, *, session_credentials: SessionCredentials):
        self._session_credentials = session_credentials

    def execute(self, command: LogoutInput) -> None:
        self._session_credentials.revoke(command.identity_id)
