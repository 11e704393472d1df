from __future__ import annotations

from storefront.application.dto.auth import RefreshSessionInput, RefreshSessionOutput
from storefront.domain.exceptions import TokenInvalidError

from .session_credentials import SessionCredentials


class RefreshSessionUseCase:
    def __init__(self, *, session_credentials: SessionCredentials):
        self._session_credentials = session_credentials

    def execute(self, command: RefreshSessionInput) -> RefreshSessionOutput:
        token = command.refresh_token.strip()
        if not token:
            raise TokenInvalidError("Missing refresh token.")

        identity, access_token, access_expires_at = self._session_credentials.rotate_access(token)
        return RefreshSessionOutput(
            identity=identity.public(),
            access_token=access_token,
            access_expires_at=access_expires_at,
        )
