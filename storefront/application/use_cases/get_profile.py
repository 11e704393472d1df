from __future__ import annotations

from storefront.domain.entities.identity import PublicIdentity

from .session_credentials import SessionCredentials


class GetProfileUseCase:
    """Resolve an access token to the public identity it belongs to."""

    def __init__(self, *, session_credentials: SessionCredentials):
        self._session_credentials = session_credentials

    def execute(self, *, access_token: str) -> PublicIdentity:
        identity_id = self._session_credentials.verify_access(access_token)
        return self._session_credentials.load_identity(identity_id).public()
