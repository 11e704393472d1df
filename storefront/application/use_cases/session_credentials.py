"""Refresh-token storage and verification for identity sessions.

Each identity keeps a single refresh-token slot. Issuing credentials on any
login overwrites it, which silently ends sessions on other devices. Access
tokens are verified by signature and expiry only; refresh tokens must also
match the slot, so logout takes effect for refresh immediately and for access
tokens once they expire.
"""

from __future__ import annotations

import hmac
import logging
from datetime import datetime

from storefront.application.dto.auth import TokenPair
from storefront.application.ports.identity_store_port import IdentityStorePort, StoreAvailabilityPort
from storefront.application.ports.token_port import TokenPort
from storefront.domain.entities.identity import Identity, Role
from storefront.domain.exceptions import (
    IdentityNotFoundError,
    StoreUnavailableError,
    TokenRevokedError,
)

from .auth_common import utcnow


logger = logging.getLogger(__name__)


class SessionCredentials:
    def __init__(
        self,
        *,
        identity_store: IdentityStorePort,
        token_port: TokenPort,
        availability: StoreAvailabilityPort,
        timeout_seconds: float,
    ):
        self._identity_store = identity_store
        self._token_port = token_port
        self._availability = availability
        self._timeout_seconds = timeout_seconds

    def issue_session(self, identity: Identity, *, now: datetime | None = None) -> TokenPair:
        """Mint a token pair and persist its refresh token; nothing is returned if persisting fails."""
        tokens = self._token_port.issue(identity_id=identity.id, now=now or utcnow())
        self.store_refresh_token(identity.id, tokens.refresh_token)
        return tokens

    def store_refresh_token(self, identity_id: str, refresh_token: str) -> None:
        self._write_slot(identity_id, refresh_token)
        logger.info("session_credentials: refresh_token_stored identity_id=%s", identity_id)

    def verify_access(self, token: str) -> str:
        claims = self._token_port.decode_access_token(token=token)
        return claims.identity_id

    def verify_refresh(self, token: str) -> Identity:
        claims = self._token_port.decode_refresh_token(token=token)
        identity = self.load_identity(claims.identity_id)

        stored = identity.refresh_token
        if not stored or not hmac.compare_digest(stored.encode("utf-8"), token.encode("utf-8")):
            logger.info(
                "session_credentials: refresh_token_revoked identity_id=%s slot_empty=%s",
                identity.id,
                not stored,
            )
            raise TokenRevokedError("Refresh token has been revoked.")
        return identity

    def rotate_access(self, refresh_token: str, *, now: datetime | None = None) -> tuple[Identity, str, datetime]:
        """Mint a new access token; the refresh token and its slot are left unchanged."""
        identity = self.verify_refresh(refresh_token)
        access_token, expires_at = self._token_port.create_access_token(
            identity_id=identity.id,
            now=now or utcnow(),
        )
        return identity, access_token, expires_at

    def revoke(self, identity_id: str) -> None:
        self._write_slot(identity_id, None)
        logger.info("session_credentials: session_revoked identity_id=%s", identity_id)

    def load_identity(self, identity_id: str) -> Identity:
        identity = self._call_store(
            self._identity_store.find_by_id,
            identity_id=identity_id,
        )
        if identity is None:
            raise IdentityNotFoundError("Identity not found.")
        return identity

    def find_by_email(self, email: str) -> Identity | None:
        return self._call_store(self._identity_store.find_by_email, email=email)

    def create_identity(
        self,
        *,
        identity_id: str,
        name: str,
        email: str,
        password_hash: str,
        role: Role,
        created_at: datetime,
    ) -> Identity:
        return self._call_store(
            self._identity_store.create_identity,
            identity_id=identity_id,
            name=name,
            email=email,
            password_hash=password_hash,
            role=role,
            created_at=created_at,
        )

    def update_password_hash(self, identity_id: str, password_hash: str) -> None:
        self._call_store(
            self._identity_store.update_password_hash,
            identity_id=identity_id,
            password_hash=password_hash,
        )

    def _write_slot(self, identity_id: str, refresh_token: str | None) -> None:
        self._call_store(
            self._identity_store.update_refresh_token,
            identity_id=identity_id,
            refresh_token=refresh_token,
        )

    def _call_store(self, operation, **kwargs):
        if not self._availability.is_available():
            raise StoreUnavailableError("Identity store is currently unavailable.")
        try:
            return operation(timeout_seconds=self._timeout_seconds, **kwargs)
        except StoreUnavailableError:
            self._availability.report_outage()
            raise
