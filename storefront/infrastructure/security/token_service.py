from __future__ import annotations

import hashlib
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt

from storefront.application.dto.auth import TokenClaims, TokenPair
from storefront.application.ports.token_port import TokenPort
from storefront.domain.exceptions import SigningError, TokenExpiredError, TokenInvalidError
from storefront.shared.config import Settings


logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


@dataclass(frozen=True)
class SigningKeys:
    access_secret: str
    refresh_secret: str
    insecure: bool = False

    def __post_init__(self):
        if not self.access_secret or not self.refresh_secret:
            raise SigningError("Both access and refresh signing secrets are required.")
        if self.access_secret == self.refresh_secret:
            raise SigningError("Access and refresh tokens must be signed with different secrets.")


def _derive_secret(fallback: str, token_type: str) -> str:
    return hashlib.sha256(f"{token_type}:{fallback}".encode("utf-8")).hexdigest()


def resolve_signing_keys(settings: Settings) -> SigningKeys:
    access_secret = settings.access_token_secret
    refresh_secret = settings.refresh_token_secret
    if access_secret and refresh_secret:
        return SigningKeys(access_secret=access_secret, refresh_secret=refresh_secret)

    if settings.is_production:
        raise SigningError("ACCESS_TOKEN_SECRET and REFRESH_TOKEN_SECRET are required in production.")
    if not settings.dev_fallback_secret:
        raise SigningError(
            "ACCESS_TOKEN_SECRET and REFRESH_TOKEN_SECRET are missing and no DEV_FALLBACK_SECRET is set."
        )

    logger.warning(
        "token_service: insecure_signing_mode app_env=%s missing_access=%s missing_refresh=%s",
        settings.app_env,
        not access_secret,
        not refresh_secret,
    )
    return SigningKeys(
        access_secret=access_secret or _derive_secret(settings.dev_fallback_secret, ACCESS_TOKEN_TYPE),
        refresh_secret=refresh_secret or _derive_secret(settings.dev_fallback_secret, REFRESH_TOKEN_TYPE),
        insecure=True,
    )


class JwtTokenService(TokenPort):
    def __init__(
        self,
        *,
        keys: SigningKeys,
        access_ttl_minutes: int,
        refresh_ttl_days: int,
    ):
        self._keys = keys
        self._access_ttl = timedelta(minutes=access_ttl_minutes)
        self._refresh_ttl = timedelta(days=refresh_ttl_days)

    @property
    def insecure(self) -> bool:
        return self._keys.insecure

    def issue(self, *, identity_id: str, now: datetime) -> TokenPair:
        access_token, access_expires_at = self.create_access_token(identity_id=identity_id, now=now)
        refresh_expires_at = now + self._refresh_ttl
        refresh_token = self._encode(
            identity_id=identity_id,
            token_type=REFRESH_TOKEN_TYPE,
            now=now,
            expires_at=refresh_expires_at,
            secret=self._keys.refresh_secret,
        )
        return TokenPair(
            access_token=access_token,
            refresh_token=refresh_token,
            access_expires_at=access_expires_at,
            refresh_expires_at=refresh_expires_at,
        )

    def create_access_token(self, *, identity_id: str, now: datetime) -> tuple[str, datetime]:
        expires_at = now + self._access_ttl
        token = self._encode(
            identity_id=identity_id,
            token_type=ACCESS_TOKEN_TYPE,
            now=now,
            expires_at=expires_at,
            secret=self._keys.access_secret,
        )
        return token, expires_at

    def decode_access_token(self, *, token: str) -> TokenClaims:
        return self._decode(token=token, token_type=ACCESS_TOKEN_TYPE, secret=self._keys.access_secret)

    def decode_refresh_token(self, *, token: str) -> TokenClaims:
        return self._decode(token=token, token_type=REFRESH_TOKEN_TYPE, secret=self._keys.refresh_secret)

    @staticmethod
    def _encode(
        *,
        identity_id: str,
        token_type: str,
        now: datetime,
        expires_at: datetime,
        secret: str,
    ) -> str:
        payload = {
            "sub": identity_id,
            "type": token_type,
            "iat": int(now.timestamp()),
            "exp": int(expires_at.timestamp()),
            "jti": secrets.token_hex(8),
        }
        return jwt.encode(payload, secret, algorithm=ALGORITHM)

    @staticmethod
    def _decode(*, token: str, token_type: str, secret: str) -> TokenClaims:
        try:
            payload = jwt.decode(
                token,
                secret,
                algorithms=[ALGORITHM],
                options={"require": ["sub", "iat", "exp"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise TokenExpiredError(f"The {token_type} token has expired.") from exc
        except jwt.PyJWTError as exc:
            raise TokenInvalidError(f"Invalid {token_type} token.") from exc

        if payload.get("type") != token_type:
            raise TokenInvalidError("Invalid token type.")

        identity_id = payload.get("sub")
        if not identity_id or not isinstance(identity_id, str):
            raise TokenInvalidError("Invalid token subject.")

        return TokenClaims(
            identity_id=identity_id,
            token_type=token_type,
            issued_at=datetime.fromtimestamp(int(payload["iat"]), tz=timezone.utc),
            expires_at=datetime.fromtimestamp(int(payload["exp"]), tz=timezone.utc),
        )
