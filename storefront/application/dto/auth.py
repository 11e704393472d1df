from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from storefront.domain.entities.identity import PublicIdentity


@dataclass(frozen=True)
class SignupInput:
    name: str
    email: str
    password: str


@dataclass(frozen=True)
class LoginLocalInput:
    email: str
    password: str


@dataclass(frozen=True)
class RefreshSessionInput:
    refresh_token: str


@dataclass(frozen=True)
class LogoutInput:
    identity_id: str


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str
    access_expires_at: datetime
    refresh_expires_at: datetime


@dataclass(frozen=True)
class AuthTokensOutput:
    identity: PublicIdentity
    tokens: TokenPair


@dataclass(frozen=True)
class RefreshSessionOutput:
    identity: PublicIdentity
    access_token: str
    access_expires_at: datetime


@dataclass(frozen=True)
class TokenClaims:
    identity_id: str
    token_type: str
    issued_at: datetime
    expires_at: datetime
