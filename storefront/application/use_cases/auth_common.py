from __future__ import annotations

from datetime import datetime, timezone

from storefront.application.dto.auth import AuthTokensOutput, TokenPair
from storefront.domain.entities.identity import Identity


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def build_auth_tokens_output(identity: Identity, tokens: TokenPair) -> AuthTokensOutput:
    return AuthTokensOutput(identity=identity.public(), tokens=tokens)
