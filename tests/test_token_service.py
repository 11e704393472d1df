from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta, timezone

import jwt
import pytest

from fakes import make_token_service
from storefront.domain.exceptions import SigningError, TokenExpiredError, TokenInvalidError
from storefront.infrastructure.security.token_service import (
    JwtTokenService,
    SigningKeys,
    resolve_signing_keys,
)
from storefront.shared.config import get_settings


def _settings(**overrides):
    base = replace(
        get_settings(),
        app_env="development",
        access_token_secret="",
        refresh_token_secret="",
        dev_fallback_secret="",
    )
    return replace(base, **overrides)


def test_access_token_round_trips_identity_id():
    service = make_token_service()
    tokens = service.issue(identity_id="user-1", now=datetime.now(timezone.utc))

    claims = service.decode_access_token(token=tokens.access_token)

    assert claims.identity_id == "user-1"
    assert claims.token_type == "access"
    assert tokens.access_expires_at < tokens.refresh_expires_at


def test_access_token_expires_after_ttl():
    service = make_token_service(access_ttl_minutes=15)
    issued_at = datetime.now(timezone.utc) - timedelta(hours=1)
    tokens = service.issue(identity_id="user-1", now=issued_at)

    with pytest.raises(TokenExpiredError):
        service.decode_access_token(token=tokens.access_token)

    # The refresh token of the same pair is still within its lifetime.
    assert service.decode_refresh_token(token=tokens.refresh_token).identity_id == "user-1"


def test_refresh_token_expires_after_ttl():
    service = make_token_service(refresh_ttl_days=7)
    tokens = service.issue(identity_id="user-1", now=datetime.now(timezone.utc) - timedelta(days=8))

    with pytest.raises(TokenExpiredError):
        service.decode_refresh_token(token=tokens.refresh_token)


def test_tokens_are_not_interchangeable_between_types():
    service = make_token_service()
    tokens = service.issue(identity_id="user-1", now=datetime.now(timezone.utc))

    with pytest.raises(TokenInvalidError):
        service.decode_access_token(token=tokens.refresh_token)
    with pytest.raises(TokenInvalidError):
        service.decode_refresh_token(token=tokens.access_token)


def test_token_signed_with_foreign_secret_is_invalid():
    service = make_token_service()
    now = datetime.now(timezone.utc)
    forged = jwt.encode(
        {"sub": "user-1", "type": "access", "iat": int(now.timestamp()), "exp": int(now.timestamp()) + 600},
        "some-other-secret",
        algorithm="HS256",
    )

    with pytest.raises(TokenInvalidError):
        service.decode_access_token(token=forged)


def test_garbage_token_is_invalid():
    service = make_token_service()

    with pytest.raises(TokenInvalidError):
        service.decode_access_token(token="not-a-jwt")


def test_token_without_expiry_is_invalid():
    service = make_token_service()
    now = datetime.now(timezone.utc)
    token = jwt.encode(
        {"sub": "user-1", "type": "access", "iat": int(now.timestamp())},
        "access-secret-for-tests",
        algorithm="HS256",
    )

    with pytest.raises(TokenInvalidError):
        service.decode_access_token(token=token)


def test_two_issues_produce_distinct_tokens():
    service = make_token_service()
    now = datetime.now(timezone.utc)

    first = service.issue(identity_id="user-1", now=now)
    second = service.issue(identity_id="user-1", now=now)

    assert first.refresh_token != second.refresh_token


def test_signing_keys_require_distinct_secrets():
    with pytest.raises(SigningError):
        SigningKeys(access_secret="same", refresh_secret="same")
    with pytest.raises(SigningError):
        SigningKeys(access_secret="", refresh_secret="refresh")


def test_resolve_signing_keys_uses_configured_secrets():
    keys = resolve_signing_keys(_settings(access_token_secret="a-secret", refresh_token_secret="r-secret"))

    assert keys.access_secret == "a-secret"
    assert keys.refresh_secret == "r-secret"
    assert keys.insecure is False


def test_resolve_signing_keys_refuses_missing_secrets_in_production():
    with pytest.raises(SigningError):
        resolve_signing_keys(_settings(app_env="production", dev_fallback_secret="fallback"))


def test_resolve_signing_keys_refuses_when_nothing_is_configured():
    with pytest.raises(SigningError):
        resolve_signing_keys(_settings())


def test_dev_fallback_derives_distinct_keys_and_is_flagged_insecure():
    keys = resolve_signing_keys(_settings(dev_fallback_secret="fallback"))

    assert keys.insecure is True
    assert keys.access_secret != keys.refresh_secret

    service = JwtTokenService(keys=keys, access_ttl_minutes=15, refresh_ttl_days=7)
    assert service.insecure is True
    tokens = service.issue(identity_id="user-1", now=datetime.now(timezone.utc))
    assert service.decode_access_token(token=tokens.access_token).identity_id == "user-1"
