from __future__ import annotations

import logging
from functools import lru_cache

from fastapi import Depends, Request

from storefront.api.cookies import CookiePolicy, build_cookie_policy
from storefront.api.errors import missing_token_exception, to_http_exception
from storefront.api.transport import (
    CredentialCarrier,
    TokenLocator,
    build_access_locator,
    build_refresh_locator,
    carrier_from_request,
)
from storefront.application.use_cases.get_profile import GetProfileUseCase
from storefront.application.use_cases.login_local import LoginLocalUseCase
from storefront.application.use_cases.logout_session import LogoutSessionUseCase
from storefront.application.use_cases.refresh_session import RefreshSessionUseCase
from storefront.application.use_cases.session_credentials import SessionCredentials
from storefront.application.use_cases.signup import SignupUseCase
from storefront.domain.entities.identity import PublicIdentity
from storefront.domain.exceptions import DomainError, PermissionDeniedError
from storefront.infrastructure.db.connection_manager import RetryPolicy, StoreConnectionManager
from storefront.infrastructure.db.engine import get_engine
from storefront.infrastructure.db.repositories.identity_repository import SqlIdentityRepository
from storefront.infrastructure.security.password_hasher import PasswordHasher
from storefront.infrastructure.security.token_service import JwtTokenService, resolve_signing_keys
from storefront.shared.config import get_settings


logger = logging.getLogger(__name__)


def _get_db_engine():
    settings = get_settings()
    return get_engine(settings.database_url, settings.db_timeout_seconds)


@lru_cache(maxsize=1)
def get_connection_manager() -> StoreConnectionManager:
    settings = get_settings()
    return StoreConnectionManager(
        engine=_get_db_engine(),
        retry_policy=RetryPolicy(
            max_attempts=settings.db_connect_max_attempts,
            base_delay_seconds=settings.db_connect_backoff_seconds,
            max_delay_seconds=settings.db_connect_backoff_max_seconds,
        ),
        recheck_interval_seconds=settings.db_recheck_interval_seconds,
    )


def _get_identity_repository() -> SqlIdentityRepository:
    return SqlIdentityRepository(_get_db_engine())


@lru_cache(maxsize=1)
def _get_password_hasher() -> PasswordHasher:
    return PasswordHasher()


@lru_cache(maxsize=1)
def get_token_service() -> JwtTokenService:
    settings = get_settings()
    return JwtTokenService(
        keys=resolve_signing_keys(settings),
        access_ttl_minutes=settings.access_token_ttl_minutes,
        refresh_ttl_days=settings.refresh_token_ttl_days,
    )


@lru_cache(maxsize=1)
def get_access_locator() -> TokenLocator:
    return build_access_locator(get_settings())


@lru_cache(maxsize=1)
def get_refresh_locator() -> TokenLocator:
    return build_refresh_locator(get_settings())


@lru_cache(maxsize=1)
def get_cookie_policy() -> CookiePolicy:
    return build_cookie_policy(get_settings())


def get_session_credentials() -> SessionCredentials:
    return SessionCredentials(
        identity_store=_get_identity_repository(),
        token_port=get_token_service(),
        availability=get_connection_manager(),
        timeout_seconds=get_settings().db_timeout_seconds,
    )


def get_signup_use_case(
    session_credentials: SessionCredentials = Depends(get_session_credentials),
) -> SignupUseCase:
    return SignupUseCase(
        password_hasher=_get_password_hasher(),
        session_credentials=session_credentials,
    )


def get_login_local_use_case(
    session_credentials: SessionCredentials = Depends(get_session_credentials),
) -> LoginLocalUseCase:
    return LoginLocalUseCase(
        password_hasher=_get_password_hasher(),
        session_credentials=session_credentials,
    )


def get_refresh_session_use_case(
    session_credentials: SessionCredentials = Depends(get_session_credentials),
) -> RefreshSessionUseCase:
    return RefreshSessionUseCase(session_credentials=session_credentials)


def get_logout_session_use_case(
    session_credentials: SessionCredentials = Depends(get_session_credentials),
) -> LogoutSessionUseCase:
    return LogoutSessionUseCase(session_credentials=session_credentials)


def get_profile_use_case(
    session_credentials: SessionCredentials = Depends(get_session_credentials),
) -> GetProfileUseCase:
    return GetProfileUseCase(session_credentials=session_credentials)


async def get_credential_carrier(request: Request) -> CredentialCarrier:
    return await carrier_from_request(request)


def get_current_identity(
    request: Request,
    carrier: CredentialCarrier = Depends(get_credential_carrier),
    locator: TokenLocator = Depends(get_access_locator),
    use_case: GetProfileUseCase = Depends(get_profile_use_case),
) -> PublicIdentity:
    located = locator.locate(carrier)
    if located is None:
        raise missing_token_exception("access")

    try:
        identity = use_case.execute(access_token=located.value)
    except DomainError as exc:
        logger.info(
            "deps: access_denied channel=%s path=%s error=%s",
            located.channel,
            request.url.path,
            type(exc).__name__,
        )
        raise to_http_exception(exc) from exc

    request.state.identity = identity
    return identity


def require_admin(identity: PublicIdentity = Depends(get_current_identity)) -> PublicIdentity:
    if identity.role != "admin":
        raise to_http_exception(PermissionDeniedError("Access denied - admin only."))
    return identity
