from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Response

from storefront.api.cookies import (
    CookiePolicy,
    clear_token_cookies,
    set_access_cookie,
    set_refresh_cookie,
)
from storefront.api.deps import (
    get_cookie_policy,
    get_credential_carrier,
    get_current_identity,
    get_login_local_use_case,
    get_logout_session_use_case,
    get_refresh_locator,
    get_refresh_session_use_case,
    get_signup_use_case,
)
from storefront.api.errors import missing_token_exception, to_http_exception
from storefront.api.schemas.auth import (
    AuthTokenResponse,
    IdentityResponse,
    LoginRequest,
    LogoutResponse,
    ProfileResponse,
    RefreshResponse,
    SignupRequest,
)
from storefront.api.transport import CredentialCarrier, TokenLocator
from storefront.application.dto.auth import (
    AuthTokensOutput,
    LoginLocalInput,
    LogoutInput,
    RefreshSessionInput,
    SignupInput,
)
from storefront.application.use_cases.login_local import LoginLocalUseCase
from storefront.application.use_cases.logout_session import LogoutSessionUseCase
from storefront.application.use_cases.refresh_session import RefreshSessionUseCase
from storefront.application.use_cases.signup import SignupUseCase
from storefront.domain.entities.identity import PublicIdentity
from storefront.domain.exceptions import DomainError
from storefront.shared.config import Settings, get_settings


logger = logging.getLogger(__name__)

router = APIRouter()


def _identity_response(identity: PublicIdentity) -> IdentityResponse:
    return IdentityResponse(
        id=identity.id,
        name=identity.name,
        email=identity.email,
        role=identity.role,
        created_at=identity.created_at,
    )


def _session_response(
    output: AuthTokensOutput,
    response: Response,
    *,
    policy: CookiePolicy,
    settings: Settings,
) -> AuthTokenResponse:
    tokens = output.tokens
    set_access_cookie(response, policy=policy, token=tokens.access_token, expires_at=tokens.access_expires_at)
    set_refresh_cookie(response, policy=policy, token=tokens.refresh_token, expires_at=tokens.refresh_expires_at)

    expose = settings.expose_tokens_in_body
    return AuthTokenResponse(
        access_token=tokens.access_token if expose else None,
        refresh_token=tokens.refresh_token if expose else None,
        access_expires_at=tokens.access_expires_at,
        refresh_expires_at=tokens.refresh_expires_at,
        user=_identity_response(output.identity),
    )


@router.post("/auth/signup", response_model=AuthTokenResponse, status_code=201)
def signup(
    req: SignupRequest,
    response: Response,
    use_case: SignupUseCase = Depends(get_signup_use_case),
    policy: CookiePolicy = Depends(get_cookie_policy),
    settings: Settings = Depends(get_settings),
):
    try:
        output = use_case.execute(
            SignupInput(
                name=req.name,
                email=req.email,
                password=req.password,
            )
        )
    except DomainError as exc:
        raise to_http_exception(exc) from exc

    logger.info("auth: signup identity_id=%s", output.identity.id)
    return _session_response(output, response, policy=policy, settings=settings)


@router.post("/auth/login", response_model=AuthTokenResponse)
def login_local(
    req: LoginRequest,
    response: Response,
    use_case: LoginLocalUseCase = Depends(get_login_local_use_case),
    policy: CookiePolicy = Depends(get_cookie_policy),
    settings: Settings = Depends(get_settings),
):
    try:
        output = use_case.execute(LoginLocalInput(email=req.email, password=req.password))
    except DomainError as exc:
        raise to_http_exception(exc) from exc

    logger.info("auth: login identity_id=%s", output.identity.id)
    return _session_response(output, response, policy=policy, settings=settings)


@router.post("/auth/refresh-token", response_model=RefreshResponse)
def refresh_token(
    response: Response,
    carrier: CredentialCarrier = Depends(get_credential_carrier),
    locator: TokenLocator = Depends(get_refresh_locator),
    use_case: RefreshSessionUseCase = Depends(get_refresh_session_use_case),
    policy: CookiePolicy = Depends(get_cookie_policy),
    settings: Settings = Depends(get_settings),
):
    located = locator.locate(carrier)
    if located is None:
        raise missing_token_exception("refresh")

    try:
        output = use_case.execute(RefreshSessionInput(refresh_token=located.value))
    except DomainError as exc:
        logger.info("auth: refresh_denied channel=%s error=%s", located.channel, type(exc).__name__)
        raise to_http_exception(exc) from exc

    set_access_cookie(response, policy=policy, token=output.access_token, expires_at=output.access_expires_at)
    return RefreshResponse(
        access_token=output.access_token if settings.expose_tokens_in_body else None,
        access_expires_at=output.access_expires_at,
        user=_identity_response(output.identity),
    )


@router.post("/auth/logout", response_model=LogoutResponse)
def logout(
    response: Response,
    identity: PublicIdentity = Depends(get_current_identity),
    use_case: LogoutSessionUseCase = Depends(get_logout_session_use_case),
    policy: CookiePolicy = Depends(get_cookie_policy),
):
    try:
        use_case.execute(LogoutInput(identity_id=identity.id))
    except DomainError as exc:
        raise to_http_exception(exc) from exc

    clear_token_cookies(response, policy=policy)
    return LogoutResponse(ok=True)


@router.get("/auth/profile", response_model=ProfileResponse)
def profile(identity: PublicIdentity = Depends(get_current_identity)):
    return ProfileResponse(user=_identity_response(identity))
