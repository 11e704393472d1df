from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Literal

from fastapi import Response

from storefront.api.transport import ACCESS_COOKIE_NAME, REFRESH_COOKIE_NAME
from storefront.shared.config import Settings


logger = logging.getLogger(__name__)

SameSite = Literal["lax", "strict", "none"]


@dataclass(frozen=True)
class CookiePolicy:
    secure: bool
    samesite: SameSite
    domain: str | None = None
    path: str = "/"


def build_cookie_policy(settings: Settings) -> CookiePolicy:
    samesite = settings.cookie_samesite if settings.cookie_samesite in {"lax", "strict", "none"} else "lax"
    secure = settings.is_production or settings.cookie_secure
    if samesite == "none" and not secure:
        # Browsers drop SameSite=None cookies that are not Secure.
        logger.warning("cookies: samesite_downgraded from=none to=lax app_env=%s", settings.app_env)
        samesite = "lax"
    return CookiePolicy(secure=secure, samesite=samesite, domain=settings.cookie_domain)


def _max_age_seconds(expires_at: datetime) -> int:
    now = datetime.now(timezone.utc)
    return max(int((expires_at - now).total_seconds()), 0)


def set_token_cookie(
    response: Response,
    *,
    policy: CookiePolicy,
    name: str,
    value: str,
    expires_at: datetime,
) -> None:
    response.set_cookie(
        key=name,
        value=value,
        max_age=_max_age_seconds(expires_at),
        path=policy.path,
        domain=policy.domain,
        secure=policy.secure,
        httponly=True,
        samesite=policy.samesite,
    )


def set_access_cookie(response: Response, *, policy: CookiePolicy, token: str, expires_at: datetime) -> None:
    set_token_cookie(response, policy=policy, name=ACCESS_COOKIE_NAME, value=token, expires_at=expires_at)


def set_refresh_cookie(response: Response, *, policy: CookiePolicy, token: str, expires_at: datetime) -> None:
    set_token_cookie(response, policy=policy, name=REFRESH_COOKIE_NAME, value=token, expires_at=expires_at)


def clear_token_cookies(response: Response, *, policy: CookiePolicy) -> None:
    for name in (ACCESS_COOKIE_NAME, REFRESH_COOKIE_NAME):
        response.delete_cookie(
            key=name,
            path=policy.path,
            domain=policy.domain,
            secure=policy.secure,
            httponly=True,
            samesite=policy.samesite,
        )
