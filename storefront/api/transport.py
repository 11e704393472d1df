"""Locate access/refresh tokens across the channels a request may carry them in.

Each channel is an extractor; a ``TokenLocator`` consults its extractors in
order and stops at the first one that yields a value.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Protocol

from fastapi import Request

from storefront.shared.config import Settings


logger = logging.getLogger(__name__)

ACCESS_COOKIE_NAME = "access_token"
REFRESH_COOKIE_NAME = "refresh_token"
ACCESS_HEADER_NAME = "X-Access-Token"
REFRESH_HEADER_NAME = "X-Refresh-Token"
ACCESS_FIELD_NAME = "access_token"
REFRESH_FIELD_NAME = "refresh_token"

_BODY_METHODS = {"POST", "PUT", "PATCH", "DELETE"}


@dataclass(frozen=True)
class CredentialCarrier:
    """Framework-neutral view of everything a request may carry a token in."""

    cookies: Mapping[str, str] = field(default_factory=dict)
    headers: Mapping[str, str] = field(default_factory=dict)
    query: Mapping[str, str] = field(default_factory=dict)
    body: Mapping[str, Any] = field(default_factory=dict)

    def header(self, name: str) -> str | None:
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return None


@dataclass(frozen=True)
class LocatedToken:
    value: str
    channel: str


class TokenExtractor(Protocol):
    channel: str

    def extract(self, carrier: CredentialCarrier) -> str | None:
        ...


def _clean(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


@dataclass(frozen=True)
class CookieExtractor:
    name: str
    channel: str = "cookie"

    def extract(self, carrier: CredentialCarrier) -> str | None:
        return _clean(carrier.cookies.get(self.name))


@dataclass(frozen=True)
class BearerHeaderExtractor:
    channel: str = "authorization"

    def extract(self, carrier: CredentialCarrier) -> str | None:
        authorization = carrier.header("Authorization")
        if not authorization:
            return None
        scheme, _, token = authorization.strip().partition(" ")
        if scheme.lower() != "bearer":
            return None
        return _clean(token)


@dataclass(frozen=True)
class HeaderExtractor:
    name: str
    channel: str = "header"

    def extract(self, carrier: CredentialCarrier) -> str | None:
        return _clean(carrier.header(self.name))


@dataclass(frozen=True)
class QueryParamExtractor:
    name: str
    channel: str = "query"

    def extract(self, carrier: CredentialCarrier) -> str | None:
        return _clean(carrier.query.get(self.name))


@dataclass(frozen=True)
class BodyFieldExtractor:
    name: str
    channel: str = "body"

    def extract(self, carrier: CredentialCarrier) -> str | None:
        return _clean(carrier.body.get(self.name))


class TokenLocator:
    def __init__(self, extractors: list[TokenExtractor]):
        self._extractors = tuple(extractors)

    @property
    def channels(self) -> tuple[str, ...]:
        return tuple(extractor.channel for extractor in self._extractors)

    def locate(self, carrier: CredentialCarrier) -> LocatedToken | None:
        for extractor in self._extractors:
            value = extractor.extract(carrier)
            if value:
                return LocatedToken(value=value, channel=extractor.channel)
        return None


def query_tokens_enabled(settings: Settings) -> bool:
    if not settings.allow_query_token:
        return False
    if settings.is_production:
        logger.warning("transport: query_token_ignored app_env=%s", settings.app_env)
        return False
    return True


def build_access_locator(settings: Settings) -> TokenLocator:
    extractors: list[TokenExtractor] = [
        CookieExtractor(ACCESS_COOKIE_NAME),
        BearerHeaderExtractor(),
        HeaderExtractor(ACCESS_HEADER_NAME),
    ]
    if query_tokens_enabled(settings):
        extractors.append(QueryParamExtractor(ACCESS_FIELD_NAME))
    extractors.append(BodyFieldExtractor(ACCESS_FIELD_NAME))
    return TokenLocator(extractors)


def build_refresh_locator(settings: Settings) -> TokenLocator:
    extractors: list[TokenExtractor] = [
        CookieExtractor(REFRESH_COOKIE_NAME),
        HeaderExtractor(REFRESH_HEADER_NAME),
    ]
    if query_tokens_enabled(settings):
        extractors.append(QueryParamExtractor(REFRESH_FIELD_NAME))
    extractors.append(BodyFieldExtractor(REFRESH_FIELD_NAME))
    return TokenLocator(extractors)


async def carrier_from_request(request: Request) -> CredentialCarrier:
    body: Mapping[str, Any] = {}
    content_type = request.headers.get("content-type", "")
    if request.method in _BODY_METHODS and content_type.startswith("application/json"):
        raw = await request.body()
        if raw:
            try:
                parsed = json.loads(raw)
            except ValueError:
                parsed = None
            if isinstance(parsed, dict):
                body = parsed

    return CredentialCarrier(
        cookies=dict(request.cookies),
        headers=dict(request.headers),
        query=dict(request.query_params),
        body=body,
    )
