from __future__ import annotations

from datetime import datetime
from typing import Protocol

from storefront.application.dto.auth import TokenClaims, TokenPair


class TokenPort(Protocol):
    def issue(self, *, identity_id: str, now: datetime) -> TokenPair:
        ...

    def create_access_token(self, *, identity_id: str, now: datetime) -> tuple[str, datetime]:
        ...

    def decode_access_token(self, *, token: str) -> TokenClaims:
        ...

    def decode_refresh_token(self, *, token: str) -> TokenClaims:
        ...
