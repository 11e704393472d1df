from __future__ import annotations

from datetime import datetime
from typing import Protocol

from storefront.domain.entities.identity import Identity, Role


class IdentityStorePort(Protocol):
    def find_by_id(self, *, identity_id: str, timeout_seconds: float | None = None) -> Identity | None:
        ...

    def find_by_email(self, *, email: str, timeout_seconds: float | None = None) -> Identity | None:
        ...

    def create_identity(
        self,
        *,
        identity_id: str,
        name: str,
        email: str,
        password_hash: str,
        role: Role,
        created_at: datetime,
        timeout_seconds: float | None = None,
    ) -> Identity:
        ...

    def update_refresh_token(
        self,
        *,
        identity_id: str,
        refresh_token: str | None,
        timeout_seconds: float | None = None,
    ) -> None:
        ...

    def update_password_hash(
        self,
        *,
        identity_id: str,
        password_hash: str,
        timeout_seconds: float | None = None,
    ) -> None:
        ...


class StoreAvailabilityPort(Protocol):
    def is_available(self) -> bool:
        ...

    def report_outage(self) -> None:
        ...
