from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone

from storefront.domain.entities.identity import Identity, Role
from storefront.domain.exceptions import EmailAlreadyExistsError, StoreUnavailableError
from storefront.infrastructure.security.token_service import JwtTokenService, SigningKeys


class FakeIdentityStore:
    def __init__(self):
        self.identities: dict[str, Identity] = {}
        self.refresh_writes: list[tuple[str, str | None]] = []
        self.down = False

    def _check(self) -> None:
        if self.down:
            raise StoreUnavailableError("store down")

    def find_by_id(self, *, identity_id: str, timeout_seconds: float | None = None) -> Identity | None:
        self._check()
        return self.identities.get(identity_id)

    def find_by_email(self, *, email: str, timeout_seconds: float | None = None) -> Identity | None:
        self._check()
        for identity in self.identities.values():
            if identity.email == email:
                return identity
        return None

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
        self._check()
        if self.find_by_email(email=email) is not None:
            raise EmailAlreadyExistsError("User already exists.")
        identity = Identity(
            id=identity_id,
            name=name,
            email=email,
            password_hash=password_hash,
            role=role,
            refresh_token=None,
            created_at=created_at,
            updated_at=created_at,
        )
        self.identities[identity.id] = identity
        return identity

    def update_refresh_token(
        self,
        *,
        identity_id: str,
        refresh_token: str | None,
        timeout_seconds: float | None = None,
    ) -> None:
        self._check()
        self.refresh_writes.append((identity_id, refresh_token))
        identity = self.identities[identity_id]
        self.identities[identity_id] = replace(identity, refresh_token=refresh_token)

    def update_password_hash(
        self,
        *,
        identity_id: str,
        password_hash: str,
        timeout_seconds: float | None = None,
    ) -> None:
        self._check()
        identity = self.identities[identity_id]
        self.identities[identity_id] = replace(identity, password_hash=password_hash)


class FakeAvailability:
    def __init__(self, available: bool = True):
        self.available = available
        self.outages = 0

    def is_available(self) -> bool:
        return self.available

    def report_outage(self) -> None:
        self.outages += 1
        self.available = False


class FakePasswordHasher:
    def __init__(self, *, upgrade_to: str | None = None):
        self._upgrade_to = upgrade_to

    def hash(self, plain_password: str) -> str:
        return f"hashed::{plain_password}"

    def verify_and_update(self, plain_password: str, password_hash: str) -> tuple[bool, str | None]:
        if password_hash == f"hashed::{plain_password}":
            return True, None
        if password_hash == f"legacy::{plain_password}":
            return True, self._upgrade_to
        return False, None


def make_token_service(*, access_ttl_minutes: int = 15, refresh_ttl_days: int = 7) -> JwtTokenService:
    return JwtTokenService(
        keys=SigningKeys(access_secret="access-secret-for-tests", refresh_secret="refresh-secret-for-tests"),
        access_ttl_minutes=access_ttl_minutes,
        refresh_ttl_days=refresh_ttl_days,
    )


def make_identity(
    identity_id: str = "user-1",
    *,
    email: str = "alice@example.com",
    role: Role = "customer",
    password_hash: str = "hashed::secret1",
) -> Identity:
    now = datetime.now(timezone.utc)
    return Identity(
        id=identity_id,
        name="Alice",
        email=email,
        password_hash=password_hash,
        role=role,
        refresh_token=None,
        created_at=now,
        updated_at=now,
    )
