from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator

from sqlalchemy import insert, select, text, update
from sqlalchemy.engine import Connection
from sqlalchemy.exc import IntegrityError

from storefront.application.ports.identity_store_port import IdentityStorePort
from storefront.domain.entities.identity import Identity, Role
from storefront.domain.exceptions import EmailAlreadyExistsError
from storefront.infrastructure.db.errors import translate_store_errors
from storefront.infrastructure.db.mappers.identity_mapper import map_row_to_identity
from storefront.infrastructure.db.models.identity import IdentityModel


users = IdentityModel.__table__


class SqlIdentityRepository(IdentityStorePort):
    def __init__(self, engine):
        self._engine = engine

    def find_by_id(self, *, identity_id: str, timeout_seconds: float | None = None) -> Identity | None:
        stmt = select(users).where(users.c.id == identity_id).limit(1)
        with translate_store_errors("find_by_id"), self._begin(timeout_seconds) as conn:
            row = conn.execute(stmt).mappings().first()
        if row is None:
            return None
        return map_row_to_identity(row)

    def find_by_email(self, *, email: str, timeout_seconds: float | None = None) -> Identity | None:
        stmt = select(users).where(users.c.email == email.strip().lower()).limit(1)
        with translate_store_errors("find_by_email"), self._begin(timeout_seconds) as conn:
            row = conn.execute(stmt).mappings().first()
        if row is None:
            return None
        return map_row_to_identity(row)

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
        values = {
            "id": identity_id,
            "name": name,
            "email": email.strip().lower(),
            "password_hash": password_hash,
            "role": role,
            "refresh_token": None,
            "created_at": created_at,
            "updated_at": created_at,
        }
        try:
            with translate_store_errors("create_identity"), self._begin(timeout_seconds) as conn:
                conn.execute(insert(users).values(**values))
        except IntegrityError as exc:
            raise EmailAlreadyExistsError("User already exists.") from exc
        return map_row_to_identity(values)

    def update_refresh_token(
        self,
        *,
        identity_id: str,
        refresh_token: str | None,
        timeout_seconds: float | None = None,
    ) -> None:
        stmt = (
            update(users)
            .where(users.c.id == identity_id)
            .values(refresh_token=refresh_token, updated_at=datetime.now(timezone.utc))
        )
        with translate_store_errors("update_refresh_token"), self._begin(timeout_seconds) as conn:
            conn.execute(stmt)

    def update_password_hash(
        self,
        *,
        identity_id: str,
        password_hash: str,
        timeout_seconds: float | None = None,
    ) -> None:
        stmt = (
            update(users)
            .where(users.c.id == identity_id)
            .values(password_hash=password_hash, updated_at=datetime.now(timezone.utc))
        )
        with translate_store_errors("update_password_hash"), self._begin(timeout_seconds) as conn:
            conn.execute(stmt)

    @contextmanager
    def _begin(self, timeout_seconds: float | None) -> Iterator[Connection]:
        with self._engine.begin() as conn:
            if timeout_seconds and conn.dialect.name == "postgresql":
                conn.execute(text(f"SET LOCAL statement_timeout = {int(timeout_seconds * 1000)}"))
            yield conn
