from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Mapping

from storefront.domain.entities.identity import Identity


def _as_str(value: Any) -> str:
    return str(value)


def _as_datetime(value: Any) -> datetime:
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def map_row_to_identity(row: Mapping[str, Any]) -> Identity:
    role = row.get("role") or "customer"
    return Identity(
        id=_as_str(row["id"]),
        name=row["name"],
        email=row["email"],
        password_hash=row["password_hash"],
        role="admin" if role == "admin" else "customer",
        refresh_token=row.get("refresh_token"),
        created_at=_as_datetime(row["created_at"]),
        updated_at=_as_datetime(row["updated_at"]),
    )
