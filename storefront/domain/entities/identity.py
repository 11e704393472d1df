from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Literal


Role = Literal["customer", "admin"]


class SessionState(str, Enum):
    NONE = "none"
    ACTIVE = "active"


@dataclass(frozen=True)
class Identity:
    id: str
    name: str
    email: str
    password_hash: str
    role: Role
    refresh_token: str | None
    created_at: datetime
    updated_at: datetime

    @property
    def session_state(self) -> SessionState:
        return SessionState.ACTIVE if self.refresh_token else SessionState.NONE

    def public(self) -> PublicIdentity:
        return PublicIdentity(
            id=self.id,
            name=self.name,
            email=self.email,
            role=self.role,
            created_at=self.created_at,
        )


@dataclass(frozen=True)
class PublicIdentity:
    """Identity without secret fields; what route handlers receive."""

    id: str
    name: str
    email: str
    role: Role
    created_at: datetime
