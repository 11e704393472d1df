from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class SignupRequest(BaseModel):
    name: str = Field(..., max_length=120)
    email: str = Field(..., max_length=255)
    password: str = Field(..., max_length=256)


class LoginRequest(BaseModel):
    email: str = Field(..., max_length=255)
    password: str = Field(..., max_length=256)


class IdentityResponse(BaseModel):
    id: str
    name: str
    email: str
    role: str
    created_at: datetime


class AuthTokenResponse(BaseModel):
    access_token: str | None = None
    refresh_token: str | None = None
    token_type: str = "bearer"
    access_expires_at: datetime
    refresh_expires_at: datetime
    user: IdentityResponse


class RefreshResponse(BaseModel):
    access_token: str | None = None
    token_type: str = "bearer"
    access_expires_at: datetime
    user: IdentityResponse


class LogoutResponse(BaseModel):
    ok: bool


class ProfileResponse(BaseModel):
    user: IdentityResponse


class HealthResponse(BaseModel):
    status: str
    store_available: bool
