from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv


load_dotenv()

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _env(name: str, default: str | None = None) -> str | None:
    return os.getenv(name, default)


def _flag(name: str, default: str = "0") -> bool:
    return (_env(name, default) or "").strip().lower() in _TRUE_VALUES


def _csv(name: str, default: str) -> tuple[str, ...]:
    value = _env(name, default) or ""
    return tuple(item.strip() for item in value.split(",") if item.strip())


@dataclass(frozen=True)
class Settings:
    app_env: str
    database_url: str
    db_timeout_seconds: float
    db_connect_max_attempts: int
    db_connect_backoff_seconds: float
    db_connect_backoff_max_seconds: float
    db_recheck_interval_seconds: float
    access_token_secret: str
    refresh_token_secret: str
    dev_fallback_secret: str
    access_token_ttl_minutes: int
    refresh_token_ttl_days: int
    cookie_secure: bool
    cookie_samesite: str
    cookie_domain: str | None
    allow_query_token: bool
    expose_tokens_in_body: bool
    cors_allowed_origins: tuple[str, ...]
    log_level: str
    admin_name: str
    admin_email: str
    admin_password: str

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"


def get_settings() -> Settings:
    app_env = (_env("APP_ENV", "development") or "development").strip().lower()
    return Settings(
        app_env=app_env,
        database_url=_env("DATABASE_URL", "sqlite:///./storefront.db"),
        db_timeout_seconds=float(_env("DB_TIMEOUT_SECONDS", "5")),
        db_connect_max_attempts=int(_env("DB_CONNECT_MAX_ATTEMPTS", "5")),
        db_connect_backoff_seconds=float(_env("DB_CONNECT_BACKOFF_SECONDS", "0.5")),
        db_connect_backoff_max_seconds=float(_env("DB_CONNECT_BACKOFF_MAX_SECONDS", "8")),
        db_recheck_interval_seconds=float(_env("DB_RECHECK_INTERVAL_SECONDS", "10")),
        access_token_secret=(_env("ACCESS_TOKEN_SECRET", "") or "").strip(),
        refresh_token_secret=(_env("REFRESH_TOKEN_SECRET", "") or "").strip(),
        dev_fallback_secret=(_env("DEV_FALLBACK_SECRET", "") or "").strip(),
        access_token_ttl_minutes=int(_env("ACCESS_TOKEN_TTL_MINUTES", "15")),
        refresh_token_ttl_days=int(_env("REFRESH_TOKEN_TTL_DAYS", "7")),
        cookie_secure=app_env == "production" or _flag("COOKIE_SECURE"),
        cookie_samesite=(_env("COOKIE_SAMESITE", "none") or "none").strip().lower(),
        cookie_domain=(_env("COOKIE_DOMAIN", "") or "").strip() or None,
        allow_query_token=_flag("ALLOW_QUERY_TOKEN"),
        expose_tokens_in_body=_flag("EXPOSE_TOKENS_IN_BODY", "1"),
        cors_allowed_origins=_csv("CORS_ALLOWED_ORIGINS", "http://localhost:5173"),
        log_level=(_env("LOG_LEVEL", "INFO") or "INFO").strip().upper(),
        admin_name=(_env("ADMIN_NAME", "Admin") or "Admin").strip(),
        admin_email=(_env("ADMIN_EMAIL", "") or "").strip(),
        admin_password=_env("ADMIN_PASSWORD", "") or "",
    )
