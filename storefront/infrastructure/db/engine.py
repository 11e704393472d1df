from __future__ import annotations

from functools import lru_cache

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


@lru_cache(maxsize=4)
def get_engine(dsn: str, timeout_seconds: float = 5.0):
    url = make_url(dsn)
    kwargs: dict = {"future": True, "pool_pre_ping": True}
    if url.get_backend_name() == "postgresql":
        kwargs["pool_timeout"] = timeout_seconds
        kwargs["connect_args"] = {"connect_timeout": max(1, int(timeout_seconds))}
    elif url.get_backend_name() == "sqlite":
        kwargs["connect_args"] = {"timeout": timeout_seconds, "check_same_thread": False}
    return create_engine(url, **kwargs)


def create_schema(engine) -> None:
    from storefront.infrastructure.db.models import identity  # noqa: F401

    Base.metadata.create_all(engine)
