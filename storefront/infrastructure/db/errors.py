"""Classification of SQLAlchemy/driver errors into store outages."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import exc as sa_exc

from storefront.domain.exceptions import StoreUnavailableError


logger = logging.getLogger(__name__)

_OUTAGE_TYPES = (
    sa_exc.OperationalError,
    sa_exc.InterfaceError,
    sa_exc.TimeoutError,
    sa_exc.DisconnectionError,
)

_OUTAGE_MESSAGE_MARKERS = (
    "timeout",
    "timed out",
    "could not connect",
    "connection refused",
    "server closed the connection",
    "connection reset",
    "canceling statement due to statement timeout",
    "server selection",
    "database is locked",
)


def is_store_outage(exc: BaseException) -> bool:
    if isinstance(exc, _OUTAGE_TYPES):
        return True
    if isinstance(exc, sa_exc.DBAPIError) and exc.connection_invalidated:
        return True
    if isinstance(exc, sa_exc.SQLAlchemyError):
        message = str(exc).lower()
        return any(marker in message for marker in _OUTAGE_MESSAGE_MARKERS)
    return False


@contextmanager
def translate_store_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except sa_exc.SQLAlchemyError as exc:
        if not is_store_outage(exc):
            raise
        logger.warning(
            "identity_store: outage operation=%s error=%s",
            operation,
            type(exc).__name__,
        )
        raise StoreUnavailableError(f"Identity store unavailable during {operation}.") from exc
