from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from threading import Lock
from typing import Callable, Iterator

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from storefront.application.ports.identity_store_port import StoreAvailabilityPort


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 5
    base_delay_seconds: float = 0.5
    max_delay_seconds: float = 8.0
    factor: float = 2.0

    def delays(self) -> Iterator[float]:
        """Yield the sleep before each retry; one fewer value than attempts."""
        delay = self.base_delay_seconds
        for _ in range(max(1, self.max_attempts) - 1):
            yield min(delay, self.max_delay_seconds)
            delay *= self.factor


class StoreConnectionManager(StoreAvailabilityPort):
    """Tracks whether the identity store is reachable.

    ``connect`` runs the bounded retry policy at startup. After an outage,
    ``is_available`` re-pings at most once per recheck interval so requests
    fail fast with 503 instead of each waiting on a dead store.
    """

    def __init__(
        self,
        *,
        engine,
        retry_policy: RetryPolicy,
        recheck_interval_seconds: float = 10.0,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._engine = engine
        self._retry_policy = retry_policy
        self._recheck_interval_seconds = recheck_interval_seconds
        self._sleep = sleep
        self._clock = clock
        self._lock = Lock()
        self._available = False
        self._last_check_at: float | None = None

    def connect(self) -> bool:
        delays = self._retry_policy.delays()
        attempts = max(1, self._retry_policy.max_attempts)
        for attempt in range(1, attempts + 1):
            if self._ping():
                logger.info("connection_manager: store_connected attempt=%s/%s", attempt, attempts)
                return True
            delay = next(delays, None)
            if delay is None:
                break
            logger.warning(
                "connection_manager: connect_retry attempt=%s/%s next_delay=%.2fs",
                attempt,
                attempts,
                delay,
            )
            self._sleep(delay)

        logger.error("connection_manager: store_unreachable attempts=%s", attempts)
        return False

    def is_available(self) -> bool:
        with self._lock:
            if self._available:
                return True
            last_check_at = self._last_check_at
        if last_check_at is not None and self._clock() - last_check_at < self._recheck_interval_seconds:
            return False
        return self._ping()

    def report_outage(self) -> None:
        with self._lock:
            if self._available:
                logger.warning("connection_manager: store_marked_unavailable")
            self._available = False
            self._last_check_at = self._clock()

    def _ping(self) -> bool:
        try:
            with self._engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            logger.warning("connection_manager: ping_failed error=%s", type(exc).__name__)
            ok = False
        else:
            ok = True
        with self._lock:
            self._available = ok
            self._last_check_at = self._clock()
        return ok
