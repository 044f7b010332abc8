"""
Rate Limiter - Requests per minute and per identity

Module: server.rate_limiter
Date: 2026-10-17
Version: 0.1.0

CHANGELOG:
[2026-10-17 v0.1.0] Initial implementation
  - Epoch-minute buckets per identity
  - Lazy purge of an identity's stale buckets
  - Injectable clock for tests

ARCHITECTURE:
State is identity -> {epoch minute -> count}. A request is accepted while
the count of the current minute is below the limit. Old minutes of an
identity are dropped when that identity is seen again; identities that
stop sending keep their last bucket.
"""

import logging
import threading
import time
from typing import Callable, Dict

from ..core.constants import DEFAULT_RATE_LIMIT_PER_MINUTE

SECONDS_PER_BUCKET = 60


class RateLimiter:
    """
    Fixed-window rate limiter

    Attributes:
        limit: Accepted requests per identity and minute (<= 0: unlimited)
    """

    def __init__(
        self,
        limit: int = DEFAULT_RATE_LIMIT_PER_MINUTE,
        clock: Callable[[], float] = time.time,
    ):
        self.limit = limit
        self._clock = clock
        self._buckets: Dict[str, Dict[int, int]] = {}
        self._lock = threading.Lock()
        self.logger = logging.getLogger("server.rate_limiter")

    def allow(self, identity: str) -> bool:
        """
        Count one request for an identity

        Args:
            identity: Caller identity (e.g. remote address)

        Returns:
            bool: False when the identity exhausted the current minute
        """
        if self.limit <= 0:
            return True

        minute = int(self._clock()) // SECONDS_PER_BUCKET
        with self._lock:
            buckets = self._buckets.setdefault(identity, {})
            for stale in [m for m in buckets if m < minute]:
                del buckets[stale]

            count = buckets.get(minute, 0)
            if count >= self.limit:
                allowed = False
            else:
                buckets[minute] = count + 1
                allowed = True

        if not allowed:
            self.logger.warning(f"Rate limit exceeded for {identity}")
        return allowed

    def remaining(self, identity: str) -> int:
        if self.limit <= 0:
            return -1
        minute = int(self._clock()) // SECONDS_PER_BUCKET
        with self._lock:
            used = self._buckets.get(identity, {}).get(minute, 0)
        return max(self.limit - used, 0)

    def reset(self, identity: str = None) -> None:
        with self._lock:
            if identity is None:
                self._buckets.clear()
            else:
                self._buckets.pop(identity, None)
