"""
Retry Policy - Exponential backoff for client calls

Module: protocol.retry
Date: 2026-10-17
Version: 0.1.0

CHANGELOG:
[2026-10-17 v0.1.0] Initial implementation
  - RetryPolicy with capped exponential backoff
  - Retriable error classes and optional retry condition

ARCHITECTURE:
    delay(attempt) = min(retry_interval * retry_multiplier ** (attempt - 1),
                         max_retry_interval)

call() runs the operation once plus at most max_retries retries. Errors
outside retriable_errors, or refused by retry_condition, propagate at
once. The last error propagates when retries run out.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Tuple, Type

from ..core.errors import ConfigurationError, RemoteError, TransportError

logger = logging.getLogger("protocol.retry")


@dataclass
class RetryPolicy:
    """
    Retry configuration

    Attributes:
        max_retries: Retries after the first attempt
        retry_interval: Delay before the first retry (seconds)
        max_retry_interval: Upper bound for any delay (seconds)
        retry_multiplier: Growth factor between delays
        retriable_errors: Exception classes worth retrying
        retry_condition: Optional callable(error, attempt) -> bool
        sleep: Sleep function (injectable for tests)
    """
    max_retries: int = 3
    retry_interval: float = 1.0
    max_retry_interval: float = 30.0
    retry_multiplier: float = 2.0
    retriable_errors: Tuple[Type[BaseException], ...] = (TransportError,)
    retry_condition: Optional[Callable[[BaseException, int], bool]] = None
    sleep: Callable[[float], None] = field(default=time.sleep, repr=False)

    def __post_init__(self):
        if self.max_retries < 0:
            raise ConfigurationError("max_retries must be >= 0")
        if self.retry_interval < 0 or self.max_retry_interval < 0:
            raise ConfigurationError("Retry intervals must be >= 0")
        if self.retry_multiplier < 1:
            raise ConfigurationError("retry_multiplier must be >= 1")

    def delay(self, attempt: int) -> float:
        """Delay before retry number `attempt` (1-based)"""
        interval = self.retry_interval * (self.retry_multiplier ** (attempt - 1))
        return min(interval, self.max_retry_interval)

    def should_retry(self, error: BaseException, attempt: int) -> bool:
        if attempt > self.max_retries:
            return False
        # Error replies are never retried
        if isinstance(error, RemoteError) or not isinstance(error, self.retriable_errors):
            return False
        if self.retry_condition is not None:
            return bool(self.retry_condition(error, attempt))
        return True

    def call(self, operation: Callable[..., Any], *args, **kwargs) -> Any:
        """
        Run operation(*args, **kwargs) under this policy

        Returns:
            The operation's result

        Raises:
            The operation's last error when it is not retried
        """
        attempt = 0
        while True:
            try:
                return operation(*args, **kwargs)
            except Exception as e:
                attempt += 1
                if not self.should_retry(e, attempt):
                    raise
                delay = self.delay(attempt)
                logger.warning(
                    f"Attempt {attempt} failed ({type(e).__name__}: {e}), "
                    f"retrying in {delay:.2f}s"
                )
                self.sleep(delay)
