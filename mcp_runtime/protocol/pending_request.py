"""
Pending Request - Single-resolution future for an outstanding request

Module: protocol.pending_request
Date: 2026-10-17
Version: 0.1.0

CHANGELOG:
[2026-10-17 v0.1.0] Initial implementation
  - PENDING -> FULFILLED | REJECTED | TIMED_OUT state machine
  - Blocking wait() bounded by a monotonic deadline
  - on_settle hook fired once, used to drop the pending table entry

ARCHITECTURE:
The calling thread creates a PendingRequest, inserts it into the
transport's pending table and blocks in wait(). The transport's I/O
thread resolves or rejects it when the matching response arrives.
Whichever transition happens first wins; later ones return False.
"""

import enum
import logging
import threading
import time
from typing import Any, Callable, Optional, Union

from ..core.errors import RequestTimeoutError

logger = logging.getLogger("protocol.pending_request")


class PendingState(enum.Enum):
    PENDING = "pending"
    FULFILLED = "fulfilled"
    REJECTED = "rejected"
    TIMED_OUT = "timed_out"


class PendingRequest:
    """
    Future correlated with one request id

    Attributes:
        request_id: Id of the request awaiting a reply
        timeout: Seconds allowed before the request times out
        deadline: Monotonic time at which the request times out
    """

    def __init__(
        self,
        request_id: Union[str, int],
        timeout: float,
        on_settle: Optional[Callable[["PendingRequest"], None]] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.request_id = request_id
        self.timeout = timeout
        self._clock = clock
        self.deadline = clock() + timeout
        self._on_settle = on_settle
        self._cond = threading.Condition()
        self._state = PendingState.PENDING
        self._value: Any = None
        self._error: Optional[BaseException] = None

    @property
    def state(self) -> PendingState:
        with self._cond:
            return self._state

    @property
    def done(self) -> bool:
        return self.state is not PendingState.PENDING

    def resolve(self, value: Any) -> bool:
        """
        Fulfill with a result

        Returns:
            bool: False if already settled (the call is a no-op)
        """
        return self._settle(PendingState.FULFILLED, value=value)

    def reject(self, error: BaseException) -> bool:
        """
        Reject with an exception raised later by wait()

        Returns:
            bool: False if already settled
        """
        return self._settle(PendingState.REJECTED, error=error)

    def expire(self) -> bool:
        """Mark as timed out"""
        return self._settle(
            PendingState.TIMED_OUT,
            error=RequestTimeoutError(
                f"Request {self.request_id} timed out after {self.timeout}s",
                data={"id": self.request_id},
            ),
        )

    def _settle(
        self,
        state: PendingState,
        value: Any = None,
        error: Optional[BaseException] = None,
    ) -> bool:
        with self._cond:
            if self._state is not PendingState.PENDING:
                return False
            self._state = state
            self._value = value
            self._error = error
            self._cond.notify_all()

        if state is PendingState.TIMED_OUT:
            logger.warning(f"Request timed out: {self.request_id}")
        if self._on_settle is not None:
            try:
                self._on_settle(self)
            except Exception as e:
                logger.error(f"on_settle hook failed for {self.request_id}: {e}")
        return True

    def wait(self, timeout: Optional[float] = None) -> Any:
        """
        Block until settled or the deadline elapses

        Args:
            timeout: Optional shorter bound in seconds

        Returns:
            The fulfilled value

        Raises:
            RequestTimeoutError: If the deadline elapsed first
            Exception: The rejection error
        """
        deadline = self.deadline
        if timeout is not None:
            deadline = min(deadline, self._clock() + timeout)

        with self._cond:
            while self._state is PendingState.PENDING:
                remaining = deadline - self._clock()
                if remaining <= 0:
                    break
                self._cond.wait(remaining)

        # Outside the lock: expire() fires on_settle
        self.expire()

        with self._cond:
            if self._state is PendingState.FULFILLED:
                return self._value
            raise self._error

    def __repr__(self) -> str:
        return f"PendingRequest(id={self.request_id}, state={self.state.value})"
