"""
Unit Tests - PendingRequest

Module: tests.test_pending_request
Date: 2026-10-17
Version: 0.1.0

DESCRIPTION:
Single resolution, timeout and settle hook of the request future.
"""

import logging
import threading
import time
import unittest

from mcp_runtime.core.errors import RemoteError, RequestTimeoutError
from mcp_runtime.protocol.pending_request import PendingRequest, PendingState

logging.basicConfig(level=logging.WARNING)


class TestPendingRequest(unittest.TestCase):
    """Test suite for PendingRequest"""

    def test_resolve_before_wait(self):
        """Test value returned when already fulfilled"""
        pending = PendingRequest("r1", timeout=1.0)
        self.assertTrue(pending.resolve({"ok": True}))
        self.assertEqual(pending.wait(), {"ok": True})
        self.assertIs(pending.state, PendingState.FULFILLED)

    def test_resolve_from_other_thread(self):
        """Test waiter woken by another thread"""
        pending = PendingRequest("r1", timeout=5.0)
        threading.Timer(0.05, pending.resolve, args=("done",)).start()
        self.assertEqual(pending.wait(), "done")

    def test_reject_raises_error(self):
        """Test rejection error raised by wait()"""
        pending = PendingRequest("r1", timeout=1.0)
        pending.reject(RemoteError("boom", code=-32603))
        with self.assertRaises(RemoteError) as ctx:
            pending.wait()
        self.assertEqual(ctx.exception.code, -32603)
        self.assertIs(pending.state, PendingState.REJECTED)

    def test_settles_once(self):
        """Test later settle calls are no-ops"""
        pending = PendingRequest("r1", timeout=1.0)
        self.assertTrue(pending.resolve(1))
        self.assertFalse(pending.resolve(2))
        self.assertFalse(pending.reject(RuntimeError("late")))
        self.assertFalse(pending.expire())
        self.assertEqual(pending.wait(), 1)

    def test_timeout(self):
        """Test deadline elapses into TIMED_OUT exactly once"""
        settled = []
        pending = PendingRequest("r1", timeout=0.1, on_settle=settled.append)
        start = time.monotonic()
        with self.assertRaises(RequestTimeoutError):
            pending.wait()
        self.assertGreaterEqual(time.monotonic() - start, 0.09)
        self.assertIs(pending.state, PendingState.TIMED_OUT)
        self.assertEqual(settled, [pending])

        self.assertFalse(pending.resolve("late"))
        self.assertIs(pending.state, PendingState.TIMED_OUT)
        self.assertEqual(len(settled), 1)

    def test_wait_with_shorter_bound(self):
        """Test wait(timeout) shorter than the deadline"""
        pending = PendingRequest("r1", timeout=30.0)
        with self.assertRaises(RequestTimeoutError):
            pending.wait(timeout=0.05)

    def test_on_settle_error_is_contained(self):
        """Test a failing hook does not break settlement"""

        def hook(_):
            raise RuntimeError("hook failed")

        pending = PendingRequest("r1", timeout=1.0, on_settle=hook)
        self.assertTrue(pending.resolve("x"))
        self.assertEqual(pending.wait(), "x")


if __name__ == "__main__":
    unittest.main(verbosity=2)
