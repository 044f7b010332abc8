"""
Unit Tests - RateLimiter

Module: tests.test_rate_limiter
Date: 2026-10-17
Version: 0.1.0

DESCRIPTION:
Fixed-window counting with an injected clock.
"""

import logging
import threading
import unittest

from mcp_runtime.server.rate_limiter import RateLimiter

logging.basicConfig(level=logging.WARNING)


class FakeClock:
    def __init__(self, now=1200.0):
        self.now = now

    def __call__(self):
        return self.now


class TestRateLimiter(unittest.TestCase):
    """Test suite for RateLimiter"""

    def setUp(self):
        self.clock = FakeClock()
        self.limiter = RateLimiter(2, clock=self.clock)

    def test_third_request_rejected(self):
        """Test limit per minute"""
        self.assertTrue(self.limiter.allow("X"))
        self.assertTrue(self.limiter.allow("X"))
        self.assertFalse(self.limiter.allow("X"))
        self.assertEqual(self.limiter.remaining("X"), 0)

    def test_identities_are_independent(self):
        """Test per identity buckets"""
        self.limiter.allow("X")
        self.limiter.allow("X")
        self.assertTrue(self.limiter.allow("Y"))
        self.assertEqual(self.limiter.remaining("Y"), 1)

    def test_next_minute_accepted(self):
        """Test window rollover"""
        self.limiter.allow("X")
        self.limiter.allow("X")
        self.clock.now += 59
        self.assertFalse(self.limiter.allow("X"))
        self.clock.now += 1
        self.assertTrue(self.limiter.allow("X"))

    def test_rejections_do_not_count(self):
        """Test a rejected request consumes nothing"""
        for _ in range(5):
            self.limiter.allow("X")
        self.clock.now += 60
        self.assertEqual(self.limiter.remaining("X"), 2)

    def test_unlimited(self):
        """Test limit 0 disables counting"""
        limiter = RateLimiter(0, clock=self.clock)
        for _ in range(100):
            self.assertTrue(limiter.allow("X"))
        self.assertEqual(limiter.remaining("X"), -1)

    def test_reset(self):
        """Test reset of one identity and of all"""
        self.limiter.allow("X")
        self.limiter.allow("X")
        self.limiter.allow("Y")
        self.limiter.reset("X")
        self.assertEqual(self.limiter.remaining("X"), 2)
        self.assertEqual(self.limiter.remaining("Y"), 1)
        self.limiter.reset()
        self.assertEqual(self.limiter.remaining("Y"), 2)

    def test_concurrent_allow(self):
        """Test no over-admission across threads"""
        limiter = RateLimiter(50, clock=self.clock)
        accepted = []
        lock = threading.Lock()

        def worker():
            for _ in range(20):
                if limiter.allow("shared"):
                    with lock:
                        accepted.append(1)

        threads = [threading.Thread(target=worker) for _ in range(5)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        self.assertEqual(len(accepted), 50)


if __name__ == "__main__":
    unittest.main(verbosity=2)
