"""
Tests for in-memory rate limiter middleware.

Tests: RateLimiter class: sliding window, cleanup, rate_limit dependency.
"""
import time
from collections import deque
from types import SimpleNamespace

import pytest

from domain.errors import RateLimitError
from middleware.rate_limit import RateLimiter, rate_limit


class TestRateLimiter:
    """Tests for the RateLimiter class."""

    @pytest.mark.unit
    def test_allows_requests_under_limit(self):
        limiter = RateLimiter()
        for _ in range(5):
            assert limiter.check("testkey", max_requests=5, window_seconds=60) is True

    @pytest.mark.unit
    def test_blocks_requests_over_limit(self):
        limiter = RateLimiter()
        for _ in range(3):
            limiter.check("testkey", max_requests=3, window_seconds=60)
        assert limiter.check("testkey", max_requests=3, window_seconds=60) is False

    @pytest.mark.unit
    def test_different_keys_independent(self):
        limiter = RateLimiter()
        for _ in range(3):
            limiter.check("key1", max_requests=3, window_seconds=60)
        assert limiter.check("key1", max_requests=3, window_seconds=60) is False
        assert limiter.check("key2", max_requests=3, window_seconds=60) is True

    @pytest.mark.unit
    def test_window_expiry(self):
        limiter = RateLimiter()
        for _ in range(2):
            limiter.check("testkey", max_requests=2, window_seconds=1)
        assert limiter.check("testkey", max_requests=2, window_seconds=1) is False
        time.sleep(1.1)
        assert limiter.check("testkey", max_requests=2, window_seconds=1) is True

    @pytest.mark.unit
    def test_remaining_count(self):
        limiter = RateLimiter()
        assert limiter.remaining("testkey", max_requests=5, window_seconds=60) == 5
        limiter.check("testkey", max_requests=5, window_seconds=60)
        assert limiter.remaining("testkey", max_requests=5, window_seconds=60) == 4

    @pytest.mark.unit
    def test_remaining_at_zero(self):
        limiter = RateLimiter()
        for _ in range(6):
            limiter.check("testkey", max_requests=5, window_seconds=60)
        assert limiter.remaining("testkey", max_requests=5, window_seconds=60) == 0

    @pytest.mark.unit
    def test_cleanup_removes_old_entries(self):
        limiter = RateLimiter()
        old = time.monotonic() - 120
        limiter._hits["testkey"] = deque([old, old + 1, old + 2])
        assert len(limiter._cleanup("testkey", 60)) == 0

    @pytest.mark.unit
    def test_reset(self):
        limiter = RateLimiter()
        limiter.check("testkey", max_requests=1, window_seconds=60)
        limiter.reset()
        assert limiter.check("testkey", max_requests=1, window_seconds=60) is True


class TestRateLimitDependency:

    @pytest.mark.unit
    async def test_raises_with_headers(self):
        from middleware.rate_limit import limiter

        limiter.reset()
        check = rate_limit(max_requests=1, window_seconds=30)
        request = SimpleNamespace(client=SimpleNamespace(host="10.0.0.1"), url=SimpleNamespace(path="/auth/login"))

        await check(request)
        with pytest.raises(RateLimitError) as exc_info:
            await check(request)
        assert exc_info.value.status_code == 429
        assert exc_info.value.headers["Retry-After"] == "30"
        limiter.reset()
