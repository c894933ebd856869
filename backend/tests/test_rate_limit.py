"""
Tests for the in-memory rate limiter guarding mnemonic-taking endpoints.

Tests: RateLimiter sliding window, rate_limit() dependency.
"""
import os, sys
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

import time
from types import SimpleNamespace

import pytest
from domain.errors import RateLimitError
from middleware.rate_limit import RateLimiter, get_limiter, rate_limit


class TestRateLimiter:

    @pytest.mark.unit
    def test_allows_up_to_limit_then_blocks(self):
        limiter = RateLimiter()
        assert all(limiter.check("ip:/send", 3, 60) for _ in range(3))
        assert limiter.check("ip:/send", 3, 60) is False

    @pytest.mark.unit
    def test_keys_are_independent(self):
        """Each (IP, route) pair has its own window."""
        limiter = RateLimiter()
        for _ in range(2):
            limiter.check("1.1.1.1:/send", 2, 60)
        assert limiter.check("1.1.1.1:/send", 2, 60) is False
        assert limiter.check("2.2.2.2:/send", 2, 60) is True
        assert limiter.check("1.1.1.1:/derive-address", 2, 60) is True

    @pytest.mark.unit
    def test_expired_timestamps_free_the_window(self):
        limiter = RateLimiter()
        stale = time.time() - 120
        limiter._requests["k"] = [stale, stale + 1]
        assert limiter.remaining("k", 2, 60) == 2
        assert limiter.check("k", 2, 60) is True

    @pytest.mark.unit
    def test_remaining_never_negative(self):
        limiter = RateLimiter()
        for _ in range(4):
            limiter.check("k", 2, 60)
        assert limiter.remaining("k", 2, 60) == 0

    @pytest.mark.unit
    def test_reset_clears_all_keys(self):
        limiter = RateLimiter()
        limiter.check("k", 1, 60)
        limiter.reset()
        assert limiter.check("k", 1, 60) is True


class TestRateLimitDependency:

    @staticmethod
    def _request(ip="10.0.0.1", path="/send"):
        return SimpleNamespace(client=SimpleNamespace(host=ip), url=SimpleNamespace(path=path))

    @pytest.mark.unit
    async def test_raises_rate_limit_error_over_limit(self):
        check = rate_limit(max_requests=1, window_seconds=30)
        await check(self._request())
        with pytest.raises(RateLimitError) as exc_info:
            await check(self._request())
        assert exc_info.value.status_code == 429
        assert exc_info.value.details["retryAfter"] == 30

    @pytest.mark.unit
    async def test_uses_shared_limiter(self):
        check = rate_limit(max_requests=5, window_seconds=60)
        await check(self._request(ip="10.9.9.9"))
        assert get_limiter().remaining("10.9.9.9:/send", 5, 60) == 4
