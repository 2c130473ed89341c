"""Tests for the token-bucket rate limiter."""

import pytest

from common.rate_limiter import ActionType, RateLimiter, RateLimitManager


class TestRateLimiter:
    def test_backoff_sets_cooldown(self):
        lim = RateLimiter(5, 5.0)
        assert lim.remaining_cooldown() == 0.0
        lim.backoff(10)
        assert 9.0 < lim.remaining_cooldown() <= 10.0

    def test_backoff_keeps_longest_cooldown(self):
        lim = RateLimiter(5, 5.0)
        lim.backoff(10)
        lim.backoff(1)
        assert lim.remaining_cooldown() > 9.0

    @pytest.mark.asyncio
    async def test_acquire_within_budget_does_not_wait(self):
        lim = RateLimiter(3, 60.0)
        for _ in range(3):
            await lim.acquire()
        assert lim.remaining_cooldown() == 0.0


class TestRateLimitManager:
    def test_limiters_are_per_channel(self):
        mgr = RateLimitManager()
        mgr.penalize(ActionType.BULK_DELETE, 30, key="c1")
        assert mgr.remaining(ActionType.BULK_DELETE, key="c1") > 29
        assert mgr.remaining(ActionType.BULK_DELETE, key="c2") == 0.0
        assert mgr.remaining(ActionType.DELETE_MESSAGE, key="c1") == 0.0

    def test_unconfigured_action_is_unlimited(self):
        mgr = RateLimitManager({ActionType.FETCH_MESSAGES: (1, 1.0)})
        mgr.penalize(ActionType.CREATE_MESSAGE, 30, key="c1")
        assert mgr.remaining(ActionType.CREATE_MESSAGE, key="c1") == 0.0

    @pytest.mark.asyncio
    async def test_acquire_unconfigured_action(self):
        mgr = RateLimitManager({ActionType.FETCH_MESSAGES: (1, 1.0)})
        await mgr.acquire(ActionType.CREATE_MESSAGE, key="c1")
