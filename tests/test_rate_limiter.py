from __future__ import annotations

import pytest

from conftest import FakeClock
from core.rate_limiter import _RateLimiter, rate_limited


def _limiter(max_calls, period):
    clock = FakeClock(0.0)
    sleeps: list[float] = []

    def sleep(s):
        sleeps.append(s)
        clock.advance(s)

    return _RateLimiter(max_calls, period, clock=clock, sleep=sleep), clock, sleeps


def test_calls_within_budget_do_not_wait() -> None:
    limiter, _, sleeps = _limiter(3, 1.0)
    for _ in range(3):
        assert limiter.acquire() == 0.0
    assert sleeps == []


def test_call_over_budget_waits_for_oldest_slot() -> None:
    limiter, clock, sleeps = _limiter(2, 1.0)
    limiter.acquire()
    clock.advance(0.25)
    limiter.acquire()
    assert limiter.acquire() == pytest.approx(0.75)
    assert sleeps == [pytest.approx(0.75)]


def test_slots_free_up_after_period() -> None:
    limiter, clock, sleeps = _limiter(1, 1.0)
    limiter.acquire()
    clock.advance(1.0)
    assert limiter.acquire() == 0.0
    assert sleeps == []


def test_decorator_shares_one_budget() -> None:
    limit = rate_limited(max_calls=5, period=60)
    calls = []

    @limit
    def a():
        calls.append("a")

    @limit
    def b():
        calls.append("b")

    a(); b()
    assert calls == ["a", "b"]
    assert a.limiter is b.limiter is limit


def test_rejects_zero_budget() -> None:
    with pytest.raises(ValueError):
        rate_limited(max_calls=0)
