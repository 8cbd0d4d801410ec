"""Tests for the sliding-window rate limiter."""

from api.rate_limit import SlidingWindowRateLimiter


class FakeClock:
    def __init__(self, now=1_000_000.0):
        self.now = now

    def __call__(self):
        return self.now


def test_limit_is_enforced_per_key():
    limiter = SlidingWindowRateLimiter(limit=2, clock=FakeClock())

    assert limiter.hit("a") is True
    assert limiter.hit("a") is True
    assert limiter.hit("a") is False
    assert limiter.remaining("a") == 0
    assert limiter.hit("b") is True


def test_window_slides():
    clock = FakeClock()
    limiter = SlidingWindowRateLimiter(limit=1, window_seconds=60, clock=clock)

    limiter.hit("a")
    clock.now += 30
    assert limiter.hit("a") is False

    clock.now += 31
    assert limiter.remaining("a") == 1
    assert limiter.hit("a") is True


def test_reset_time_follows_oldest_request():
    clock = FakeClock(now=0.0)
    limiter = SlidingWindowRateLimiter(limit=5, window_seconds=3600, clock=clock)

    limiter.hit("a")
    clock.now = 100.0
    limiter.hit("a")

    assert limiter.reset_time("a") == "1970-01-01T01:00:00+00:00"
    assert limiter.headers("a")["X-RateLimit-Remaining"] == "3"


def test_from_env(monkeypatch):
    monkeypatch.setenv("RATE_LIMIT_PER_HOUR", "7")
    assert SlidingWindowRateLimiter.from_env().limit == 7

    monkeypatch.delenv("RATE_LIMIT_PER_HOUR")
    assert SlidingWindowRateLimiter.from_env().limit == 120
