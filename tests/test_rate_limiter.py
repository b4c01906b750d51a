"""
Tests for the per-provider token bucket.
"""

import threading

import pytest

from websearch.rate_limiter import RateLimiter, TokenBucket


class FakeClock:
    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class TestRateLimiter:
    """Test token-bucket accounting."""

    def setup_method(self):
        self.clock = FakeClock()
        self.limiter = RateLimiter(clock=self.clock)

    def test_new_bucket_starts_full(self):
        bucket = self.limiter.get_bucket("google")
        assert bucket.tokens == 10
        assert bucket.max_tokens == 10
        assert bucket.refill_rate == 10

    def test_burst_then_refused(self):
        for _ in range(10):
            assert self.limiter.try_consume("google") is True
        assert self.limiter.try_consume("google") is False

    def test_refused_call_does_not_consume(self):
        for _ in range(10):
            self.limiter.try_consume("google")
        assert self.limiter.try_consume("google") is False
        assert self.limiter.get_bucket("google").tokens == pytest.approx(0.0)

    def test_refill_allows_exactly_one_more(self):
        for _ in range(10):
            self.limiter.try_consume("google")
        self.clock.advance(1 / 10)
        assert self.limiter.try_consume("google") is True
        assert self.limiter.try_consume("google") is False

    def test_refill_caps_at_max(self):
        self.limiter.try_consume("brave")
        self.clock.advance(3600)
        self.limiter.try_consume("brave")
        assert self.limiter.get_bucket("brave").tokens == pytest.approx(9.0)

    def test_buckets_are_independent(self):
        for _ in range(10):
            self.limiter.try_consume("google")
        assert self.limiter.try_consume("google") is False
        assert self.limiter.try_consume("brave") is True

    def test_reset_drops_buckets(self):
        for _ in range(10):
            self.limiter.try_consume("xai")
        self.limiter.reset()
        assert self.limiter.try_consume("xai") is True

    def test_clock_going_backwards_does_not_drain(self):
        self.limiter.try_consume("google")
        self.clock.advance(-5)
        assert self.limiter.try_consume("google") is True
        assert 0 <= self.limiter.get_bucket("google").tokens <= 10

    def test_custom_capacity(self):
        limiter = RateLimiter(max_tokens=2, refill_rate=1, clock=self.clock)
        assert limiter.try_consume("google") is True
        assert limiter.try_consume("google") is True
        assert limiter.try_consume("google") is False
        self.clock.advance(1)
        assert limiter.try_consume("google") is True


class TestTokenBucket:
    def test_partial_refill_is_not_enough(self):
        bucket = TokenBucket(tokens=0.0, last_refill=0.0)
        assert bucket.consume(0.05) is False
        assert bucket.tokens == pytest.approx(0.5)
        assert bucket.consume(0.1) is True


class TestConcurrency:
    def test_parallel_consumers_never_overdraw(self):
        clock = FakeClock()
        limiter = RateLimiter(clock=clock)
        granted = []
        lock = threading.Lock()

        def worker():
            for _ in range(5):
                ok = limiter.try_consume("google")
                with lock:
                    granted.append(ok)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert granted.count(True) == 10
        assert len(granted) == 40
