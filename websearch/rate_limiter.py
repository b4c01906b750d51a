"""
Per-provider token-bucket rate limiting.

Each provider identity gets its own bucket, created full on first use and
kept for the lifetime of the limiter. Refill is computed lazily from the
time elapsed since the previous call, so no background timer is needed.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict

logger = logging.getLogger(__name__)

DEFAULT_MAX_TOKENS = 10.0
DEFAULT_REFILL_RATE = 10.0  # tokens per second


@dataclass
class TokenBucket:
    """Token reservoir for one provider."""

    tokens: float
    last_refill: float
    max_tokens: float = DEFAULT_MAX_TOKENS
    refill_rate: float = DEFAULT_REFILL_RATE

    def refill(self, now: float) -> None:
        elapsed = max(0.0, now - self.last_refill)
        self.tokens = min(self.max_tokens, self.tokens + elapsed * self.refill_rate)
        self.last_refill = now

    def consume(self, now: float) -> bool:
        self.refill(now)
        if self.tokens < 1:
            return False
        self.tokens -= 1
        return True


class RateLimiter:
    """
    Registry of token buckets keyed by provider identity.

    One instance is meant to be shared by every search issued in a
    process; ``reset()`` drops all buckets (used between tests).
    """

    def __init__(
        self,
        max_tokens: float = DEFAULT_MAX_TOKENS,
        refill_rate: float = DEFAULT_REFILL_RATE,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_tokens = max_tokens
        self.refill_rate = refill_rate
        self._clock = clock
        self._buckets: Dict[str, TokenBucket] = {}
        self._lock = threading.Lock()

    def try_consume(self, identity: str) -> bool:
        """Take one token for ``identity``; False if the bucket is empty."""
        with self._lock:
            now = self._clock()
            bucket = self._get_or_create(identity, now)
            allowed = bucket.consume(now)
        if not allowed:
            logger.debug("Rate limit reached for %s", identity)
        return allowed

    def get_bucket(self, identity: str) -> TokenBucket:
        with self._lock:
            return self._get_or_create(identity, self._clock())

    def reset(self) -> None:
        with self._lock:
            self._buckets.clear()

    def _get_or_create(self, identity: str, now: float) -> TokenBucket:
        bucket = self._buckets.get(identity)
        if bucket is None:
            bucket = TokenBucket(
                tokens=self.max_tokens,
                last_refill=now,
                max_tokens=self.max_tokens,
                refill_rate=self.refill_rate,
            )
            self._buckets[identity] = bucket
        return bucket
