"""Token bucket throttle for the Semantic Scholar API."""

from __future__ import annotations

import asyncio
import time
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from scholar_nav.config import Settings


class TokenBucketRateLimiter:
    """In-process token bucket shared by every S2 request of the app.

    Keyed requests get their own per-key rate; without a key all callers on
    the IP share the public pool, which is slower. After a 429 the whole
    bucket is paused so that concurrent unfolds back off together instead of
    each burning its own retry.
    """

    def __init__(self, rate: float, capacity: int) -> None:
        if rate <= 0:
            raise ValueError("rate must be positive")
        self._rate = rate  # tokens per second
        self._capacity = capacity
        self._tokens = float(capacity)
        self._last_refill = time.monotonic()
        self._blocked_until = 0.0
        self._lock = asyncio.Lock()

    @classmethod
    def for_semantic_scholar(cls, settings: Settings) -> TokenBucketRateLimiter:
        if settings.SEMANTIC_SCHOLAR_API_KEY:
            rate = settings.S2_REQUESTS_PER_SECOND
        else:
            rate = settings.S2_PUBLIC_REQUESTS_PER_SECOND
        return cls(rate=rate, capacity=settings.S2_BURST_CAPACITY)

    @property
    def rate(self) -> float:
        return self._rate

    @property
    def available(self) -> float:
        self._refill()
        return self._tokens

    def pause(self, seconds: float) -> None:
        """Hold every caller for ``seconds`` and drop any saved-up burst."""
        self._blocked_until = max(self._blocked_until, time.monotonic() + seconds)
        self._tokens = 0.0

    async def acquire(self) -> None:
        """Wait until the pause is over and a token is available, then consume it."""
        async with self._lock:
            wait = self._blocked_until - time.monotonic()
            if wait > 0:
                await asyncio.sleep(wait)
            self._refill()
            while self._tokens < 1.0:
                await asyncio.sleep((1.0 - self._tokens) / self._rate)
                self._refill()
            self._tokens -= 1.0

    def _refill(self) -> None:
        now = time.monotonic()
        elapsed = now - max(self._last_refill, min(self._blocked_until, now))
        if elapsed > 0:
            self._tokens = min(self._capacity, self._tokens + elapsed * self._rate)
        self._last_refill = now
