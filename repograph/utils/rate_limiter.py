"""Outbound request shaping: token bucket rate plus a concurrency cap."""

from __future__ import annotations

import asyncio
import time

from repograph.utils.logging import get_logger

logger = get_logger(__name__)


class TokenBucketRateLimiter:
    """In-process token bucket rate limiter.

    Paces requests from one process. GitHub's own hourly quota is enforced
    server side and surfaces as ``RateLimitError``.
    """

    def __init__(self, rate: float, capacity: int) -> None:
        if rate <= 0:
            raise ValueError("rate must be positive")
        self._rate = rate  # tokens per second
        self._capacity = capacity
        self._tokens = float(capacity)
        self._last_refill = time.monotonic()
        self._lock = asyncio.Lock()

    async def acquire(self) -> None:
        """Wait until a token is available, then consume it."""
        async with self._lock:
            self._refill()
            while self._tokens < 1.0:
                wait = (1.0 - self._tokens) / self._rate
                logger.debug("rate_limit_wait", wait=round(wait, 3))
                await asyncio.sleep(wait)
                self._refill()
            self._tokens -= 1.0

    def _refill(self) -> None:
        now = time.monotonic()
        elapsed = now - self._last_refill
        self._tokens = min(self._capacity, self._tokens + elapsed * self._rate)
        self._last_refill = now


class RequestThrottle:
    """Async context manager: at most ``max_concurrent`` requests in flight, paced by a token bucket.

    Usage::

        async with throttle:
            await client.get(...)
    """

    def __init__(self, rate: float, max_concurrent: int) -> None:
        self._bucket = TokenBucketRateLimiter(rate=rate, capacity=max(1, max_concurrent))
        self._semaphore = asyncio.Semaphore(max(1, max_concurrent))

    async def __aenter__(self) -> RequestThrottle:
        await self._semaphore.acquire()
        try:
            await self._bucket.acquire()
        except BaseException:
            self._semaphore.release()
            raise
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self._semaphore.release()
