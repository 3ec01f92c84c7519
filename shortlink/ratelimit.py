"""Fixed window request rate limiting.

Counters are keyed by client and window number. The in-memory limiter is
per process; the Redis limiter shares counters across worker processes.
"""

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

import redis.asyncio as redis
from redis.exceptions import RedisError


@dataclass
class RateLimitResult:
    allowed: bool
    limit: int
    remaining: int
    reset_after: int

    def headers(self) -> Dict[str, str]:
        """Build rate limit headers for a response."""
        headers = {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
            "X-RateLimit-Reset": str(self.reset_after),
        }
        if not self.allowed:
            headers["Retry-After"] = str(self.reset_after)
        return headers


class RateLimiter(ABC):
    """Allow at most ``max_requests`` per client in each ``window_seconds`` window.

    When either value is 0, rate limiting is disabled.
    """

    def __init__(
        self,
        max_requests: int,
        window_seconds: int,
        clock: Callable[[], float] = time.time,
        logger: Optional[logging.Logger] = None,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.clock = clock
        self.logger = logger or logging.getLogger(__name__)

    @property
    def is_enabled(self) -> bool:
        return self.max_requests > 0 and self.window_seconds > 0

    def _window(self) -> Tuple[int, int]:
        """Current window number and seconds until it ends."""
        now = self.clock()
        window = int(now // self.window_seconds)
        reset_after = max(1, int((window + 1) * self.window_seconds - now))
        return window, reset_after

    def _result(self, count: int, reset_after: int) -> RateLimitResult:
        allowed = count <= self.max_requests
        if not allowed:
            self.logger.info(
                f"Rate limit reached ({self.max_requests} in {self.window_seconds}s), "
                f"retry in {reset_after}s"
            )
        return RateLimitResult(
            allowed=allowed,
            limit=self.max_requests,
            remaining=max(0, self.max_requests - count),
            reset_after=reset_after,
        )

    @abstractmethod
    async def hit(self, client_id: str) -> RateLimitResult:
        """Count one request from ``client_id`` and report whether it is allowed."""

    async def close(self) -> None:
        pass


class InMemoryRateLimiter(RateLimiter):
    """Per-process fixed window counters."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._counters: Dict[str, Tuple[int, int]] = {}
        self._current_window: Optional[int] = None

    def _cleanup_old(self, current_window: int) -> None:
        stale = [k for k, (window, _) in self._counters.items() if window != current_window]
        for key in stale:
            del self._counters[key]

    async def hit(self, client_id: str) -> RateLimitResult:
        if not self.is_enabled:
            return RateLimitResult(True, self.max_requests, self.max_requests, 0)

        window, reset_after = self._window()
        if window != self._current_window:
            self._cleanup_old(window)
            self._current_window = window

        _, count = self._counters.get(client_id, (window, 0))
        count += 1
        self._counters[client_id] = (window, count)
        return self._result(count, reset_after)


class RedisRateLimiter(RateLimiter):
    """Fixed window counters shared through Redis (INCR + EXPIRE)."""

    KEY_PREFIX = "shortlink:ratelimit"

    def __init__(self, redis_url: str, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.redis_url = redis_url
        self.client: Optional[redis.Redis] = None

    async def connect(self) -> None:
        """Connect to Redis."""
        self.client = redis.from_url(
            self.redis_url,
            encoding="utf-8",
            decode_responses=True,
        )
        await self.client.ping()
        self.logger.info("Connected to Redis")

    def get_key(self, client_id: str, window: int) -> str:
        return f"{self.KEY_PREFIX}:{client_id}:{window}"

    async def hit(self, client_id: str) -> RateLimitResult:
        if not self.is_enabled:
            return RateLimitResult(True, self.max_requests, self.max_requests, 0)
        if self.client is None:
            raise RuntimeError("RedisRateLimiter.connect() must be awaited before use")

        window, reset_after = self._window()
        key = self.get_key(client_id, window)
        try:
            async with self.client.pipeline(transaction=True) as pipe:
                pipe.incr(key)
                pipe.expire(key, self.window_seconds)
                count, _ = await pipe.execute()
        except RedisError as e:
            # Fail open when the counters are unreachable
            self.logger.error(f"Rate limit counter error: {e}")
            return RateLimitResult(True, self.max_requests, self.max_requests, reset_after)
        return self._result(int(count), reset_after)

    async def close(self) -> None:
        """Close Redis connection."""
        if self.client:
            await self.client.aclose()
            self.logger.info("Redis connection closed")
