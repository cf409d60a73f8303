"""
Authentication Rate Limiter

Counts failed login attempts per client key inside a sliding window and
blocks the key for a fixed period once the threshold is reached. One
instance is created per application and injected into the auth routes.
"""

import asyncio
import math
from collections import deque
from typing import Callable, Deque, Dict, Optional

from pydantic import BaseModel, ConfigDict

from src.domain.base import utcnow


class RateLimitConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    max_attempts: int = 5
    window_seconds: int = 900
    block_seconds: int = 3600


class AuthRateLimiter:
    def __init__(self, config: RateLimitConfig, clock: Callable = utcnow):
        self.config = config
        self._clock = clock
        self._failures: Dict[str, Deque[float]] = {}
        self._blocked_until: Dict[str, float] = {}
        self._lock = asyncio.Lock()

    def _now(self) -> float:
        return self._clock().timestamp()

    def _retry_after(self, key: str, now: float) -> Optional[int]:
        until = self._blocked_until.get(key)
        if until is None:
            return None
        if until <= now:
            del self._blocked_until[key]
            return None
        return max(1, math.ceil(until - now))

    async def check(self, key: str) -> Optional[int]:
        """Seconds until key may retry, or None when it is not blocked"""
        async with self._lock:
            return self._retry_after(key, self._now())

    async def record_failure(self, key: str) -> Optional[int]:
        """Count a failure; returns the block length when this one trips the limit"""
        async with self._lock:
            now = self._now()
            failures = self._failures.setdefault(key, deque())
            while failures and failures[0] <= now - self.config.window_seconds:
                failures.popleft()
            failures.append(now)
            if len(failures) < self.config.max_attempts:
                return None
            del self._failures[key]
            self._blocked_until[key] = now + self.config.block_seconds
            return self.config.block_seconds

    async def reset(self, key: str) -> None:
        async with self._lock:
            self._failures.pop(key, None)
            self._blocked_until.pop(key, None)
