"""
Login Rate Limiting

Coarse brute-force guard in front of the per-account Login Attempt Guard.

Features:
- Rolling window per (client IP, submitted identifier) pair
- Rejected attempts are not recorded, so a blocked client is released
  as soon as the oldest attempt leaves the window
- Process-local store by default, Redis sorted-set store to share the
  window across instances

Configuration:
- LOGIN_RATE_LIMIT_MAX_ATTEMPTS: Maximum attempts per window (default 10)
- LOGIN_RATE_LIMIT_WINDOW_SECONDS: Window length in seconds (default 900)
- LOGIN_RATE_LIMIT_BACKEND: "memory" or "redis"
"""

import logging
import math
import time
import uuid
from typing import Callable, Protocol

from pydantic import BaseModel
from redis.asyncio import Redis

import config

logger = logging.getLogger(__name__)


class RateLimitDecision(BaseModel):
    allowed: bool
    retry_after_sec: int = 0
    remaining: int = 0


def login_rate_limit_key(client_ip: str, identifier: str) -> str:
    return f"{client_ip}:{(identifier or '').strip().lower()}"


class LoginRateLimiter(Protocol):
    async def is_allowed(self, key: str) -> RateLimitDecision: ...

    async def record(self, key: str) -> None: ...

    async def hit(self, key: str) -> RateLimitDecision: ...


class InMemoryLoginRateLimiter:
    """
    Process-local sliding window.

    State is lost on restart and not shared between instances.
    Every access sweeps expired timestamps from all keys and drops empty ones,
    so memory only grows with the number of clients active inside one window.

    Usage:
        limiter = InMemoryLoginRateLimiter()
        decision = await limiter.hit(login_rate_limit_key(ip, email))
        if not decision.allowed:
            # respond 429 with Retry-After: decision.retry_after_sec
            pass
    """

    def __init__(self,
                 max_attempts: int | None = None,
                 window_seconds: int | None = None,
                 clock: Callable[[], float] = time.time):
        self.max_attempts = max_attempts if max_attempts is not None else config.LOGIN_RATE_LIMIT_MAX_ATTEMPTS
        self.window_seconds = window_seconds if window_seconds is not None else config.LOGIN_RATE_LIMIT_WINDOW_SECONDS
        self.clock = clock
        self._attempts: dict[str, list[float]] = {}

    def _cleanup_expired(self, now: float) -> None:
        window_start = now - self.window_seconds
        for key in list(self._attempts):
            attempts = [ts for ts in self._attempts[key] if ts > window_start]
            if attempts:
                self._attempts[key] = attempts
            else:
                del self._attempts[key]

    def _prune(self, key: str, now: float) -> list[float]:
        self._cleanup_expired(now)
        return self._attempts.get(key, [])

    async def is_allowed(self, key: str) -> RateLimitDecision:
        now = self.clock()
        attempts = self._prune(key, now)
        if len(attempts) >= self.max_attempts:
            retry_after = max(1, math.ceil(self.window_seconds - (now - attempts[0])))
            return RateLimitDecision(allowed=False, retry_after_sec=retry_after, remaining=0)
        return RateLimitDecision(allowed=True, remaining=self.max_attempts - len(attempts))

    async def record(self, key: str) -> None:
        now = self.clock()
        self._prune(key, now)
        self._attempts.setdefault(key, []).append(now)

    async def hit(self, key: str) -> RateLimitDecision:
        decision = await self.is_allowed(key)
        if decision.allowed:
            await self.record(key)
            decision.remaining = max(0, decision.remaining - 1)
        else:
            logger.warning(f"[RateLimit] Login rate limit exceeded for {key}, retry in {decision.retry_after_sec}s")
        return decision

    def tracked_keys(self) -> int:
        return len(self._attempts)


class RedisLoginRateLimiter:
    """
    Redis-based sliding window (one sorted set per key, scored by timestamp).

    Works across multiple app instances. The key expires on its own after
    one window without attempts.
    """

    KEY_PREFIX = "rate_limit:login:"

    def __init__(self,
                 redis: Redis,
                 max_attempts: int | None = None,
                 window_seconds: int | None = None,
                 clock: Callable[[], float] = time.time):
        self.redis = redis
        self.max_attempts = max_attempts if max_attempts is not None else config.LOGIN_RATE_LIMIT_MAX_ATTEMPTS
        self.window_seconds = window_seconds if window_seconds is not None else config.LOGIN_RATE_LIMIT_WINDOW_SECONDS
        self.clock = clock

    def _redis_key(self, key: str) -> str:
        return f"{self.KEY_PREFIX}{key}"

    async def is_allowed(self, key: str) -> RateLimitDecision:
        now = self.clock()
        redis_key = self._redis_key(key)
        await self.redis.zremrangebyscore(redis_key, "-inf", now - self.window_seconds)
        count = await self.redis.zcard(redis_key)
        if count >= self.max_attempts:
            oldest = await self.redis.zrange(redis_key, 0, 0, withscores=True)
            oldest_ts = oldest[0][1] if oldest else now
            retry_after = max(1, math.ceil(self.window_seconds - (now - oldest_ts)))
            return RateLimitDecision(allowed=False, retry_after_sec=retry_after, remaining=0)
        return RateLimitDecision(allowed=True, remaining=self.max_attempts - count)

    async def record(self, key: str) -> None:
        now = self.clock()
        redis_key = self._redis_key(key)
        await self.redis.zadd(redis_key, {f"{now}:{uuid.uuid4().hex}": now})
        await self.redis.expire(redis_key, self.window_seconds)

    async def hit(self, key: str) -> RateLimitDecision:
        decision = await self.is_allowed(key)
        if decision.allowed:
            await self.record(key)
            decision.remaining = max(0, decision.remaining - 1)
        else:
            logger.warning(f"[RateLimit] Login rate limit exceeded for {key}, retry in {decision.retry_after_sec}s")
        return decision

    async def reset(self, key: str) -> None:
        await self.redis.delete(self._redis_key(key))
        logger.info(f"[RateLimit] Login rate limit reset for {key}")


def create_login_rate_limiter() -> InMemoryLoginRateLimiter | RedisLoginRateLimiter:
    if config.LOGIN_RATE_LIMIT_BACKEND == "redis":
        redis = Redis(host=config.REDIS_HOST, port=6379, password=config.REDIS_PASSWORD)
        logger.info(f"[RateLimit] Using Redis login rate limiter at {config.REDIS_HOST}")
        return RedisLoginRateLimiter(redis)
    logger.info("[RateLimit] Using in-memory login rate limiter")
    return InMemoryLoginRateLimiter()
