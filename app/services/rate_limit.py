# app/services/rate_limit.py
from __future__ import annotations

import time
from uuid import uuid4
from typing import Optional, Tuple

from redis.asyncio import Redis

from app.core.config import settings

# Singleton Redis (lazy-init)
_redis: Optional[Redis] = None


def _get_redis() -> Redis:
    """Lazy Redis connection; only called while the limit is enabled."""
    if not settings.RATE_LIMIT_ENABLED:
        raise RuntimeError("Rate limit is disabled in current environment")
    global _redis
    if _redis is None:
        _redis = Redis.from_url(
            settings.REDIS_URL,
            encoding="utf-8",
            decode_responses=True,
        )
    return _redis


def _key_ip(ip: str) -> str:
    return f"rl:analyze:ip:{ip or 'unknown'}"


async def _prune(redis: Redis, key: str, now_s: float) -> None:
    """Drop attempts older than the sliding window."""
    await redis.zremrangebyscore(key, "-inf", now_s - settings.RATE_LIMIT_WINDOW_SEC)


async def _count(redis: Redis, key: str) -> int:
    return int(await redis.zcard(key))


async def _oldest_ts(redis: Redis, key: str) -> Optional[float]:
    data = await redis.zrange(key, 0, 0, withscores=True)
    if data:
        # [(member, score)], score is epoch seconds
        return float(data[0][1])
    return None


async def _hit(redis: Redis, key: str, now_s: float) -> None:
    # unique member so concurrent hits in the same instant all count
    member = f"{now_s:.6f}:{uuid4().hex[:8]}"
    await redis.zadd(key, {member: now_s})
    await redis.expire(key, settings.RATE_LIMIT_WINDOW_SEC)


async def check_limit_and_hit(ip: str) -> Tuple[bool, int]:
    """
    Check the per-IP window for /analyze and record the attempt when allowed.
    Returns (allowed, retry_after_seconds); retry_after is the time until the
    oldest attempt leaves the window (>= 1).
    """
    if not settings.RATE_LIMIT_ENABLED:
        return True, 0

    r = _get_redis()
    now_s = time.time()
    key = _key_ip(ip)

    await _prune(r, key, now_s)
    if await _count(r, key) >= settings.RATE_LIMIT_MAX_PER_IP:
        oldest = await _oldest_ts(r, key)
        retry_after = max(1, int(settings.RATE_LIMIT_WINDOW_SEC - (now_s - (oldest or now_s))))
        return False, retry_after

    await _hit(r, key, now_s)
    return True, 0


async def close_redis() -> None:
    global _redis
    if _redis is not None:
        await _redis.aclose()
        _redis = None
