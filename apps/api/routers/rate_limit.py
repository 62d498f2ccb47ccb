"""Per-client request quotas for the public view endpoints."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, Dict, Tuple

from fastapi import HTTPException, Request
import redis.asyncio as redis

from config import settings
from services.view_analytics import client_ip

logger = logging.getLogger(__name__)

_local_counters: Dict[str, Tuple[int, float]] = {}
_local_lock = asyncio.Lock()


def _client_identifier(request: Request) -> str:
    # The socket peer first: X-Forwarded-For is client-controlled.
    if request.client and request.client.host:
        return request.client.host
    return client_ip(request.headers, None)


async def _redis_hit(key: str, window_seconds: int) -> Tuple[int, int]:
    """Count one hit in redis. Returns (hits in window, seconds until reset)."""
    client = redis.from_url(settings.REDIS_URL, decode_responses=True)
    try:
        async with client.pipeline(transaction=True) as pipe:
            pipe.incr(key)
            pipe.ttl(key)
            hits, ttl = await pipe.execute()
        if ttl < 0:
            await client.expire(key, window_seconds)
            ttl = window_seconds
    finally:
        await client.aclose()
    return int(hits), max(int(ttl), 1)


async def _local_hit(key: str, window_seconds: int) -> Tuple[int, int]:
    now = time.monotonic()
    async with _local_lock:
        hits, reset_at = _local_counters.get(key, (0, now + window_seconds))
        if now >= reset_at:
            hits, reset_at = 0, now + window_seconds
        hits += 1
        _local_counters[key] = (hits, reset_at)
    return hits, max(int(reset_at - now), 1)


def rate_limit(scope: str, limit: int, window_seconds: int) -> Callable[[Request], object]:
    """Build a dependency allowing `limit` requests per client per window."""

    async def _dependency(request: Request) -> None:
        if getattr(request.app.state, "disable_rate_limits", False):
            return

        key = f"adspace:rate:{scope}:{_client_identifier(request)}"
        try:
            hits, retry_after = await _redis_hit(key, window_seconds)
        except Exception as exc:
            logger.debug("Redis quota unavailable, counting locally: %s", exc)
            hits, retry_after = await _local_hit(key, window_seconds)

        if hits > limit:
            logger.info("Rate limit hit for %s (%s requests)", key, hits)
            raise HTTPException(
                status_code=429,
                detail=f"Too many {scope} requests. Try again later.",
                headers={"Retry-After": str(retry_after)},
            )

    return _dependency
