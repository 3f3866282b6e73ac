"""Shared Redis connection for the rate limiter and the readiness probe.

Redis is optional: with an empty ``REDIS_URL`` nothing connects and
``redis_or_none()`` keeps returning None.
"""

from __future__ import annotations

import redis.asyncio as redis
import structlog

logger = structlog.get_logger()

_client: redis.Redis | None = None


async def connect_redis(url: str, *, max_connections: int = 20) -> redis.Redis | None:
    """Open the shared client, or do nothing when ``url`` is empty."""
    global _client  # noqa: PLW0603
    if not url:
        logger.info("redis_disabled")
        return None
    _client = redis.from_url(  # type: ignore[no-untyped-call]
        url,
        encoding="utf-8",
        decode_responses=True,
        max_connections=max_connections,
    )
    return _client


async def disconnect_redis() -> None:
    global _client  # noqa: PLW0603
    client, _client = _client, None
    if client is not None:
        await client.aclose()


def redis_or_none() -> redis.Redis | None:
    """The shared client, or None when Redis is disabled or not connected yet."""
    return _client
