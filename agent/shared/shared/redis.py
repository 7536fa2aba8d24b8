"""Redis connection helper."""

from __future__ import annotations

import redis.asyncio as redis
import structlog

from shared.config import get_settings

logger = structlog.get_logger()

_redis_client: redis.Redis | None = None


async def get_redis() -> redis.Redis | None:
    """Get or create a Redis client.

    Returns None when Redis cannot be reached so callers can degrade to
    running without pub/sub.
    """
    global _redis_client
    if _redis_client is None:
        settings = get_settings()
        client = redis.from_url(
            settings.redis_url,
            encoding="utf-8",
            decode_responses=True,
        )
        try:
            await client.ping()
        except Exception as e:
            logger.warning("redis_unavailable", url=settings.redis_url, error=str(e))
            await client.aclose()
            return None
        _redis_client = client
    return _redis_client


async def close_redis() -> None:
    """Close the Redis connection."""
    global _redis_client
    if _redis_client is not None:
        await _redis_client.aclose()
        _redis_client = None
