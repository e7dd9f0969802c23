"""
Redis client initialization and connection management.

The client is created by the application lifespan and stored on `app.state`;
this module only builds it and exposes it as a dependency.
"""

import logging

import redis.asyncio as redis
from fastapi import Request

from pixledger.app.core.config import Settings

logger = logging.getLogger(__name__)


def create_redis(settings: Settings) -> redis.Redis:
    """Build an async Redis client. No connection is opened until first use."""
    return redis.from_url(
        settings.redis_url,
        decode_responses=settings.redis_decode_responses,
    )


async def get_redis(request: Request):
    """
    Get the app-owned Redis client instance.

    Used as a FastAPI dependency.
    """
    return request.app.state.redis


async def ping_redis(client) -> bool:
    """
    Test Redis connection.

    Returns:
        True if connection successful, False otherwise
    """
    try:
        return await client.ping()
    except Exception as exc:
        logger.warning("Redis ping failed: %s", exc)
        return False
