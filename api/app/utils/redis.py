"""
Redis Connection & Client Preference Store Dependency
"""
import redis.asyncio as redis
from fastapi import Header
from typing import Dict, Optional
import logging

from app.config import settings
from app.services.preferences import InMemoryPreferenceStore, PreferenceStore, RedisPreferenceStore

logger = logging.getLogger(__name__)

# Redis client instance
redis_client: Optional[redis.Redis] = None

# Used while Redis is unreachable so preferences still work within this process
_fallback_preferences: Dict[str, str] = {}


async def init_redis():
    """Initialize Redis connection"""
    global redis_client
    logger.info("Initializing Redis connection...")
    redis_client = redis.from_url(
        settings.REDIS_URL,
        encoding="utf-8",
        decode_responses=True,
        socket_connect_timeout=5,  # 5 second connection timeout
        socket_timeout=5,  # 5 second operation timeout
        retry_on_timeout=True,
    )
    # Test connection
    try:
        await redis_client.ping()
        logger.info("Redis connection established")
    except Exception as e:
        logger.warning(f"Redis connection failed: {e}. Preferences will be kept in memory.")


async def close_redis():
    """Close Redis connection"""
    global redis_client
    if redis_client:
        logger.info("Closing Redis connection...")
        await redis_client.close()
        logger.info("Redis connection closed")


async def get_redis() -> Optional[redis.Redis]:
    """
    Dependency that provides the Redis client, or None when it is unavailable
    Usage: cache: redis.Redis = Depends(get_redis)
    """
    if redis_client is None:
        logger.warning("Redis client not initialized")
        return None

    # Quick health check
    try:
        await redis_client.ping()
        return redis_client
    except Exception as e:
        logger.warning(f"Redis ping failed: {e}")
        return None


async def get_preference_store(
    x_client_id: str = Header("anonymous", alias="X-Client-Id"),
) -> PreferenceStore:
    """
    Dependency that provides the preference store scoped to the calling client
    Falls back to process memory if Redis is unavailable (graceful degradation)
    """
    client = await get_redis()
    if client is None:
        return InMemoryPreferenceStore(x_client_id, _fallback_preferences)
    return RedisPreferenceStore(client, x_client_id)
