"""Redis connection pool backing the identity repositories."""
import asyncio
import redis.asyncio as redis
from tickersync.core.config import settings


# Global Redis connection pool
_redis_pool: redis.Redis | None = None
_redis_lock = asyncio.Lock()


async def get_redis() -> redis.Redis:
    """Get Redis connection from pool (lazy, lock-guarded initialization)."""
    global _redis_pool
    
    if _redis_pool is not None:
        return _redis_pool
    
    async with _redis_lock:
        # Double-check after acquiring lock
        if _redis_pool is None:
            _redis_pool = redis.from_url(
                settings.redis_url,
                encoding="utf-8",
                decode_responses=True,
                max_connections=10
            )
    return _redis_pool


async def close_redis():
    """Close Redis connection pool."""
    global _redis_pool
    async with _redis_lock:
        if _redis_pool:
            await _redis_pool.aclose()
            _redis_pool = None


def store_key(store: str) -> str:
    """Redis key holding the JSON blob of one repository."""
    return f"{settings.redis_key_prefix}:{store}"
