"""Core package initialization."""
from tickersync.core.config import settings
from tickersync.core.redis import get_redis, close_redis

__all__ = ["settings", "get_redis", "close_redis"]
