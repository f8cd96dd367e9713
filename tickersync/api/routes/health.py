"""Health check endpoints."""
from fastapi import APIRouter, Depends
import logging

from tickersync.core.container import Container, get_synced_container
from tickersync.core.redis import get_redis

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/health")
async def health_check():
    """Basic health check endpoint."""
    return {"status": "healthy", "service": "tickersync-api"}


@router.get("/health/store")
async def check_store_health(container: Container = Depends(get_synced_container)):
    """
    Redis connectivity plus repository sizes.
    
    Example response:
    {
        "status": "healthy",
        "repositories": {"pairs": 120, "tickers": 131, ...},
        "dirty": ["recent"]
    }
    """
    try:
        redis = await get_redis()
        await redis.ping()
        logger.debug("✓ Redis ping successful")
        
        sizes = {
            "pairs": container.pair_repo.size(),
            "tickers": container.ticker_repo.size(),
            "exchanges": container.exchange_repo.size(),
            "sequences": container.sequence_repo.size(),
            "recent": container.recent_repo.size(),
            "alerts": container.alert_repo.size(),
            "orders": container.order_repo.size(),
        }
        dirty = [repo.store for repo in container.repositories if repo.dirty]
        
        return {"status": "healthy", "repositories": sizes, "dirty": dirty}
    except Exception as e:
        logger.error(f"Store health check failed: {e}", exc_info=True)
        return {
            "status": "unhealthy",
            "error": str(e),
            "error_type": type(e).__name__
        }
