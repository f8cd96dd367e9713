"""API routes package initialization."""
from tickersync.api.routes import health, audit, tickers, categories

__all__ = ["health", "audit", "tickers", "categories"]
