"""Services package initialization."""
from tickersync.services.symbol_manager import SymbolManager
from tickersync.services.category_manager import CategoryManager
from tickersync.services.alert_feed import AlertFeed, AlertFeedEvent
from tickersync.services.alert_manager import AlertManager
from tickersync.services.canonical_ranker import CanonicalRanker, TickerSignals
from tickersync.services.pair_manager import PairManager, GuardRailCheck, GuardRailPrompt
from tickersync.services.order_service import OrderService

__all__ = [
    "SymbolManager",
    "CategoryManager",
    "AlertFeed",
    "AlertFeedEvent",
    "AlertManager",
    "CanonicalRanker",
    "TickerSignals",
    "PairManager",
    "GuardRailCheck",
    "GuardRailPrompt",
    "OrderService",
]
