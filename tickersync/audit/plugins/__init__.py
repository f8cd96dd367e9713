"""Audit plugins package initialization."""
from tickersync.audit.plugins.alerts import AlertsPlugin
from tickersync.audit.plugins.integrity import (
    IntegrityPlugin,
    DuplicatePairIdsPlugin,
    TickerCollisionPlugin,
)
from tickersync.audit.plugins.orphans import (
    OrphanAlertsPlugin,
    OrphanExchangePlugin,
    OrphanFlagsPlugin,
    OrphanSequencesPlugin,
)
from tickersync.audit.plugins.review import StaleReviewPlugin, TradeRiskPlugin

__all__ = [
    "AlertsPlugin",
    "IntegrityPlugin",
    "DuplicatePairIdsPlugin",
    "TickerCollisionPlugin",
    "OrphanAlertsPlugin",
    "OrphanExchangePlugin",
    "OrphanFlagsPlugin",
    "OrphanSequencesPlugin",
    "StaleReviewPlugin",
    "TradeRiskPlugin",
]
