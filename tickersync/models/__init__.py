"""Models package initialization."""
from tickersync.models.pair import PairInfo, Alert
from tickersync.models.audit import Finding, Severity, Status
from tickersync.models.category import (
    CATEGORY_COUNT,
    DEFAULT_WATCH_TAG,
    CategoryFamily,
    CategoryLists,
    CategoryTag,
)
from tickersync.models.order import Order, OrderType
from tickersync.models.sequence import SequenceType

__all__ = [
    "PairInfo",
    "Alert",
    "Finding",
    "Severity",
    "Status",
    "CATEGORY_COUNT",
    "DEFAULT_WATCH_TAG",
    "CategoryFamily",
    "CategoryLists",
    "CategoryTag",
    "Order",
    "OrderType",
    "SequenceType",
]
