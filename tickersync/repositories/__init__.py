"""Identity repositories package initialization."""
from tickersync.repositories.base import BlobStore, MapRepository
from tickersync.repositories.pair import PairRepository
from tickersync.repositories.ticker import TickerRepository
from tickersync.repositories.exchange import ExchangeRepository
from tickersync.repositories.sequence import SequenceRepository
from tickersync.repositories.recent import RecentRepository
from tickersync.repositories.alert import AlertRepository
from tickersync.repositories.order import OrderRepository
from tickersync.repositories.category import CategoryRepository

__all__ = [
    "BlobStore",
    "MapRepository",
    "PairRepository",
    "TickerRepository",
    "ExchangeRepository",
    "SequenceRepository",
    "RecentRepository",
    "AlertRepository",
    "OrderRepository",
    "CategoryRepository",
]
