"""Object graph wiring, built strictly bottom-up."""
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from tickersync.audit.plugins import (
    AlertsPlugin,
    DuplicatePairIdsPlugin,
    IntegrityPlugin,
    OrphanAlertsPlugin,
    OrphanExchangePlugin,
    OrphanFlagsPlugin,
    OrphanSequencesPlugin,
    StaleReviewPlugin,
    TickerCollisionPlugin,
    TradeRiskPlugin,
)
from tickersync.audit.registry import AuditRegistry
from tickersync.audit.runner import AuditRunner
from tickersync.audit import sections
from tickersync.audit.sections import AuditSection
from tickersync.models.category import CategoryFamily
from tickersync.providers import AlertPlatformClient, OrderPlatformClient
from tickersync.providers.investing import InvestingClient
from tickersync.providers.kite import KiteClient
from tickersync.repositories import (
    AlertRepository,
    BlobStore,
    CategoryRepository,
    ExchangeRepository,
    OrderRepository,
    PairRepository,
    RecentRepository,
    SequenceRepository,
    TickerRepository,
)
from tickersync.services import (
    AlertFeed,
    AlertManager,
    CanonicalRanker,
    CategoryManager,
    OrderService,
    PairManager,
    SymbolManager,
)


logger = logging.getLogger(__name__)


@dataclass
class Container:
    """Every long-lived component of the engine."""
    pair_repo: PairRepository
    ticker_repo: TickerRepository
    exchange_repo: ExchangeRepository
    sequence_repo: SequenceRepository
    recent_repo: RecentRepository
    alert_repo: AlertRepository
    order_repo: OrderRepository
    watch_repo: CategoryRepository
    flag_repo: CategoryRepository
    symbols: SymbolManager
    categories: CategoryManager
    alert_feed: AlertFeed
    alerts: AlertManager
    orders: OrderService
    pairs: PairManager
    ranker: CanonicalRanker
    registry: AuditRegistry
    runner: AuditRunner
    sections: Dict[str, AuditSection] = field(default_factory=dict)

    @property
    def repositories(self) -> List[BlobStore]:
        return [
            self.pair_repo,
            self.ticker_repo,
            self.exchange_repo,
            self.sequence_repo,
            self.recent_repo,
            self.alert_repo,
            self.order_repo,
            self.watch_repo,
            self.flag_repo,
        ]

    async def load(self):
        for repo in self.repositories:
            await repo.load()
        logger.info(f"Loaded {len(self.repositories)} repositories")

    async def save(self, force: bool = False) -> int:
        """Persist dirty repositories; returns how many were written."""
        written = 0
        for repo in self.repositories:
            if await repo.save(force=force):
                written += 1
        return written

    async def refresh(self) -> int:
        """Reload repositories another process wrote; returns how many were reloaded."""
        reloaded = 0
        for repo in self.repositories:
            if await repo.refresh():
                reloaded += 1
        if reloaded:
            logger.info(f"Reloaded {reloaded} repositories written elsewhere")
        return reloaded


def build_container(
    redis=None,
    alert_client: Optional[AlertPlatformClient] = None,
    order_client: Optional[OrderPlatformClient] = None
) -> Container:
    """
    Build the engine.

    Args:
        redis: Redis client shared by the repositories (defaults to the pool)
        alert_client: Alerting platform client (defaults to InvestingClient)
        order_client: Order platform client (defaults to KiteClient)
    """
    alert_client = alert_client or InvestingClient()
    order_client = order_client or KiteClient()

    # Repositories
    pair_repo = PairRepository(redis)
    ticker_repo = TickerRepository(redis)
    exchange_repo = ExchangeRepository(redis)
    sequence_repo = SequenceRepository(redis)
    recent_repo = RecentRepository(redis)
    alert_repo = AlertRepository(redis)
    order_repo = OrderRepository(redis)
    watch_repo = CategoryRepository(CategoryFamily.WATCH, redis)
    flag_repo = CategoryRepository(CategoryFamily.FLAG, redis)

    # Managers
    symbols = SymbolManager(ticker_repo, exchange_repo)
    categories = CategoryManager(watch_repo, flag_repo)
    alert_feed = AlertFeed()
    alerts = AlertManager(alert_repo, pair_repo, alert_client)
    orders = OrderService(order_repo, order_client)
    pairs = PairManager(
        pair_repo=pair_repo,
        ticker_repo=ticker_repo,
        exchange_repo=exchange_repo,
        sequence_repo=sequence_repo,
        recent_repo=recent_repo,
        symbols=symbols,
        categories=categories,
        alerts=alerts,
        alert_feed=alert_feed,
        search_client=alert_client,
    )
    ranker = CanonicalRanker(
        pair_repo=pair_repo,
        ticker_repo=ticker_repo,
        alert_repo=alert_repo,
        recent_repo=recent_repo,
        sequence_repo=sequence_repo,
        exchange_repo=exchange_repo,
        categories=categories,
    )

    # Plugins
    alerts_plugin = AlertsPlugin(pairs, alerts, categories, symbols)
    integrity_plugin = IntegrityPlugin(pair_repo, ticker_repo)
    duplicate_plugin = DuplicatePairIdsPlugin(pair_repo)
    collision_plugin = TickerCollisionPlugin(ticker_repo)
    orphan_alerts_plugin = OrphanAlertsPlugin(alert_repo, pair_repo)
    orphan_exchange_plugin = OrphanExchangePlugin(exchange_repo, ticker_repo)
    orphan_flags_plugin = OrphanFlagsPlugin(categories, ticker_repo, pair_repo)
    orphan_sequences_plugin = OrphanSequencesPlugin(sequence_repo, ticker_repo)
    trade_risk_plugin = TradeRiskPlugin(order_repo)
    stale_review_plugin = StaleReviewPlugin(recent_repo, ticker_repo, categories)

    registry = AuditRegistry()
    for plugin in (
        alerts_plugin,
        integrity_plugin,
        duplicate_plugin,
        collision_plugin,
        orphan_alerts_plugin,
        orphan_exchange_plugin,
        orphan_flags_plugin,
        orphan_sequences_plugin,
        trade_risk_plugin,
        stale_review_plugin,
    ):
        registry.register(plugin)
    runner = AuditRunner(registry)

    # Sections
    section_list = [
        sections.AlertsSection(alerts_plugin, pairs, symbols),
        sections.IntegritySection(integrity_plugin, pairs),
        sections.DuplicatePairIdsSection(duplicate_plugin, pairs, symbols, ranker),
        sections.TickerCollisionSection(collision_plugin, pairs, ranker),
        sections.OrphanAlertsSection(orphan_alerts_plugin, alerts),
        sections.OrphanExchangeSection(orphan_exchange_plugin, exchange_repo),
        sections.OrphanFlagsSection(orphan_flags_plugin, categories),
        sections.OrphanSequencesSection(orphan_sequences_plugin, pairs),
        sections.TradeRiskSection(trade_risk_plugin, orders),
        sections.StaleReviewSection(stale_review_plugin, pairs),
    ]

    return Container(
        pair_repo=pair_repo,
        ticker_repo=ticker_repo,
        exchange_repo=exchange_repo,
        sequence_repo=sequence_repo,
        recent_repo=recent_repo,
        alert_repo=alert_repo,
        order_repo=order_repo,
        watch_repo=watch_repo,
        flag_repo=flag_repo,
        symbols=symbols,
        categories=categories,
        alert_feed=alert_feed,
        alerts=alerts,
        orders=orders,
        pairs=pairs,
        ranker=ranker,
        registry=registry,
        runner=runner,
        sections={section.id: section for section in section_list},
    )


_container: Optional[Container] = None


async def get_container() -> Container:
    """Process-wide container, loaded from Redis on first use."""
    global _container
    if _container is None:
        container = build_container()
        await container.load()
        _container = container
    return _container


def reset_container():
    global _container
    _container = None


async def get_synced_container() -> Container:
    """Shared container with any store another process wrote reloaded first."""
    container = await get_container()
    await container.refresh()
    return container
