"""Remediation descriptors, one per audit plugin.

A section tells the presentation layer how to show a plugin's findings and
what clicking them does: left click navigates, right click fixes one
finding, "fix all" fixes every finding shown.
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from tickersync.audit import ids
from tickersync.audit.base import BaseAuditPlugin
from tickersync.core.config import settings
from tickersync.models.audit import Finding, Severity
from tickersync.models.category import CategoryFamily
from tickersync.repositories.exchange import ExchangeRepository
from tickersync.services.alert_manager import AlertManager
from tickersync.services.canonical_ranker import CanonicalRanker
from tickersync.services.category_manager import CategoryManager
from tickersync.services.order_service import OrderService
from tickersync.services.pair_manager import PairManager
from tickersync.services.symbol_manager import SymbolManager
from tickersync.utils.formatting import format_section_header


logger = logging.getLogger(__name__)


SEVERITY_COLORS = {
    Severity.LOW: "darkgray",
    Severity.MEDIUM: "darkorange",
    Severity.HIGH: "darkred",
}


@dataclass
class RemediationPlan:
    """What fixing one finding would do."""
    finding: Finding
    remove: List[str]
    keep: Optional[str] = None
    scores: Dict[str, int] = field(default_factory=dict)

    @property
    def preview(self) -> str:
        removal = ", ".join(self.remove)
        if self.keep is None:
            return f"Remove: {removal}"
        return f"Keep: {self.keep} (score:{self.scores.get(self.keep, 0)}) | Remove: {removal}"

    def to_dict(self) -> dict:
        return {
            "target": self.finding.target,
            "keep": self.keep,
            "remove": self.remove,
            "preview": self.preview,
        }


class AuditSection(ABC):
    """Presentation and remediation contract for one plugin."""

    id: str = ""
    title: str = ""
    description: str = ""

    def __init__(self, plugin: BaseAuditPlugin):
        self.plugin = plugin
        self.limit = settings.audit_page_size

    def on_left_click(self, finding: Finding) -> Optional[str]:
        """tv ticker to open for a finding, if any."""
        return finding.target

    def plan(self, finding: Finding) -> Optional[RemediationPlan]:
        """Preview of a fix; None when the finding cannot be fixed."""
        return RemediationPlan(finding=finding, remove=[finding.target])

    @abstractmethod
    async def _apply(self, plan: RemediationPlan) -> int:
        """Carry out a plan; returns how many records were removed."""
        pass

    async def on_right_click(self, finding: Finding) -> bool:
        """Fix one finding. False when nothing was removed."""
        plan = self.plan(finding)
        if plan is None or not plan.remove:
            return False
        removed = await self._apply(plan)
        logger.info(f"{self.id}: {plan.preview} ({removed} removed)")
        return removed > 0

    async def on_fix_all(self, findings: List[Finding]) -> int:
        """Fix every finding; returns the total removed."""
        total = 0
        for finding in findings:
            plan = self.plan(finding)
            if plan is None or not plan.remove:
                continue
            total += await self._apply(plan)
        logger.info(f"{self.id}: fixed {len(findings)} findings, {total} removed")
        return total

    def header_formatter(self, findings: List[Finding]) -> str:
        return format_section_header(self.title, len(findings))

    def severity_color(self, finding: Finding) -> str:
        return SEVERITY_COLORS.get(finding.severity, SEVERITY_COLORS[Severity.LOW])


class AlertsSection(AuditSection):
    id = ids.ALERTS
    title = "Alerts"
    description = "Unwatched tickers without an alert bracket"

    def __init__(self, plugin: BaseAuditPlugin, pair_manager: PairManager, symbols: SymbolManager):
        super().__init__(plugin)
        self.pair_manager = pair_manager
        self.symbols = symbols

    def on_left_click(self, finding: Finding) -> Optional[str]:
        return self.symbols.investing_to_tv(finding.target)

    async def _apply(self, plan: RemediationPlan) -> int:
        for investing in plan.remove:
            self.pair_manager.stop_tracking_by_investing_ticker(investing)
        return len(plan.remove)


class IntegritySection(AuditSection):
    id = ids.INTEGRITY
    title = "Integrity"
    description = "Pairs that no tv ticker maps to"

    def __init__(self, plugin: BaseAuditPlugin, pair_manager: PairManager):
        super().__init__(plugin)
        self.pair_manager = pair_manager

    def on_left_click(self, finding: Finding) -> Optional[str]:
        # Unmapped by definition; nothing to open
        return None

    async def _apply(self, plan: RemediationPlan) -> int:
        for investing in plan.remove:
            self.pair_manager.stop_tracking_by_investing_ticker(investing)
        return len(plan.remove)


class DuplicatePairIdsSection(AuditSection):
    id = ids.DUPLICATE_PAIR_IDS
    title = "Duplicate PairIds"
    description = "Multiple investing tickers sharing the same pairId, causing ambiguous alert routing"

    def __init__(
        self,
        plugin: BaseAuditPlugin,
        pair_manager: PairManager,
        symbols: SymbolManager,
        ranker: CanonicalRanker
    ):
        super().__init__(plugin)
        self.pair_manager = pair_manager
        self.symbols = symbols
        self.ranker = ranker

    def on_left_click(self, finding: Finding) -> Optional[str]:
        plan = self.plan(finding)
        if plan is None or not self.symbols.has_tv_mapping(plan.keep):
            return None
        return self.symbols.investing_to_tv(plan.keep)

    def plan(self, finding: Finding) -> Optional[RemediationPlan]:
        data = finding.data or {}
        investing_tickers = data.get("investingTickers") or []
        pair_id = data.get("pairId")
        if len(investing_tickers) < 2 or not pair_id:
            return None
        ranked = self.ranker.rank_investing_tickers(investing_tickers, pair_id)
        return RemediationPlan(
            finding=finding,
            keep=ranked[0].ticker,
            remove=[s.ticker for s in ranked[1:]],
            scores={s.ticker: s.score for s in ranked},
        )

    async def _apply(self, plan: RemediationPlan) -> int:
        for investing in plan.remove:
            self.pair_manager.remove_investing_alias(investing)
        return len(plan.remove)


class TickerCollisionSection(AuditSection):
    id = ids.TICKER_COLLISION
    title = "Ticker Collisions"
    description = "Multiple tv tickers mapped onto one investing ticker"

    def __init__(self, plugin: BaseAuditPlugin, pair_manager: PairManager, ranker: CanonicalRanker):
        super().__init__(plugin)
        self.pair_manager = pair_manager
        self.ranker = ranker

    def on_left_click(self, finding: Finding) -> Optional[str]:
        plan = self.plan(finding)
        return plan.keep if plan else None

    def plan(self, finding: Finding) -> Optional[RemediationPlan]:
        tv_tickers = (finding.data or {}).get("tvTickers") or []
        if len(tv_tickers) < 2:
            return None
        ranked = self.ranker.rank_tv_tickers(tv_tickers)
        return RemediationPlan(
            finding=finding,
            keep=ranked[0].ticker,
            remove=[s.ticker for s in ranked[1:]],
            scores={s.ticker: s.score for s in ranked},
        )

    async def _apply(self, plan: RemediationPlan) -> int:
        for tv in plan.remove:
            self.pair_manager.remove_tv_alias(tv)
        return len(plan.remove)


class OrphanAlertsSection(AuditSection):
    id = ids.ORPHAN_ALERTS
    title = "Orphan Alerts"
    description = "Alerts whose pair is no longer tracked"

    def __init__(self, plugin: BaseAuditPlugin, alert_manager: AlertManager):
        super().__init__(plugin)
        self.alert_manager = alert_manager

    def on_left_click(self, finding: Finding) -> Optional[str]:
        return None

    def plan(self, finding: Finding) -> Optional[RemediationPlan]:
        pair_id = (finding.data or {}).get("pairId")
        if not pair_id:
            return None
        return RemediationPlan(finding=finding, remove=[pair_id])

    async def _apply(self, plan: RemediationPlan) -> int:
        removed = 0
        for pair_id in plan.remove:
            alerts = self.alert_manager.get_alerts_by_pair_id(pair_id)
            await self.alert_manager.delete_alerts(alerts)
            self.alert_manager.delete_alerts_by_pair_id(pair_id)
            removed += len(alerts)
        return removed


class OrphanExchangeSection(AuditSection):
    id = ids.ORPHAN_EXCHANGE
    title = "Orphan Exchange"
    description = "Exchange overrides for tickers no longer mapped"

    def __init__(self, plugin: BaseAuditPlugin, exchange_repo: ExchangeRepository):
        super().__init__(plugin)
        self.exchange_repo = exchange_repo

    async def _apply(self, plan: RemediationPlan) -> int:
        return sum(1 for tv in plan.remove if self.exchange_repo.delete(tv))


class OrphanFlagsSection(AuditSection):
    id = ids.ORPHAN_FLAGS
    title = "Orphan Flags"
    description = "Flagged tickers unknown to both ticker and pair repositories"

    def __init__(self, plugin: BaseAuditPlugin, categories: CategoryManager):
        super().__init__(plugin)
        self.categories = categories

    async def _apply(self, plan: RemediationPlan) -> int:
        return sum(1 for ticker in plan.remove if self.categories.evict(CategoryFamily.FLAG, ticker))


class OrphanSequencesSection(AuditSection):
    id = ids.ORPHAN_SEQUENCES
    title = "Orphan Sequences"
    description = "Sequence preferences for tickers no longer mapped"

    def __init__(self, plugin: BaseAuditPlugin, pair_manager: PairManager):
        super().__init__(plugin)
        self.pair_manager = pair_manager

    async def _apply(self, plan: RemediationPlan) -> int:
        for tv in plan.remove:
            self.pair_manager.stop_tracking_by_tv_ticker(tv)
        return len(plan.remove)


class StaleReviewSection(AuditSection):
    id = ids.STALE_REVIEW
    title = "Stale Review"
    description = "Unwatched tickers not opened within the review window"

    def __init__(self, plugin: BaseAuditPlugin, pair_manager: PairManager):
        super().__init__(plugin)
        self.pair_manager = pair_manager

    async def _apply(self, plan: RemediationPlan) -> int:
        for tv in plan.remove:
            self.pair_manager.stop_tracking_by_tv_ticker(tv)
        return len(plan.remove)


class TradeRiskSection(AuditSection):
    id = ids.TRADE_RISK
    title = "Trade Risk"
    description = "Live orders whose risk is off the approved ladder"

    def __init__(self, plugin: BaseAuditPlugin, order_service: OrderService):
        super().__init__(plugin)
        self.order_service = order_service

    def plan(self, finding: Finding) -> Optional[RemediationPlan]:
        order_id = (finding.data or {}).get("orderId")
        if not order_id:
            return None
        return RemediationPlan(finding=finding, remove=[order_id])

    async def _apply(self, plan: RemediationPlan) -> int:
        removed = 0
        for order_id in plan.remove:
            if await self.order_service.delete_order(order_id):
                removed += 1
        return removed
