"""Review audits: stale tickers and trade risk multiples."""
from typing import Callable, List, Optional

from tickersync.audit import ids
from tickersync.audit.base import BaseAuditPlugin
from tickersync.core.config import settings
from tickersync.models.audit import Finding, Severity
from tickersync.models.order import Order, OrderType
from tickersync.repositories.order import OrderRepository
from tickersync.repositories.recent import RecentRepository
from tickersync.repositories.ticker import TickerRepository
from tickersync.services.category_manager import CategoryManager
from tickersync.utils.time import MILLIS_PER_DAY, days_since, now_millis


class StaleReviewPlugin(BaseAuditPlugin):
    """Unwatched tv tickers not opened within the review window."""
    
    id = ids.STALE_REVIEW
    title = "Stale Review"
    
    def __init__(
        self,
        recent_repo: RecentRepository,
        ticker_repo: TickerRepository,
        categories: CategoryManager,
        threshold_days: Optional[int] = None,
        clock: Callable[[], int] = now_millis,
        batch_size: Optional[int] = None
    ):
        super().__init__(batch_size)
        self.recent_repo = recent_repo
        self.ticker_repo = ticker_repo
        self.categories = categories
        self.threshold_days = threshold_days if threshold_days is not None else settings.stale_review_days
        self.clock = clock
    
    async def run(self, targets: Optional[List[str]] = None) -> List[Finding]:
        self.reject_targets(targets)
        now = self.clock()
        cutoff = now - self.threshold_days * MILLIS_PER_DAY
        results: List[Finding] = []
        
        async for tv in self.batched(self.ticker_repo.keys()):
            if self.categories.is_watched(tv):
                continue
            
            last_opened = self.recent_repo.get(tv) or 0
            if last_opened >= cutoff:
                continue
            
            if last_opened > 0:
                days_since_open = days_since(last_opened, now)
                message = f"{tv}: last opened {days_since_open} days ago"
                severity = Severity.MEDIUM
            else:
                days_since_open = -1
                message = f"{tv}: never opened"
                severity = Severity.HIGH
            
            results.append(self.finding(
                code="STALE_TICKER",
                target=tv,
                message=message,
                severity=severity,
                data={"tvTicker": tv, "lastOpened": last_opened, "daysSinceOpen": days_since_open},
            ))
        
        return results


class TradeRiskPlugin(BaseAuditPlugin):
    """
    Live GTT orders whose risk is off the approved ladder.
    
    For a two-leg (OCO) order prices[0] is the stop; the entry comes from
    the ticker's single-leg order. risk = |entry - stop| * qty must be
    within tolerance of the full or half risk limit.
    """
    
    id = ids.TRADE_RISK
    title = "Trade Risk Multiple"
    
    def __init__(
        self,
        order_repo: OrderRepository,
        risk_limit: Optional[float] = None,
        tolerance: Optional[float] = None,
        batch_size: Optional[int] = None
    ):
        super().__init__(batch_size)
        self.order_repo = order_repo
        self.risk_limit = risk_limit if risk_limit is not None else settings.risk_limit
        self.tolerance = tolerance if tolerance is not None else settings.risk_tolerance
    
    def is_valid_risk(self, risk: float) -> bool:
        half = self.risk_limit / 2
        return (
            abs(risk - self.risk_limit) / self.risk_limit <= self.tolerance
            or abs(risk - half) / half <= self.tolerance
        )
    
    async def run(self, targets: Optional[List[str]] = None) -> List[Finding]:
        self.reject_targets(targets)
        half = self.risk_limit / 2
        results: List[Finding] = []
        
        async for tv, orders in self.batched(self.order_repo.items()):
            entry_order = self._entry_order(orders)
            if entry_order is None:
                continue
            entry = entry_order.prices[0]
            
            for order in orders:
                if order.type != OrderType.TWO_LEG or len(order.prices) < 2:
                    continue
                stop = order.prices[0]
                risk = abs(entry - stop) * order.qty
                if self.is_valid_risk(risk):
                    continue
                results.append(self.finding(
                    code="INVALID_RISK_MULTIPLE",
                    target=tv,
                    message=f"{tv}: Risk ₹{risk:.0f} not a multiple of {half:g}/{self.risk_limit:g}",
                    severity=Severity.HIGH,
                    data={
                        "tvTicker": tv,
                        "orderId": order.id,
                        "entry": entry,
                        "stop": stop,
                        "quantity": order.qty,
                        "computedRisk": risk,
                        "expectedMultiples": [half, self.risk_limit],
                    },
                ))
        
        return results
    
    @staticmethod
    def _entry_order(orders: List[Order]) -> Optional[Order]:
        return next((o for o in orders if o.type == OrderType.SINGLE and o.prices), None)
