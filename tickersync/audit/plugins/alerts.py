"""Alert coverage audit."""
from typing import List, Optional

from tickersync.audit import ids
from tickersync.audit.base import BaseAuditPlugin
from tickersync.models.audit import Finding, Severity
from tickersync.services.alert_manager import AlertManager
from tickersync.services.category_manager import CategoryManager
from tickersync.services.pair_manager import PairManager
from tickersync.services.symbol_manager import SymbolManager


NO_PAIR = "NO_PAIR"
NO_ALERTS = "NO_ALERTS"
SINGLE_ALERT = "SINGLE_ALERT"

SEVERITY = {
    NO_PAIR: Severity.HIGH,
    SINGLE_ALERT: Severity.HIGH,
    NO_ALERTS: Severity.MEDIUM,
}


class AlertsPlugin(BaseAuditPlugin):
    """Unwatched investing tickers need at least two alerts (a bracket)."""
    
    id = ids.ALERTS
    title = "Alerts Coverage"
    
    def __init__(
        self,
        pair_manager: PairManager,
        alert_manager: AlertManager,
        categories: CategoryManager,
        symbols: SymbolManager,
        batch_size: Optional[int] = None
    ):
        super().__init__(batch_size)
        self.pair_manager = pair_manager
        self.alert_manager = alert_manager
        self.categories = categories
        self.symbols = symbols
    
    async def run(self, targets: Optional[List[str]] = None) -> List[Finding]:
        investing_tickers = targets if targets else self.pair_manager.get_all_investing_tickers()
        results: List[Finding] = []
        
        async for investing in self.batched(investing_tickers):
            tv = self.symbols.investing_to_tv(investing)
            if self.categories.is_watched(tv):
                continue
            
            alerts = self.alert_manager.get_alerts_for_investing_ticker(investing)
            if alerts is None:
                code = NO_PAIR
            elif len(alerts) == 0:
                code = NO_ALERTS
            elif len(alerts) == 1:
                code = SINGLE_ALERT
            else:
                continue
            
            results.append(self.finding(
                code=code,
                target=investing,
                message=f"{investing}: {code}",
                severity=SEVERITY[code],
            ))
        
        return results
