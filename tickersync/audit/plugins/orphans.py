"""Orphan audits: dependent records whose owning ticker is gone."""
from typing import List, Optional

from tickersync.audit import ids
from tickersync.audit.base import BaseAuditPlugin
from tickersync.models.audit import Finding, Severity
from tickersync.models.category import CategoryFamily
from tickersync.repositories.alert import AlertRepository
from tickersync.repositories.exchange import ExchangeRepository
from tickersync.repositories.pair import PairRepository
from tickersync.repositories.sequence import SequenceRepository
from tickersync.repositories.ticker import TickerRepository
from tickersync.services.category_manager import CategoryManager
from tickersync.services.symbol_manager import SymbolManager


class OrphanAlertsPlugin(BaseAuditPlugin):
    """Alerts whose pairId has no Pair entry."""
    
    id = ids.ORPHAN_ALERTS
    title = "Orphan Alerts"
    
    def __init__(self, alert_repo: AlertRepository, pair_repo: PairRepository, batch_size: Optional[int] = None):
        super().__init__(batch_size)
        self.alert_repo = alert_repo
        self.pair_repo = pair_repo
    
    async def run(self, targets: Optional[List[str]] = None) -> List[Finding]:
        self.reject_targets(targets)
        valid_pair_ids = {pair.pair_id for pair in self.pair_repo.values()}
        results: List[Finding] = []
        
        async for pair_id in self.batched(self.alert_repo.keys()):
            if pair_id in valid_pair_ids:
                continue
            alerts = self.alert_repo.get(pair_id) or []
            alert_name = next((a.name for a in alerts if a.name), pair_id)
            results.append(self.finding(
                code="NO_PAIR_MAPPING",
                target=alert_name,
                message=f"{alert_name}: {len(alerts)} alert(s) exist but have no corresponding pair",
                severity=Severity.HIGH,
                data={"pairId": pair_id, "alertName": alert_name, "alertCount": len(alerts)},
            ))
        
        return results


class OrphanExchangePlugin(BaseAuditPlugin):
    """Exchange overrides for tv tickers absent from the ticker repository."""
    
    id = ids.ORPHAN_EXCHANGE
    title = "Exchange"
    
    def __init__(self, exchange_repo: ExchangeRepository, ticker_repo: TickerRepository, batch_size: Optional[int] = None):
        super().__init__(batch_size)
        self.exchange_repo = exchange_repo
        self.ticker_repo = ticker_repo
    
    async def run(self, targets: Optional[List[str]] = None) -> List[Finding]:
        self.reject_targets(targets)
        results: List[Finding] = []
        
        async for tv in self.batched(self.exchange_repo.keys()):
            if self.ticker_repo.has(tv) or SymbolManager.is_composite(tv):
                continue
            exchange_value = self.exchange_repo.get(tv)
            results.append(self.finding(
                code="ORPHAN_EXCHANGE",
                target=tv,
                message=f"{tv}: Exchange mapping ({exchange_value}) exists but ticker not in TickerRepo",
                severity=Severity.MEDIUM,
                data={"tvTicker": tv, "exchangeValue": exchange_value},
            ))
        
        return results


class OrphanFlagsPlugin(BaseAuditPlugin):
    """Flagged tickers known to neither the ticker nor the pair repository."""
    
    id = ids.ORPHAN_FLAGS
    title = "Orphan Flags"
    
    def __init__(
        self,
        categories: CategoryManager,
        ticker_repo: TickerRepository,
        pair_repo: PairRepository,
        batch_size: Optional[int] = None
    ):
        super().__init__(batch_size)
        self.categories = categories
        self.ticker_repo = ticker_repo
        self.pair_repo = pair_repo
    
    async def run(self, targets: Optional[List[str]] = None) -> List[Finding]:
        self.reject_targets(targets)
        flagged = [
            (tag, ticker)
            for tag, tickers in self.categories.lists(CategoryFamily.FLAG).items()
            for ticker in sorted(tickers)
        ]
        results: List[Finding] = []
        
        async for tag, ticker in self.batched(flagged):
            if self.ticker_repo.has(ticker) or self.pair_repo.has(ticker):
                continue
            if SymbolManager.is_composite(ticker):
                continue
            results.append(self.finding(
                code="ORPHAN_FLAG",
                target=ticker,
                message=f"{ticker}: Flag in category {int(tag)} but ticker not in TickerRepo or PairRepo",
                severity=Severity.LOW,
                data={"ticker": ticker, "categoryIndex": int(tag)},
            ))
        
        return results


class OrphanSequencesPlugin(BaseAuditPlugin):
    """Sequence preferences for tv tickers absent from the ticker repository."""
    
    id = ids.ORPHAN_SEQUENCES
    title = "Orphan Sequences"
    
    def __init__(self, sequence_repo: SequenceRepository, ticker_repo: TickerRepository, batch_size: Optional[int] = None):
        super().__init__(batch_size)
        self.sequence_repo = sequence_repo
        self.ticker_repo = ticker_repo
    
    async def run(self, targets: Optional[List[str]] = None) -> List[Finding]:
        self.reject_targets(targets)
        results: List[Finding] = []
        
        async for tv in self.batched(self.sequence_repo.keys()):
            if self.ticker_repo.has(tv) or SymbolManager.is_composite(tv):
                continue
            sequence = self.sequence_repo.get(tv)
            results.append(self.finding(
                code="ORPHAN_SEQUENCE",
                target=tv,
                message=f"{tv}: Sequence ({sequence.value}) exists but ticker not in TickerRepo",
                severity=Severity.MEDIUM,
                data={"ticker": tv, "sequence": sequence.value},
            ))
        
        return results
