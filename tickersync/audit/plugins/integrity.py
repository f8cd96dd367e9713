"""Mapping integrity audits: unmapped pairs, duplicate pairIds, tv collisions."""
from typing import List, Optional

from tickersync.audit import ids
from tickersync.audit.base import BaseAuditPlugin
from tickersync.models.audit import Finding, Severity
from tickersync.repositories.pair import PairRepository
from tickersync.repositories.ticker import TickerRepository


class IntegrityPlugin(BaseAuditPlugin):
    """Pairs no tv ticker maps to (unreachable from the chart)."""
    
    id = ids.INTEGRITY
    title = "Integrity"
    
    def __init__(self, pair_repo: PairRepository, ticker_repo: TickerRepository, batch_size: Optional[int] = None):
        super().__init__(batch_size)
        self.pair_repo = pair_repo
        self.ticker_repo = ticker_repo
    
    async def run(self, targets: Optional[List[str]] = None) -> List[Finding]:
        self.reject_targets(targets)
        results: List[Finding] = []
        
        # One finding per pairId even when it has several aliases
        async for pair_id, aliases in self.batched(self.pair_repo.group_by_pair_id().items()):
            if any(self.ticker_repo.get_tv_ticker(alias) for alias in aliases):
                continue
            investing = aliases[0]
            results.append(self.finding(
                code="NO_TV_MAPPING",
                target=investing,
                message=f"{investing}: Pair exists but has no TradingView mapping",
                severity=Severity.HIGH,
                data={"investingTicker": investing, "pairId": pair_id},
            ))
        
        return results


class DuplicatePairIdsPlugin(BaseAuditPlugin):
    """Several investing tickers sharing one pairId."""
    
    id = ids.DUPLICATE_PAIR_IDS
    title = "Duplicate PairIds"
    
    def __init__(self, pair_repo: PairRepository, batch_size: Optional[int] = None):
        super().__init__(batch_size)
        self.pair_repo = pair_repo
    
    async def run(self, targets: Optional[List[str]] = None) -> List[Finding]:
        self.reject_targets(targets)
        results: List[Finding] = []
        
        async for pair_id, aliases in self.batched(self.pair_repo.group_by_pair_id().items()):
            if len(aliases) < 2:
                continue
            pair_name = self.pair_repo.get(aliases[0]).name or pair_id
            results.append(self.finding(
                code="DUPLICATE_PAIR_ID",
                target=pair_name,
                message=f"{pair_name} ({pair_id}): shared by {', '.join(aliases)}",
                severity=Severity.MEDIUM,
                data={"pairId": pair_id, "investingTickers": aliases, "pairName": pair_name},
            ))
        
        return results


class TickerCollisionPlugin(BaseAuditPlugin):
    """Several tv tickers mapped onto one investing ticker."""
    
    id = ids.TICKER_COLLISION
    title = "Ticker Reverse Map Collisions"
    
    def __init__(self, ticker_repo: TickerRepository, batch_size: Optional[int] = None):
        super().__init__(batch_size)
        self.ticker_repo = ticker_repo
    
    async def run(self, targets: Optional[List[str]] = None) -> List[Finding]:
        self.reject_targets(targets)
        results: List[Finding] = []
        
        async for investing, tv_tickers in self.batched(self.ticker_repo.group_by_investing().items()):
            if len(tv_tickers) < 2:
                continue
            results.append(self.finding(
                code="TICKER_COLLISION",
                target=investing,
                message=f"{investing}: {len(tv_tickers)} tvTicker aliases ({', '.join(tv_tickers)})",
                severity=Severity.MEDIUM,
                data={"investingTicker": investing, "tvTickers": tv_tickers},
            ))
        
        return results
