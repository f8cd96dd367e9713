"""Pair mapping lifecycle, guard rails and the stop-tracking cascade."""
import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from tickersync.models.category import CategoryFamily
from tickersync.models.pair import PairInfo
from tickersync.providers import AlertPlatformClient, ProviderError
from tickersync.repositories.exchange import ExchangeRepository
from tickersync.repositories.pair import PairRepository
from tickersync.repositories.recent import RecentRepository
from tickersync.repositories.sequence import SequenceRepository
from tickersync.repositories.ticker import TickerRepository
from tickersync.services.alert_feed import AlertFeed
from tickersync.services.alert_manager import AlertManager
from tickersync.services.category_manager import CategoryManager
from tickersync.services.symbol_manager import SymbolManager


logger = logging.getLogger(__name__)


DUPLICATE_PAIR_ID = "DUPLICATE_PAIR_ID"
TICKER_COLLISION = "TICKER_COLLISION"


@dataclass
class GuardRailPrompt:
    """A confirmation required before a mapping may be written."""
    code: str
    reason: str
    tickers: List[str]
    on_confirm: Callable[[], None] = field(repr=False)
    
    def to_dict(self) -> dict:
        return {"code": self.code, "reason": self.reason, "tickers": self.tickers}


@dataclass
class GuardRailCheck:
    """Ordered prompts for one prospective mapping."""
    selected_pair: PairInfo
    tv_ticker: str
    prompts: List[GuardRailPrompt] = field(default_factory=list)
    
    @property
    def requires_confirmation(self) -> bool:
        return bool(self.prompts)


class PairManager:
    """Owns writes that span the pair, ticker and dependent repositories."""
    
    def __init__(
        self,
        pair_repo: PairRepository,
        ticker_repo: TickerRepository,
        exchange_repo: ExchangeRepository,
        sequence_repo: SequenceRepository,
        recent_repo: RecentRepository,
        symbols: SymbolManager,
        categories: CategoryManager,
        alerts: AlertManager,
        alert_feed: AlertFeed,
        search_client: AlertPlatformClient
    ):
        self.pair_repo = pair_repo
        self.ticker_repo = ticker_repo
        self.exchange_repo = exchange_repo
        self.sequence_repo = sequence_repo
        self.recent_repo = recent_repo
        self.symbols = symbols
        self.categories = categories
        self.alerts = alerts
        self.alert_feed = alert_feed
        self.search_client = search_client
    
    # ------------------------------------------------------------------
    # Passthrough
    # ------------------------------------------------------------------
    
    def create_investing_to_pair_mapping(self, investing: str, pair: PairInfo):
        self.pair_repo.set(investing, pair)
    
    def investing_ticker_to_pair_info(self, investing: str) -> Optional[PairInfo]:
        return self.pair_repo.get(investing)
    
    def get_all_investing_tickers(self) -> List[str]:
        return self.pair_repo.keys()
    
    def find_investing_tickers_by_pair_id(self, pair_id: str) -> List[str]:
        return self.pair_repo.find_by_pair_id(pair_id)
    
    async def search_pairs(self, query: str) -> List[PairInfo]:
        """Look up candidate pairs on the alert platform."""
        try:
            return await self.search_client.fetch_symbol_data(query)
        except ProviderError:
            raise
        except Exception as e:
            raise ProviderError(f"Symbol search failed for {query}: {str(e)}")
    
    # ------------------------------------------------------------------
    # Guard rails
    # ------------------------------------------------------------------
    
    def check_guard_rails(self, selected_pair: PairInfo, tv_ticker: str) -> GuardRailCheck:
        """
        Collect the confirmations needed before mapping tv_ticker to selected_pair.
        
        1. Other investing tickers already share the pairId: confirming removes
           their Pair entries.
        2. The investing symbol is already mapped from another tv ticker:
           confirming removes that tv alias and its dependent records.
        
        Nothing is written here; each prompt's on_confirm performs its removal.
        """
        check = GuardRailCheck(selected_pair=selected_pair, tv_ticker=tv_ticker)
        
        stale_aliases = [
            ticker for ticker in self.pair_repo.find_by_pair_id(selected_pair.pair_id)
            if ticker != selected_pair.symbol
        ]
        if stale_aliases:
            check.prompts.append(GuardRailPrompt(
                code=DUPLICATE_PAIR_ID,
                reason=(
                    f"pairId {selected_pair.pair_id} is already mapped by "
                    f"{', '.join(stale_aliases)}. Remove those aliases?"
                ),
                tickers=stale_aliases,
                on_confirm=lambda: self._remove_pairs(stale_aliases, keep_tv=tv_ticker),
            ))
        
        other_tv = [
            tv for tv in self.ticker_repo.get_tv_tickers(selected_pair.symbol)
            if tv != tv_ticker
        ]
        if other_tv:
            check.prompts.append(GuardRailPrompt(
                code=TICKER_COLLISION,
                reason=(
                    f"{selected_pair.symbol} is already mapped from "
                    f"{', '.join(other_tv)}. Replace with {tv_ticker}?"
                ),
                tickers=other_tv,
                on_confirm=lambda: self._remove_tv_aliases(other_tv),
            ))
        
        return check
    
    def _remove_pairs(self, investing_tickers: List[str], keep_tv: str):
        for ticker in investing_tickers:
            self.remove_investing_alias(ticker, keep_tv=keep_tv)
    
    def _remove_tv_aliases(self, tv_tickers: List[str]):
        for tv in tv_tickers:
            self.remove_tv_alias(tv)
    
    def map_pair(
        self,
        selected_pair: PairInfo,
        tv_ticker: str,
        confirm: Optional[Callable[[GuardRailPrompt], bool]] = None
    ) -> bool:
        """
        Map tv_ticker onto selected_pair.
        
        Every guard-rail prompt is offered to confirm() in order. A refusal,
        or a missing confirm() while prompts exist, aborts before any write.
        
        Returns:
            True when the mapping was written
        """
        check = self.check_guard_rails(selected_pair, tv_ticker)
        for prompt in check.prompts:
            if confirm is None or not confirm(prompt):
                logger.info(f"Mapping {tv_ticker} -> {selected_pair.symbol} aborted at {prompt.code}")
                return False
        
        for prompt in check.prompts:
            prompt.on_confirm()
        
        self.create_investing_to_pair_mapping(selected_pair.symbol, selected_pair)
        self.symbols.create_tv_to_investing_mapping(tv_ticker, selected_pair.symbol)
        logger.info(f"Mapped {tv_ticker} -> {selected_pair.symbol} (pairId {selected_pair.pair_id})")
        return True
    
    # ------------------------------------------------------------------
    # Removal
    # ------------------------------------------------------------------
    
    def remove_pair_by_investing_ticker(self, investing: str) -> bool:
        """Delete only the Pair entry; tv edges and alerts are untouched."""
        removed = self.pair_repo.delete(investing)
        if removed:
            logger.info(f"Removed pair entry {investing}")
        return removed
    
    def remove_investing_alias(self, investing: str, keep_tv: Optional[str] = None) -> bool:
        """
        Retire a duplicate investing alias.

        Deletes its Pair entry and the tv aliases pointing at it. Alerts are
        keyed by the shared pairId and stay with the canonical alias. keep_tv
        is left alone because the caller is about to re-point it.
        """
        removed = self.remove_pair_by_investing_ticker(investing)
        for tv in self.ticker_repo.get_tv_tickers(investing):
            if tv != keep_tv:
                self.remove_tv_alias(tv)
        return removed

    def remove_tv_alias(self, tv: str) -> bool:
        """Delete one tv edge plus its tv-keyed records; the pair and alerts stay."""
        self.ticker_repo.delete(tv)
        evicted = self._cascade_tv(tv)
        logger.info(f"Removed tv alias {tv}")
        return evicted
    
    def _cascade_tv(self, tv: str) -> bool:
        watch_evicted = self.categories.evict(CategoryFamily.WATCH, tv)
        flag_evicted = self.categories.evict(CategoryFamily.FLAG, tv)
        self.alert_feed.publish(tv)
        self.recent_repo.delete(tv)
        self.sequence_repo.delete(tv)
        self.exchange_repo.delete(tv)
        return watch_evicted or flag_evicted
    
    def stop_tracking_by_investing_ticker(self, investing: str) -> bool:
        """
        Remove an investing ticker from every repository.
        
        Deletes the Pair entry and every tv edge pointing at it, evicts each
        tv alias from both category families, clears their exchange,
        sequence and recent records, then dispatches remote deletion of the
        pair's alerts and drops the local alert entry. Remote failures are
        logged and never roll back local state.

        An investing ticker without tv aliases only loses its Pair and
        Alert records; tv-keyed records of a same-named tv ticker stay.

        Returns:
            True when any tv alias was in a watch or flag category
        """
        pair = self.pair_repo.get(investing)
        tv_tickers = self.ticker_repo.get_tv_tickers(investing)
        
        self.pair_repo.delete(investing)
        self.symbols.remove_tv_to_investing_mapping(investing)
        
        cleaned = False
        for tv in tv_tickers:
            cleaned = self._cascade_tv(tv) or cleaned
        
        if pair is not None:
            alerts = self.alerts.delete_alerts_by_pair_id(pair.pair_id)
            if alerts:
                self.alerts.dispatch_delete(alerts)
        
        logger.info(f"Stopped tracking {investing} (tv: {', '.join(tv_tickers) or 'none'})")
        return cleaned
    
    def stop_tracking_by_tv_ticker(self, tv: str) -> bool:
        investing = self.symbols.tv_to_investing(tv)
        if investing:
            return self.stop_tracking_by_investing_ticker(investing)
        cleaned = self._cascade_tv(tv)
        logger.info(f"Stopped tracking unmapped tv ticker {tv}")
        return cleaned
