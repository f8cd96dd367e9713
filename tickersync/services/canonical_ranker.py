"""Deterministic choice of a canonical alias among duplicates."""
import re
from dataclasses import dataclass
from typing import Iterable, List, Optional

from tickersync.core.config import settings
from tickersync.repositories.alert import AlertRepository
from tickersync.repositories.exchange import ExchangeRepository
from tickersync.repositories.pair import PairRepository
from tickersync.repositories.recent import RecentRepository
from tickersync.repositories.sequence import SequenceRepository
from tickersync.repositories.ticker import TickerRepository
from tickersync.services.category_manager import CategoryManager


# Signal weights
WEIGHT_ALERT = 100
WEIGHT_WATCHED = 50
WEIGHT_RECENT = 10
WEIGHT_SEQUENCE = 5
WEIGHT_EXCHANGE = 5
WEIGHT_PAIR = 1
WEIGHT_HTML_ENCODED = -500
WEIGHT_PREFERRED_EXCHANGE = 15
WEIGHT_RAW_AMPERSAND = 2

# &amp; / &#38; / &#x26;
HTML_ENTITY_PATTERN = re.compile(r'&(?:[A-Za-z][A-Za-z0-9]*|#\d+|#[xX][0-9A-Fa-f]+);')


def is_html_encoded(ticker: str) -> bool:
    return bool(HTML_ENTITY_PATTERN.search(ticker))


def has_raw_ampersand(ticker: str) -> bool:
    return "&" in ticker and not is_html_encoded(ticker)


@dataclass
class TickerSignals:
    """Signals observed for one candidate and the resulting score."""
    ticker: str
    alert_count: int = 0
    is_watched: bool = False
    has_recent: bool = False
    has_sequence: bool = False
    has_exchange: bool = False
    has_pair: bool = False
    is_html_encoded: bool = False
    is_preferred_exchange: bool = False
    has_raw_ampersand: bool = False
    
    @property
    def score(self) -> int:
        return (
            WEIGHT_ALERT * self.alert_count
            + WEIGHT_WATCHED * self.is_watched
            + WEIGHT_RECENT * self.has_recent
            + WEIGHT_SEQUENCE * self.has_sequence
            + WEIGHT_EXCHANGE * self.has_exchange
            + WEIGHT_PAIR * self.has_pair
            + WEIGHT_HTML_ENCODED * self.is_html_encoded
            + WEIGHT_PREFERRED_EXCHANGE * self.is_preferred_exchange
            + WEIGHT_RAW_AMPERSAND * self.has_raw_ampersand
        )


class CanonicalRanker:
    """
    Scores competing aliases from the state of every identity repository.
    
    Ranking is read-only. Candidates with equal scores keep their input
    order; tv candidates first prefer the shorter ticker.
    """
    
    def __init__(
        self,
        pair_repo: PairRepository,
        ticker_repo: TickerRepository,
        alert_repo: AlertRepository,
        recent_repo: RecentRepository,
        sequence_repo: SequenceRepository,
        exchange_repo: ExchangeRepository,
        categories: CategoryManager,
        preferred_exchange: Optional[str] = None
    ):
        self.pair_repo = pair_repo
        self.ticker_repo = ticker_repo
        self.alert_repo = alert_repo
        self.recent_repo = recent_repo
        self.sequence_repo = sequence_repo
        self.exchange_repo = exchange_repo
        self.categories = categories
        self.preferred_exchange = (preferred_exchange or settings.preferred_exchange).upper()
    
    def _tv_signals(self, signals: TickerSignals, tv: Optional[str]):
        if tv is None:
            return
        signals.is_watched = self.categories.is_watched(tv)
        signals.has_recent = self.recent_repo.has(tv)
        signals.has_sequence = self.sequence_repo.has(tv)
        signals.has_exchange = self.exchange_repo.has(tv)
    
    def investing_signals(self, investing: str, pair_id: Optional[str] = None) -> TickerSignals:
        pair = self.pair_repo.get(investing)
        if pair_id is None and pair is not None:
            pair_id = pair.pair_id
        signals = TickerSignals(
            ticker=investing,
            alert_count=self.alert_repo.get_alert_count(pair_id) if pair_id else 0,
            has_pair=pair is not None,
            is_html_encoded=is_html_encoded(investing),
            is_preferred_exchange=pair is not None and pair.exchange.upper() == self.preferred_exchange,
            has_raw_ampersand=has_raw_ampersand(investing),
        )
        self._tv_signals(signals, self.ticker_repo.get_tv_ticker(investing))
        return signals
    
    def tv_signals(self, tv: str) -> TickerSignals:
        investing = self.ticker_repo.get(tv)
        pair = self.pair_repo.get(investing) if investing else None
        exchange_value = self.exchange_repo.get(tv) or ""
        signals = TickerSignals(
            ticker=tv,
            alert_count=self.alert_repo.get_alert_count(pair.pair_id) if pair else 0,
            has_pair=pair is not None,
            is_html_encoded=is_html_encoded(tv),
            is_preferred_exchange=exchange_value.upper().startswith(f"{self.preferred_exchange}:"),
            has_raw_ampersand=has_raw_ampersand(tv),
        )
        self._tv_signals(signals, tv)
        return signals
    
    def rank_investing_tickers(self, investing_tickers: Iterable[str], pair_id: Optional[str] = None) -> List[TickerSignals]:
        """Investing aliases of one pairId, best first."""
        ranked = [self.investing_signals(t, pair_id) for t in investing_tickers]
        # sorted() is stable, so ties keep input order
        return sorted(ranked, key=lambda s: -s.score)
    
    def rank_tv_tickers(self, tv_tickers: Iterable[str]) -> List[TickerSignals]:
        """tv aliases of one investing ticker, best first."""
        ranked = [self.tv_signals(t) for t in tv_tickers]
        return sorted(ranked, key=lambda s: (-s.score, len(s.ticker)))
    
    def canonical_investing(self, investing_tickers: Iterable[str], pair_id: Optional[str] = None) -> Optional[str]:
        ranked = self.rank_investing_tickers(investing_tickers, pair_id)
        return ranked[0].ticker if ranked else None
    
    def canonical_tv(self, tv_tickers: Iterable[str]) -> Optional[str]:
        ranked = self.rank_tv_tickers(tv_tickers)
        return ranked[0].ticker if ranked else None
