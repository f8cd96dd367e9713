"""Translation between the tv, investing and kite ticker namespaces."""
import logging
import re
from typing import List, Optional

from tickersync.providers.kite import kite_to_tv, tv_to_kite
from tickersync.repositories.exchange import ExchangeRepository
from tickersync.repositories.ticker import TickerRepository


logger = logging.getLogger(__name__)


# Formula / spread tickers such as "NIFTY/BANKNIFTY" or "(A+B)*2"
COMPOSITE_PATTERN = re.compile(r'[/*+()]')


class SymbolManager:
    """Pure lookups plus single write-through mapping writes."""
    
    def __init__(self, ticker_repo: TickerRepository, exchange_repo: ExchangeRepository):
        self.ticker_repo = ticker_repo
        self.exchange_repo = exchange_repo
    
    def tv_to_investing(self, tv: str) -> Optional[str]:
        return self.ticker_repo.get(tv)
    
    def investing_to_tv(self, investing: str) -> str:
        """Reverse lookup; unmapped investing tickers pass through unchanged."""
        return self.ticker_repo.get_tv_ticker(investing) or investing
    
    def has_tv_mapping(self, investing: str) -> bool:
        return self.ticker_repo.get_tv_ticker(investing) is not None
    
    def tv_to_kite(self, tv: str) -> str:
        return tv_to_kite(tv)
    
    def kite_to_tv(self, kite: str) -> str:
        return kite_to_tv(kite)
    
    def tv_to_exchange_ticker(self, tv: str) -> str:
        return self.exchange_repo.get(tv) or tv
    
    def create_tv_to_investing_mapping(self, tv: str, investing: str):
        self.ticker_repo.set(tv, investing)
        logger.debug(f"Mapped tv {tv} -> investing {investing}")
    
    def create_tv_to_exchange_ticker_mapping(self, tv: str, exchange: str):
        self.exchange_repo.set(tv, f"{exchange.upper()}:{tv}")
        logger.debug(f"Pinned {tv} to exchange {exchange}")
    
    def remove_tv_to_investing_mapping(self, investing: str) -> List[str]:
        """Remove every tv edge pointing at investing; returns the tv tickers removed."""
        removed = self.ticker_repo.get_tv_tickers(investing)
        for tv in removed:
            self.ticker_repo.delete(tv)
        return removed
    
    @staticmethod
    def is_composite(ticker: str) -> bool:
        return bool(COMPOSITE_PATTERN.search(ticker))
