"""tv ticker -> investing ticker, with an investing -> tv reverse index."""
import logging
from typing import Dict, List, Optional

from tickersync.repositories.base import MapRepository


logger = logging.getLogger(__name__)


class TickerRepository(MapRepository[str]):
    """
    Forward map of tv aliases onto investing tickers.
    
    Several tv tickers may point at the same investing ticker (a collision).
    The reverse index answers with the most recently mapped alias and, when
    that alias is deleted, falls back to a surviving one.
    """
    
    store = "tickers"
    
    def __init__(self, redis=None):
        self._reverse: Dict[str, str] = {}
        super().__init__(redis)
    
    def _on_reload(self):
        self._reverse = {}
        for tv, investing in self._data.items():
            self._reverse[investing] = tv
    
    def set(self, key: str, value: str):
        previous = self._data.get(key)
        super().set(key, value)
        if previous is not None and previous != value:
            self._repoint(previous, key)
        self._reverse[value] = key
    
    def delete(self, key: str) -> bool:
        investing = self._data.get(key)
        if not super().delete(key):
            return False
        self._repoint(investing, key)
        return True
    
    def _repoint(self, investing: str, removed_tv: str):
        if self._reverse.get(investing) != removed_tv:
            return
        survivors = self.get_tv_tickers(investing)
        if survivors:
            self._reverse[investing] = survivors[-1]
        else:
            del self._reverse[investing]
    
    def get_tv_ticker(self, investing: str) -> Optional[str]:
        """Reverse lookup, O(1)."""
        return self._reverse.get(investing)
    
    def get_tv_tickers(self, investing: str) -> List[str]:
        """Every tv alias pointing at investing, in insertion order."""
        return [tv for tv, inv in self._data.items() if inv == investing]
    
    def group_by_investing(self) -> Dict[str, List[str]]:
        groups: Dict[str, List[str]] = {}
        for tv, investing in self._data.items():
            groups.setdefault(investing, []).append(tv)
        return groups
