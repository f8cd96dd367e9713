"""Watch and flag category management."""
import logging
from typing import Iterable, Set

from tickersync.models.category import (
    DEFAULT_WATCH_TAG,
    CategoryFamily,
    CategoryLists,
    CategoryTag,
    validate_index,
)
from tickersync.repositories.category import CategoryRepository


logger = logging.getLogger(__name__)


class CategoryManager:
    """
    Owns both category families.
    
    Adding a ticker to one index removes it from every other index of the
    same family. The watch family's default index is derived from the
    universe by ``update_default_list`` and cannot be recorded into.
    """
    
    def __init__(self, watch_repo: CategoryRepository, flag_repo: CategoryRepository):
        self.watch_repo = watch_repo
        self.flag_repo = flag_repo
    
    def _repo(self, family: CategoryFamily) -> CategoryRepository:
        if CategoryFamily(family) == CategoryFamily.WATCH:
            return self.watch_repo
        return self.flag_repo
    
    def lists(self, family: CategoryFamily) -> CategoryLists:
        return self._repo(family).lists
    
    def get_category(self, family: CategoryFamily, index: int) -> Set[str]:
        """
        Members of one category.
        
        Raises:
            ValueError: If index is outside 0..7
        """
        return set(self.lists(family).get(index))
    
    def record_category(self, family: CategoryFamily, index: int, tickers: Iterable[str]) -> Set[str]:
        """
        Toggle each ticker in the given category.
        
        Returns:
            Tickers that are members after the call
            
        Raises:
            ValueError: If index is out of range or is the derived watch default
        """
        tag = validate_index(index)
        if CategoryFamily(family) == CategoryFamily.WATCH and tag == DEFAULT_WATCH_TAG:
            raise ValueError(f"Watch category {tag.color} is derived and cannot be recorded into")
        
        repo = self._repo(family)
        added: Set[str] = set()
        for ticker in tickers:
            if repo.lists.toggle(tag, ticker):
                added.add(ticker)
        repo.mark_dirty()
        logger.info(f"Recorded {len(added)} tickers into {family} {tag.color}")
        return added
    
    def update_default_list(self, universe: Iterable[str]) -> int:
        """Derived watch default := universe minus every other watch index."""
        lists = self.watch_repo.lists
        explicit = lists.all_tickers(exclude=[DEFAULT_WATCH_TAG])
        derived = set(universe) - explicit
        lists.replace(DEFAULT_WATCH_TAG, derived)
        self.watch_repo.mark_dirty()
        return len(derived)
    
    def _outside_universe(self, family: CategoryFamily, universe: Set[str]) -> Set[str]:
        return {t for t in self.lists(family).all_tickers() if t not in universe}
    
    def dry_run_clean(self, universe: Iterable[str], family: CategoryFamily = CategoryFamily.WATCH) -> int:
        """Count category members not present in the universe."""
        return len(self._outside_universe(family, set(universe)))
    
    def clean(self, universe: Iterable[str], family: CategoryFamily = CategoryFamily.WATCH) -> int:
        """Remove category members not present in the universe."""
        stale = self._outside_universe(family, set(universe))
        lists = self.lists(family)
        for ticker in stale:
            lists.evict(ticker)
        if stale:
            self._repo(family).mark_dirty()
            logger.info(f"Cleaned {len(stale)} tickers from {family} categories")
        return len(stale)
    
    def category_of(self, family: CategoryFamily, ticker: str) -> CategoryTag | None:
        return self.lists(family).index_of(ticker)
    
    def is_watched(self, ticker: str) -> bool:
        return self.watch_repo.lists.contains_in_any(ticker)
    
    def is_flagged(self, ticker: str) -> bool:
        return self.flag_repo.lists.contains_in_any(ticker)
    
    def evict(self, family: CategoryFamily, ticker: str) -> bool:
        """Remove ticker from every index of a family."""
        repo = self._repo(family)
        evicted = repo.lists.evict(ticker)
        if evicted:
            repo.mark_dirty()
        return evicted
