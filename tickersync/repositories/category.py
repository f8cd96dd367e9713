"""Watch / flag category lists."""
from typing import Any, Dict, List

from tickersync.models.category import CATEGORY_COUNT, CategoryFamily, CategoryLists
from tickersync.repositories.base import BlobStore


class CategoryRepository(BlobStore):
    """Eight ticker sets for one category family, stored as an object keyed by index."""
    
    def __init__(self, family: CategoryFamily, redis=None):
        super().__init__(redis)
        self.family = family
        self.store = f"categories:{family.value}"
        self.lists = CategoryLists()
    
    def _reset(self):
        self.lists = CategoryLists()
    
    def _serialize(self) -> Dict[str, List[str]]:
        return {str(index): tickers for index, tickers in enumerate(self.lists.to_list())}

    def _deserialize(self, raw: Any):
        # Older blobs were a plain array of eight lists
        if isinstance(raw, list):
            self.lists = CategoryLists(raw)
            return
        if not isinstance(raw, dict):
            raise ValueError(f"{self.store} store must be a JSON object keyed by index")
        lists: List[List[str]] = [[] for _ in range(CATEGORY_COUNT)]
        for key, tickers in raw.items():
            index = int(key)
            if 0 <= index < CATEGORY_COUNT:
                lists[index] = list(tickers)
        self.lists = CategoryLists(lists)
    
    def mark_dirty(self):
        self._touch()
