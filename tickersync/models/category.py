"""Watch and flag category model.

Both families are a fixed array of eight ticker sets. Within one family a
ticker belongs to at most one set; the watch family's WHITE slot is the
derived "default" list and is never written directly.
"""
from enum import Enum, IntEnum
from typing import Iterable, List, Optional, Set


CATEGORY_COUNT = 8


class CategoryFamily(str, Enum):
    """The two independent category families."""
    WATCH = "watch"
    FLAG = "flag"


class CategoryTag(IntEnum):
    """Category slots, named after the colour they are shown in."""
    ORANGE = 0
    RED = 1
    DODGERBLUE = 2
    CYAN = 3
    LIME = 4
    WHITE = 5
    BROWN = 6
    DARKKHAKI = 7
    
    @property
    def color(self) -> str:
        return self.name.lower()


# Derived watch list: everything in the universe not explicitly categorised
DEFAULT_WATCH_TAG = CategoryTag.WHITE


def validate_index(index: int) -> CategoryTag:
    """
    Resolve a raw index to a CategoryTag.
    
    Raises:
        ValueError: If index is outside 0..7
    """
    try:
        return CategoryTag(int(index))
    except ValueError:
        raise ValueError(f"Category index {index} out of range 0..{CATEGORY_COUNT - 1}")


class CategoryLists:
    """Eight mutually exclusive ticker sets."""
    
    def __init__(self, lists: Optional[Iterable[Iterable[str]]] = None):
        self._lists: List[Set[str]] = [set() for _ in range(CATEGORY_COUNT)]
        if lists is not None:
            for index, tickers in enumerate(lists):
                if index >= CATEGORY_COUNT:
                    break
                self._lists[index] = set(tickers)
    
    def get(self, index: int) -> Set[str]:
        return self._lists[validate_index(index)]
    
    def replace(self, index: int, tickers: Iterable[str]):
        self._lists[validate_index(index)] = set(tickers)
    
    def add(self, index: int, ticker: str):
        """Add ticker to index and remove it from every other index."""
        tag = validate_index(index)
        for other, tickers in enumerate(self._lists):
            if other != tag:
                tickers.discard(ticker)
        self._lists[tag].add(ticker)
    
    def delete(self, index: int, ticker: str) -> bool:
        tickers = self._lists[validate_index(index)]
        if ticker in tickers:
            tickers.discard(ticker)
            return True
        return False
    
    def toggle(self, index: int, ticker: str) -> bool:
        """Flip membership; returns True when the ticker is now a member."""
        if ticker in self.get(index):
            self.delete(index, ticker)
            return False
        self.add(index, ticker)
        return True
    
    def contains(self, index: int, ticker: str) -> bool:
        return ticker in self.get(index)
    
    def index_of(self, ticker: str) -> Optional[CategoryTag]:
        for index, tickers in enumerate(self._lists):
            if ticker in tickers:
                return CategoryTag(index)
        return None
    
    def contains_in_any(self, ticker: str) -> bool:
        return self.index_of(ticker) is not None
    
    def evict(self, ticker: str) -> bool:
        """Remove ticker from every index; returns whether it was present."""
        removed = False
        for tickers in self._lists:
            if ticker in tickers:
                tickers.discard(ticker)
                removed = True
        return removed
    
    def all_tickers(self, exclude: Iterable[int] = ()) -> Set[str]:
        skip = {int(i) for i in exclude}
        result: Set[str] = set()
        for index, tickers in enumerate(self._lists):
            if index not in skip:
                result |= tickers
        return result
    
    def items(self):
        for index, tickers in enumerate(self._lists):
            yield CategoryTag(index), tickers
    
    def to_list(self) -> List[List[str]]:
        return [sorted(tickers) for tickers in self._lists]
