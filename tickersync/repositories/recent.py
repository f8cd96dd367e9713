"""tv ticker -> last visit timestamp (epoch millis)."""
from typing import Any, Optional

from tickersync.repositories.base import MapRepository
from tickersync.utils.time import now_millis


class RecentRepository(MapRepository[int]):
    """When each tv ticker was last opened."""
    
    store = "recent"
    
    def _decode_value(self, key: str, raw: Any) -> int:
        return int(raw)
    
    def touch(self, tv: str, timestamp: Optional[int] = None) -> int:
        """Record a visit now (or at timestamp)."""
        value = now_millis() if timestamp is None else int(timestamp)
        self.set(tv, value)
        return value
