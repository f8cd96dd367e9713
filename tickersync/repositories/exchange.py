"""tv ticker -> exchange-qualified ticker ("NSE:M&M")."""
from typing import Optional

from tickersync.repositories.base import MapRepository


class ExchangeRepository(MapRepository[str]):
    """Exchange overrides pinned per tv ticker."""
    
    store = "exchanges"
    
    def get_exchange(self, tv: str) -> Optional[str]:
        value = self._data.get(tv)
        if not value or ":" not in value:
            return None
        return value.split(":", 1)[0]
