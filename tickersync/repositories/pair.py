"""investing ticker -> PairInfo."""
from typing import Any, Dict, List

from tickersync.models.pair import PairInfo
from tickersync.repositories.base import MapRepository


class PairRepository(MapRepository[PairInfo]):
    """Alert-platform pair descriptors keyed by investing ticker."""
    
    store = "pairs"
    
    def _encode_value(self, value: PairInfo) -> Dict[str, Any]:
        return value.to_dict()
    
    def _decode_value(self, key: str, raw: Dict[str, Any]) -> PairInfo:
        return PairInfo.from_dict(raw)
    
    def find_by_pair_id(self, pair_id: str) -> List[str]:
        """All investing tickers whose PairInfo carries pair_id."""
        return [ticker for ticker, info in self._data.items() if info.pair_id == str(pair_id)]
    
    def group_by_pair_id(self) -> Dict[str, List[str]]:
        groups: Dict[str, List[str]] = {}
        for ticker, info in self._data.items():
            groups.setdefault(info.pair_id, []).append(ticker)
        return groups
