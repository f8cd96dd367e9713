"""tv ticker -> analysis sequence."""
from typing import Any

from tickersync.models.sequence import SequenceType
from tickersync.repositories.base import MapRepository


class SequenceRepository(MapRepository[SequenceType]):
    """Timeframe sequence chosen per tv ticker."""
    
    store = "sequences"
    
    def _encode_value(self, value: SequenceType) -> str:
        return value.value
    
    def _decode_value(self, key: str, raw: Any) -> SequenceType:
        # Raises ValueError for anything but MWD / YR
        return SequenceType(raw)
