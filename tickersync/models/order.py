"""Order-management records mirrored for the trade-risk audit."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List


class OrderType(str, Enum):
    """GTT trigger shape."""
    SINGLE = "single"
    TWO_LEG = "two-leg"


@dataclass
class Order:
    """Good-till-triggered order on the order-management platform."""
    id: str
    symbol: str  # tv ticker
    type: OrderType
    prices: List[float] = field(default_factory=list)
    qty: int = 0
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "symbol": self.symbol,
            "type": self.type.value,
            "prices": self.prices,
            "qty": self.qty,
        }
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Order":
        return cls(
            id=str(data["id"]),
            symbol=data["symbol"],
            type=OrderType(data["type"]),
            prices=[float(p) for p in data.get("prices", [])],
            qty=int(data.get("qty", 0)),
        )
