"""Pair and alert records shared across the identity repositories."""
from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class PairInfo:
    """Alert-platform instrument descriptor."""
    name: str
    pair_id: str
    exchange: str
    symbol: str  # investing ticker
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "pairId": self.pair_id,
            "exchange": self.exchange,
            "symbol": self.symbol,
        }
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PairInfo":
        return cls(
            name=data["name"],
            pair_id=str(data["pairId"]),
            exchange=data.get("exchange", ""),
            symbol=data["symbol"],
        )


@dataclass
class Alert:
    """Price alert held on the alerting platform."""
    id: str
    pair_id: str
    price: float
    name: Optional[str] = None
    
    def to_dict(self) -> Dict[str, Any]:
        # pairId is the storage key, so it is not repeated per alert
        data: Dict[str, Any] = {"id": self.id, "price": self.price}
        if self.name is not None:
            data["name"] = self.name
        return data
    
    @classmethod
    def from_dict(cls, pair_id: str, data: Dict[str, Any]) -> "Alert":
        return cls(
            id=str(data["id"]),
            pair_id=pair_id,
            price=float(data["price"]),
            name=data.get("name"),
        )
