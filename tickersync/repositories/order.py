"""tv ticker -> GTT orders, refreshed from the order-management platform."""
from typing import Any, Dict, List

from tickersync.models.order import Order
from tickersync.repositories.base import MapRepository


class OrderRepository(MapRepository[List[Order]]):
    """Mirror of open good-till-triggered orders."""
    
    store = "orders"
    
    def _encode_value(self, value: List[Order]) -> List[Dict[str, Any]]:
        return [order.to_dict() for order in value]
    
    def _decode_value(self, key: str, raw: Any) -> List[Order]:
        return [Order.from_dict(item) for item in raw]
    
    def replace_all(self, orders: Dict[str, List[Order]]):
        self._data = {tv: list(items) for tv, items in orders.items() if items}
        self._touch()
    
    def remove_order(self, order_id: str) -> bool:
        for tv, orders in self.items():
            remaining = [o for o in orders if o.id != order_id]
            if len(remaining) != len(orders):
                if remaining:
                    self._data[tv] = remaining
                else:
                    del self._data[tv]
                self._touch()
                return True
        return False
