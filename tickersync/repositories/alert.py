"""pairId -> list of alerts."""
from typing import Any, Dict, List

from tickersync.models.pair import Alert
from tickersync.repositories.base import MapRepository


class AlertRepository(MapRepository[List[Alert]]):
    """Local mirror of alerts held on the alerting platform."""
    
    store = "alerts"
    
    def _encode_value(self, value: List[Alert]) -> List[Dict[str, Any]]:
        return [alert.to_dict() for alert in value]
    
    def _decode_value(self, key: str, raw: Any) -> List[Alert]:
        return [Alert.from_dict(key, item) for item in raw]
    
    def add_alert(self, pair_id: str, alert: Alert):
        """
        Append an alert to a pair.
        
        Raises:
            ValueError: If pair_id or alert id is missing or the pair does not match
        """
        if not pair_id:
            raise ValueError("pair_id is required")
        if not alert.id:
            raise ValueError("alert id is required")
        if alert.pair_id != pair_id:
            raise ValueError(f"Alert {alert.id} belongs to pair {alert.pair_id}, not {pair_id}")
        alerts = self._data.setdefault(pair_id, [])
        alerts.append(alert)
        self._touch()
    
    def get_sorted_alerts(self, pair_id: str) -> List[Alert]:
        return sorted(self._data.get(pair_id, []), key=lambda a: a.price)
    
    def remove_alert(self, pair_id: str, alert_id: str) -> bool:
        alerts = self._data.get(pair_id)
        if not alerts:
            return False
        remaining = [a for a in alerts if a.id != alert_id]
        if len(remaining) == len(alerts):
            return False
        if remaining:
            self._data[pair_id] = remaining
        else:
            del self._data[pair_id]
        self._touch()
        return True
    
    def has_alerts(self, pair_id: str) -> bool:
        return bool(self._data.get(pair_id))
    
    def get_alert_count(self, pair_id: str) -> int:
        return len(self._data.get(pair_id, []))
