"""Abstract interfaces for the alerting and order-management platforms."""
from abc import ABC, abstractmethod
from typing import Dict, List

from tickersync.models.order import Order
from tickersync.models.pair import Alert, PairInfo


class AlertPlatformClient(ABC):
    """Client for the platform that holds price alerts (investing namespace)."""
    
    @abstractmethod
    async def create_alert(self, name: str, pair_id: str, price: float, ltp: float) -> Alert:
        """
        Create a price alert on the remote platform.
        
        Args:
            name: Display name of the pair
            pair_id: Remote pair id
            price: Trigger price
            ltp: Last traded price, decides the over/under threshold
            
        Returns:
            The created Alert
            
        Raises:
            ProviderError: If API call fails
        """
        pass
    
    @abstractmethod
    async def delete_alert(self, alert: Alert) -> Alert:
        """Delete a remote alert. Raises ProviderError on failure."""
        pass
    
    @abstractmethod
    async def fetch_symbol_data(self, query: str) -> List[PairInfo]:
        """Search instruments by free text. Raises ProviderError on failure."""
        pass


class OrderPlatformClient(ABC):
    """Client for the order-management platform (kite namespace)."""
    
    @abstractmethod
    async def get_gtt_orders(self) -> Dict[str, List[Order]]:
        """Active GTT orders grouped by tv ticker. Raises ProviderError on failure."""
        pass
    
    @abstractmethod
    async def delete_gtt(self, order_id: str) -> None:
        """Delete a GTT order. Raises ProviderError on failure."""
        pass


class ProviderError(Exception):
    """Exception raised when a platform API fails."""
    pass
