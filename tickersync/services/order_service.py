"""Mirror of GTT orders from the order-management platform."""
import logging

from tickersync.providers import OrderPlatformClient, ProviderError
from tickersync.repositories.order import OrderRepository


logger = logging.getLogger(__name__)


class OrderService:
    """Keeps the order repository in step with the platform."""
    
    def __init__(self, order_repo: OrderRepository, client: OrderPlatformClient):
        self.order_repo = order_repo
        self.client = client
    
    async def refresh(self) -> int:
        """
        Replace the mirrored orders with the platform's active GTTs.
        
        Returns:
            Number of tickers holding orders
            
        Raises:
            ProviderError: If the platform call fails
        """
        orders = await self.client.get_gtt_orders()
        self.order_repo.replace_all(orders)
        logger.info(f"GTT mirror refreshed: {len(orders)} tickers")
        return len(orders)
    
    async def delete_order(self, order_id: str) -> bool:
        """Delete remotely, then drop from the mirror. Remote failure keeps the mirror."""
        try:
            await self.client.delete_gtt(order_id)
        except ProviderError as e:
            logger.warning(f"Could not delete GTT {order_id}: {e}")
            return False
        return self.order_repo.remove_order(order_id)
