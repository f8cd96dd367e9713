"""Order-management platform client (Kite Connect GTT triggers)."""
import httpx
import logging
from typing import Dict, List, Optional
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
    before_sleep_log
)
from tickersync.providers import OrderPlatformClient, ProviderError
from tickersync.models.order import Order, OrderType
from tickersync.core.config import settings


logger = logging.getLogger(__name__)


# kite symbols replace punctuation the exchange ticker carries
KITE_TO_TV = {
    "M_M": "M&M",
    "M_MFIN": "M&MFIN",
}
TV_TO_KITE = {tv: kite for kite, tv in KITE_TO_TV.items()}


def kite_to_tv(symbol: str) -> str:
    return KITE_TO_TV.get(symbol, symbol)


def tv_to_kite(symbol: str) -> str:
    return TV_TO_KITE.get(symbol, symbol)


class KiteClient(OrderPlatformClient):
    """Kite Connect implementation of the order platform client."""
    
    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        access_token: Optional[str] = None
    ):
        self.base_url = (base_url or settings.kite_base_url).rstrip("/")
        self.api_key = api_key or settings.kite_api_key
        self.access_token = access_token or settings.kite_access_token
        self.client = httpx.AsyncClient(timeout=30.0)
    
    def _headers(self) -> dict:
        if not self.api_key or not self.access_token:
            raise ProviderError("Kite credentials are not configured")
        return {
            "X-Kite-Version": "3",
            "Authorization": f"token {self.api_key}:{self.access_token}",
        }
    
    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type((httpx.TimeoutException, httpx.ConnectError)),
        before_sleep=before_sleep_log(logger, logging.WARNING)
    )
    async def _make_request(self, method: str, endpoint: str) -> dict:
        """Make HTTP request with retry logic for transient failures."""
        response = await self.client.request(
            method,
            f"{self.base_url}{endpoint}",
            headers=self._headers()
        )
        response.raise_for_status()
        return response.json()
    
    async def get_gtt_orders(self) -> Dict[str, List[Order]]:
        """Active GTT triggers grouped by tv ticker."""
        try:
            payload = await self._make_request("GET", "/gtt/triggers")
        except httpx.HTTPError as e:
            raise ProviderError(f"Error fetching GTT orders: {str(e)}")
        
        orders: Dict[str, List[Order]] = {}
        for gtt in payload.get("data") or []:
            if gtt.get("status") != "active":
                continue
            order = self._parse_gtt(gtt)
            if order is None:
                continue
            orders.setdefault(order.symbol, []).append(order)
        
        logger.info(f"Fetched GTT orders for {len(orders)} tickers")
        return orders
    
    async def delete_gtt(self, order_id: str) -> None:
        try:
            await self._make_request("DELETE", f"/gtt/triggers/{order_id}")
        except httpx.HTTPError as e:
            raise ProviderError(f"Error deleting GTT {order_id}: {str(e)}")
        logger.info(f"Deleted GTT order {order_id}")
    
    @staticmethod
    def _parse_gtt(gtt: dict) -> Optional[Order]:
        legs = gtt.get("orders") or []
        if not legs:
            return None
        try:
            order_type = OrderType(gtt.get("type"))
        except ValueError:
            logger.debug(f"Skipping GTT {gtt.get('id')} with unknown type {gtt.get('type')}")
            return None
        first = legs[0]
        return Order(
            id=str(gtt["id"]),
            symbol=kite_to_tv(first.get("tradingsymbol", "")),
            type=order_type,
            prices=[float(p) for p in gtt.get("condition", {}).get("trigger_values", [])],
            qty=int(first.get("quantity", 0)),
        )
    
    async def close(self):
        """Close HTTP client."""
        await self.client.aclose()
