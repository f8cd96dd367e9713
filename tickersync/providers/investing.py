"""Alert platform client (investing.com alert center)."""
import httpx
import json
import logging
from typing import List, Optional
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
    before_sleep_log
)
from tickersync.providers import AlertPlatformClient, ProviderError
from tickersync.models.pair import Alert, PairInfo
from tickersync.core.config import settings


logger = logging.getLogger(__name__)


class InvestingClient(AlertPlatformClient):
    """investing.com implementation of the alert platform client."""
    
    HEADERS = {
        "Accept": "application/json, text/javascript, */*; q=0.01",
        "Accept-Language": "en-US,en;q=0.5",
        "Content-Type": "application/x-www-form-urlencoded",
        "X-Requested-With": "XMLHttpRequest",
    }
    
    def __init__(self, base_url: Optional[str] = None):
        self.base_url = (base_url or settings.investing_base_url).rstrip("/")
        self.client = httpx.AsyncClient(timeout=30.0, headers=self.HEADERS)
    
    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type((httpx.TimeoutException, httpx.ConnectError)),
        before_sleep=before_sleep_log(logger, logging.WARNING)
    )
    async def _post(self, endpoint: str, data: dict) -> str:
        """POST a form with retry logic for transient failures.
        
        Retries up to 3 times with exponential backoff for timeouts and
        connection errors. HTTP status errors are not retried.
        """
        response = await self.client.post(f"{self.base_url}{endpoint}", data=data)
        response.raise_for_status()
        return response.text
    
    async def create_alert(self, name: str, pair_id: str, price: float, ltp: float) -> Alert:
        """Create an instrument price alert; threshold follows price vs ltp."""
        threshold = "over" if price > ltp else "under"
        data = {
            "alertType": "instrument",
            "alertParams[alert_trigger]": "price",
            "alertParams[pair_ID]": pair_id,
            "alertParams[threshold]": threshold,
            "alertParams[frequency]": "Once",
            "alertParams[value]": str(price),
            "alertParams[platform]": "desktopAlertsCenter",
            "alertParams[email_alert]": "Yes",
        }
        try:
            body = await self._post("/useralerts/service/create", data)
        except httpx.HTTPError as e:
            raise ProviderError(f"Failed to create alert for {name}: {str(e)}")
        
        alert_id = self._parse_alert_id(body)
        logger.info(f"Created alert {alert_id} for {name} ({pair_id}) {threshold} {price}")
        return Alert(id=alert_id, pair_id=pair_id, price=price, name=name)
    
    async def delete_alert(self, alert: Alert) -> Alert:
        data = {
            "alertType": "instrument",
            "alertParams[alert_ID]": alert.id,
            "alertParams[platform]": "desktop",
        }
        try:
            await self._post("/useralerts/service/delete", data)
        except httpx.HTTPError as e:
            raise ProviderError(f"Failed to delete alert {alert.id}: {str(e)}")
        logger.debug(f"Deleted alert {alert.id} (pair {alert.pair_id})")
        return alert
    
    async def fetch_symbol_data(self, query: str) -> List[PairInfo]:
        """
        Search alert-center instruments.
        
        Returns:
            One PairInfo per search hit
            
        Raises:
            ProviderError: On HTTP failure, unparsable body or no results
        """
        data = {
            "search_text": query,
            "term": query,
            "country_id": "0",
            "tab_id": "All",
        }
        try:
            body = await self._post("/search/service/search?searchType=alertCenterInstruments", data)
            result = json.loads(body)
        except httpx.HTTPError as e:
            raise ProviderError(f"Failed to fetch symbol data: {str(e)}")
        except json.JSONDecodeError as e:
            raise ProviderError(f"Unparsable symbol search response: {str(e)}")
        
        items = result.get("All") or []
        if not items:
            raise ProviderError(f"No results found for symbol: {query}")
        
        return [
            PairInfo(
                name=item.get("name", ""),
                pair_id=str(item.get("pair_ID", "")),
                exchange=item.get("exchange_name_short", ""),
                symbol=item.get("symbol", ""),
            )
            for item in items
        ]
    
    @staticmethod
    def _parse_alert_id(body: str) -> str:
        try:
            payload = json.loads(body) if body else {}
        except json.JSONDecodeError:
            payload = {}
        alert_id = None
        if isinstance(payload, dict):
            alert_id = payload.get("alert_ID")
            if not alert_id and isinstance(payload.get("data"), dict):
                alert_id = payload["data"].get("alert_ID")
        if not alert_id:
            raise ProviderError("Alert created but response carried no alert id")
        return str(alert_id)
    
    async def close(self):
        """Close HTTP client."""
        await self.client.aclose()
