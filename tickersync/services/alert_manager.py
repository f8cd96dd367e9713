"""Local alert mirror plus alert-platform calls."""
import asyncio
import logging
from typing import List, Optional, Set

from tickersync.models.pair import Alert
from tickersync.providers import AlertPlatformClient, ProviderError
from tickersync.repositories.alert import AlertRepository
from tickersync.repositories.pair import PairRepository


logger = logging.getLogger(__name__)


class AlertManager:
    """Alerts keyed by pairId, with fire-and-forget remote deletion."""
    
    def __init__(
        self,
        alert_repo: AlertRepository,
        pair_repo: PairRepository,
        client: AlertPlatformClient
    ):
        self.alert_repo = alert_repo
        self.pair_repo = pair_repo
        self.client = client
        self._pending: Set[asyncio.Task] = set()
    
    def get_alerts_for_investing_ticker(self, investing: str) -> Optional[List[Alert]]:
        """Sorted alerts for an investing ticker; None when it has no PairInfo."""
        pair = self.pair_repo.get(investing)
        if pair is None:
            return None
        return self.alert_repo.get_sorted_alerts(pair.pair_id)
    
    def get_alerts_by_pair_id(self, pair_id: str) -> List[Alert]:
        return self.alert_repo.get_sorted_alerts(pair_id)
    
    def get_alert_count(self, pair_id: str) -> int:
        return self.alert_repo.get_alert_count(pair_id)
    
    def delete_alerts_by_pair_id(self, pair_id: str) -> List[Alert]:
        """Drop the local entry for a pair; returns what was removed."""
        alerts = list(self.alert_repo.get(pair_id) or [])
        self.alert_repo.delete(pair_id)
        return alerts
    
    async def create_alert(self, investing: str, price: float, ltp: float) -> Alert:
        """
        Create a remote alert for a mapped investing ticker and mirror it.
        
        Raises:
            ValueError: If the investing ticker has no PairInfo
            ProviderError: If the platform call fails
        """
        pair = self.pair_repo.get(investing)
        if pair is None:
            raise ValueError(f"No pair mapping for {investing}")
        alert = await self.client.create_alert(pair.name, pair.pair_id, price, ltp)
        self.alert_repo.add_alert(pair.pair_id, alert)
        return alert
    
    async def delete_alerts(self, alerts: List[Alert]) -> int:
        """Delete alerts remotely. Failures are logged; returns the success count."""
        if not alerts:
            return 0
        results = await asyncio.gather(
            *(self.client.delete_alert(alert) for alert in alerts),
            return_exceptions=True
        )
        deleted = 0
        for alert, result in zip(alerts, results):
            if isinstance(result, ProviderError):
                logger.warning(f"Remote delete failed for alert {alert.id} (pair {alert.pair_id}): {result}")
            elif isinstance(result, Exception):
                logger.error(f"Unexpected error deleting alert {alert.id}: {result}", exc_info=result)
            else:
                deleted += 1
        logger.info(f"Deleted {deleted}/{len(alerts)} remote alerts")
        return deleted
    
    def dispatch_delete(self, alerts: List[Alert]) -> Optional[asyncio.Task]:
        """
        Schedule remote deletion without awaiting it.
        
        Local state is never rolled back when the remote call fails. Outside
        a running event loop the deletion runs to completion synchronously.
        """
        if not alerts:
            return None
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            asyncio.run(self.delete_alerts(alerts))
            return None
        task = loop.create_task(self.delete_alerts(list(alerts)))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task
    
    async def drain(self):
        """Wait for in-flight dispatched deletions."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
