"""Unit tests for AlertManager and OrderService."""
import pytest

from tickersync.models.order import Order, OrderType
from tickersync.models.pair import Alert
from tickersync.providers import ProviderError
from tests.conftest import create_alerts, create_pair


@pytest.mark.unit
class TestAlertLookups:
    """Test local alert queries."""
    
    def test_unmapped_investing_returns_none(self, container):
        """✅ No PairInfo → None, distinct from an empty list."""
        assert container.alerts.get_alerts_for_investing_ticker("NOPE") is None
    
    def test_mapped_without_alerts_returns_empty(self, container):
        """✅ PairInfo but no alerts → []."""
        container.pair_repo.set("RELIANCE-NSE", create_pair())
        
        assert container.alerts.get_alerts_for_investing_ticker("RELIANCE-NSE") == []
    
    def test_alerts_sorted_by_price(self, container):
        """✅ Alerts come back in ascending price order."""
        container.pair_repo.set("RELIANCE-NSE", create_pair())
        for alert in create_alerts("6408", [2600.0, 2400.0]):
            container.alert_repo.add_alert("6408", alert)
        
        prices = [a.price for a in container.alerts.get_alerts_for_investing_ticker("RELIANCE-NSE")]
        
        assert prices == [2400.0, 2600.0]
        assert container.alerts.get_alert_count("6408") == 2
    
    def test_delete_by_pair_id_is_local(self, reliance, container, alert_client):
        """✅ Local delete returns the removed alerts and makes no remote call."""
        removed = container.alerts.delete_alerts_by_pair_id("6408")
        
        assert [a.id for a in removed] == ["a1"]
        assert not container.alert_repo.has_alerts("6408")
        alert_client.delete_alert.assert_not_called()


@pytest.mark.unit
@pytest.mark.asyncio
class TestRemoteAlerts:
    """Test alert-platform calls."""
    
    async def test_create_alert_mirrors_locally(self, reliance, container, alert_client):
        """✅ Created alert is stored under the pair's pairId."""
        alert_client.create_alert.return_value = Alert(id="a2", pair_id="6408", price=2700.0, name="Reliance Industries")
        
        alert = await container.alerts.create_alert("RELIANCE-NSE", 2700.0, 2500.0)
        
        assert alert.id == "a2"
        alert_client.create_alert.assert_awaited_once_with("Reliance Industries", "6408", 2700.0, 2500.0)
        assert container.alert_repo.get_alert_count("6408") == 2
    
    async def test_create_alert_unmapped(self, container):
        """✅ Unmapped investing ticker → ValueError."""
        with pytest.raises(ValueError):
            await container.alerts.create_alert("NOPE", 1.0, 2.0)
    
    async def test_delete_alerts_counts_successes(self, container, alert_client):
        """✅ Failed deletions are logged and excluded from the count."""
        alerts = create_alerts("1", [1.0, 2.0, 3.0])
        
        def delete(alert):
            if alert.price == 2.0:
                raise ProviderError("rejected")
            return alert
        alert_client.delete_alert.side_effect = delete
        
        assert await container.alerts.delete_alerts(alerts) == 2
    
    async def test_dispatch_delete_runs_in_background(self, container, alert_client):
        """✅ Dispatched deletions complete on drain()."""
        task = container.alerts.dispatch_delete(create_alerts("1", [1.0]))
        
        assert task is not None
        await container.alerts.drain()
        
        assert task.done()
        alert_client.delete_alert.assert_awaited_once()
    
    async def test_dispatch_nothing(self, container):
        """✅ Empty list schedules nothing."""
        assert container.alerts.dispatch_delete([]) is None


@pytest.mark.unit
@pytest.mark.asyncio
class TestOrderService:
    """Test the GTT mirror."""
    
    async def test_refresh_replaces_mirror(self, container, order_client):
        """✅ Mirror equals the platform's active orders."""
        container.order_repo.set("STALE", [Order(id="old", symbol="STALE", type=OrderType.SINGLE)])
        order_client.get_gtt_orders.return_value = {
            "M&M": [Order(id="g1", symbol="M&M", type=OrderType.SINGLE, prices=[100.0], qty=64)],
        }
        
        assert await container.orders.refresh() == 1
        assert container.order_repo.keys() == ["M&M"]
    
    async def test_delete_order(self, container, order_client):
        """✅ Remote delete then local removal."""
        container.order_repo.set("M&M", [Order(id="g1", symbol="M&M", type=OrderType.SINGLE)])
        
        assert await container.orders.delete_order("g1") is True
        order_client.delete_gtt.assert_awaited_once_with("g1")
        assert container.order_repo.size() == 0
    
    async def test_delete_order_remote_failure(self, container, order_client):
        """✅ Remote failure keeps the mirror entry."""
        container.order_repo.set("M&M", [Order(id="g1", symbol="M&M", type=OrderType.SINGLE)])
        order_client.delete_gtt.side_effect = ProviderError("403")
        
        assert await container.orders.delete_order("g1") is False
        assert container.order_repo.size() == 1
