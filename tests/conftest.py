"""Shared pytest fixtures for identity and audit engine tests."""
import pytest
from typing import List, Optional
from unittest.mock import AsyncMock
import fakeredis.aioredis

from tickersync.core.container import build_container
from tickersync.models.pair import Alert, PairInfo
from tickersync.providers import AlertPlatformClient, OrderPlatformClient


def create_pair(
    symbol: str = "RELIANCE-NSE",
    pair_id: str = "6408",
    name: str = "Reliance Industries",
    exchange: str = "NSE"
) -> PairInfo:
    """Factory function to create PairInfo instances for testing."""
    return PairInfo(name=name, pair_id=pair_id, exchange=exchange, symbol=symbol)


def create_alerts(pair_id: str, prices: List[float], name: Optional[str] = None) -> List[Alert]:
    """Factory function to create a list of alerts for one pair."""
    return [
        Alert(id=f"{pair_id}-{i}", pair_id=pair_id, price=price, name=name)
        for i, price in enumerate(prices, 1)
    ]


@pytest.fixture
async def fake_redis():
    """Create a FakeRedis instance for testing."""
    redis = fakeredis.aioredis.FakeRedis(decode_responses=True)
    yield redis
    await redis.flushall()
    await redis.aclose()


@pytest.fixture
def alert_client():
    """Mock alerting platform client."""
    client = AsyncMock(spec=AlertPlatformClient)
    client.delete_alert.side_effect = lambda alert: alert
    return client


@pytest.fixture
def order_client():
    """Mock order platform client."""
    client = AsyncMock(spec=OrderPlatformClient)
    client.get_gtt_orders.return_value = {}
    return client


@pytest.fixture
def container(fake_redis, alert_client, order_client):
    """Fully wired engine over empty repositories."""
    return build_container(redis=fake_redis, alert_client=alert_client, order_client=order_client)


@pytest.fixture
def reliance(container):
    """
    The RELIANCE scenario: one tv ticker, one pair, one alert.
    
    Ticker {RELIANCE: RELIANCE-NSE}, Pair {RELIANCE-NSE: 6408}, Alert {6408: [a1]}.
    """
    pair = create_pair()
    container.ticker_repo.set("RELIANCE", "RELIANCE-NSE")
    container.pair_repo.set("RELIANCE-NSE", pair)
    container.alert_repo.add_alert("6408", Alert(id="a1", pair_id="6408", price=2500.0))
    return pair
