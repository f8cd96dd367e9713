"""Unit tests for the ticker and category routes."""
import json
import pytest
from unittest.mock import AsyncMock, patch
from fastapi import HTTPException, status

from tickersync.api.routes.categories import (
    RecordRequest,
    UniverseRequest,
    clean_categories,
    get_category,
    record_category,
    update_default_list,
)
from tickersync.api.routes.health import check_store_health, health_check
from tickersync.api.routes.tickers import (
    CreateAlertRequest,
    MapRequest,
    PairPayload,
    SequenceRequest,
    StopTrackingRequest,
    VisitRequest,
    create_alert,
    map_ticker,
    record_visit,
    resolve_ticker,
    search_pairs,
    set_sequence,
    stop_tracking,
)
from tickersync.models.category import CategoryFamily
from tickersync.models.pair import Alert
from tickersync.models.sequence import SequenceType
from tickersync.providers import ProviderError


def reli_payload(symbol="RELI") -> PairPayload:
    return PairPayload(name="Reliance Industries", pair_id="6408", exchange="NSE", symbol=symbol)


# ============================================================================
# Tickers
# ============================================================================

@pytest.mark.unit
@pytest.mark.asyncio
class TestMapRoute:
    """Test POST /api/tickers/map."""
    
    async def test_unconfirmed_prompt_returns_409(self, reliance, container):
        """✅ Guard rail not confirmed → 409 with prompts, nothing written."""
        response = await map_ticker(MapRequest(tv_ticker="RELI_TV", pair=reli_payload()), container=container)
        
        assert response.status_code == status.HTTP_409_CONFLICT
        body = json.loads(response.body)
        assert [p["code"] for p in body["prompts"]] == ["DUPLICATE_PAIR_ID"]
        assert container.pair_repo.keys() == ["RELIANCE-NSE"]
    
    async def test_confirmed_prompt_maps(self, reliance, container):
        """✅ Confirmed codes allow the mapping and persist it."""
        request = MapRequest(tv_ticker="RELI_TV", pair=reli_payload(), confirm=["DUPLICATE_PAIR_ID"])
        
        response = await map_ticker(request, container=container)
        
        assert response == {"tv": "RELI_TV", "investing": "RELI", "pairId": "6408"}
        assert container.pair_repo.dirty is False
    
    async def test_clean_mapping(self, container):
        """✅ No conflicts → mapped immediately."""
        response = await map_ticker(MapRequest(tv_ticker="RELIANCE", pair=reli_payload("RELIANCE-NSE")), container=container)
        
        assert response["investing"] == "RELIANCE-NSE"


@pytest.mark.unit
@pytest.mark.asyncio
class TestTickerRoutes:
    """Test the remaining ticker endpoints."""
    
    async def test_resolve(self, reliance, container):
        """✅ Every known identifier is returned."""
        container.categories.record_category(CategoryFamily.FLAG, 2, ["RELIANCE"])
        container.recent_repo.touch("RELIANCE", 86_400_000)
        
        response = await resolve_ticker(tv="RELIANCE", container=container)
        
        assert response["investing"] == "RELIANCE-NSE"
        assert response["pair"]["pairId"] == "6408"
        assert response["alerts"] == [{"id": "a1", "price": 2500.0}]
        assert response["flag"] == 2
        assert response["watch"] is None
        assert response["exchange"] == "RELIANCE"
        assert response["lastVisitDisplay"] == "1970-01-02 05:30 IST"
    
    async def test_resolve_unknown(self, container):
        """✅ Unknown tv ticker resolves to nulls."""
        response = await resolve_ticker(tv="M&M", container=container)
        
        assert response["investing"] is None
        assert response["alerts"] is None
        assert response["kite"] == "M_M"
    
    async def test_search_provider_error(self, container, alert_client):
        """✅ Provider failure → 502."""
        alert_client.fetch_symbol_data.side_effect = ProviderError("No results found for symbol: X")
        
        with pytest.raises(HTTPException) as exc:
            await search_pairs(q="X", container=container)
        
        assert exc.value.status_code == status.HTTP_502_BAD_GATEWAY
    
    async def test_stop_tracking(self, reliance, container):
        """✅ Stop by tv ticker empties the repositories."""
        response = await stop_tracking(StopTrackingRequest(tv_ticker="RELIANCE"), container=container)
        await container.alerts.drain()
        
        assert response == {"cleaned": False}
        assert container.pair_repo.size() == 0
    
    async def test_stop_tracking_requires_ticker(self, container):
        """✅ Neither ticker given → 400."""
        with pytest.raises(HTTPException) as exc:
            await stop_tracking(StopTrackingRequest(), container=container)
        
        assert exc.value.status_code == status.HTTP_400_BAD_REQUEST
    
    async def test_visit_and_sequence(self, container):
        """✅ tv-keyed records are written."""
        visit = await record_visit(VisitRequest(tv_ticker="TCS"), container=container)
        sequence = await set_sequence(SequenceRequest(tv_ticker="TCS", sequence=SequenceType.YR), container=container)
        
        assert container.recent_repo.get("TCS") == visit["lastVisit"]
        assert sequence["sequence"] == "YR"
    
    async def test_create_alert(self, reliance, container, alert_client):
        """✅ Created alert is returned with its pairId."""
        alert_client.create_alert.return_value = Alert(id="a2", pair_id="6408", price=2700.0)
        
        response = await create_alert(
            CreateAlertRequest(investing_ticker="RELIANCE-NSE", price=2700.0, ltp=2500.0),
            container=container,
        )
        
        assert response == {"pairId": "6408", "id": "a2", "price": 2700.0}
    
    async def test_create_alert_unmapped(self, container):
        """✅ No pair → 400."""
        with pytest.raises(HTTPException) as exc:
            await create_alert(CreateAlertRequest(investing_ticker="X", price=1.0, ltp=2.0), container=container)
        
        assert exc.value.status_code == status.HTTP_400_BAD_REQUEST


# ============================================================================
# Categories
# ============================================================================

@pytest.mark.unit
@pytest.mark.asyncio
class TestCategoryRoutes:
    """Test category endpoints."""
    
    async def test_record_and_get(self, container):
        """✅ Recorded tickers are listed."""
        response = await record_category(
            CategoryFamily.WATCH, 1, RecordRequest(tickers=["TCS", "INFY"]), container=container
        )
        
        assert response["added"] == ["INFY", "TCS"]
        assert (await get_category(CategoryFamily.WATCH, 1, container=container))["tickers"] == ["INFY", "TCS"]
    
    async def test_record_default_watch_rejected(self, container):
        """✅ Derived list → 400."""
        with pytest.raises(HTTPException) as exc:
            await record_category(CategoryFamily.WATCH, 5, RecordRequest(tickers=["TCS"]), container=container)
        
        assert exc.value.status_code == status.HTTP_400_BAD_REQUEST
    
    async def test_bad_index(self, container):
        """✅ Index out of range → 400."""
        with pytest.raises(HTTPException):
            await get_category(CategoryFamily.FLAG, 8, container=container)
    
    async def test_default_and_clean(self, container):
        """✅ Default list derives; clean honours dry_run."""
        container.categories.record_category(CategoryFamily.WATCH, 0, ["GONE"])
        
        default = await update_default_list(UniverseRequest(universe=["TCS"]), container=container)
        dry = await clean_categories(CategoryFamily.WATCH, UniverseRequest(universe=["TCS"]), container=container)
        wet = await clean_categories(
            CategoryFamily.WATCH, UniverseRequest(universe=["TCS"], dry_run=False), container=container
        )
        
        assert default == {"count": 1}
        assert dry["count"] == 1
        assert wet["count"] == 1
        assert not container.categories.is_watched("GONE")


# ============================================================================
# Health
# ============================================================================

@pytest.mark.unit
@pytest.mark.asyncio
class TestHealthRoutes:
    """Test health endpoints."""
    
    async def test_health(self):
        """✅ Static health payload."""
        assert (await health_check())["status"] == "healthy"
    
    async def test_store_health(self, reliance, container, fake_redis):
        """✅ Sizes and dirty stores are reported."""
        with patch("tickersync.api.routes.health.get_redis", new=AsyncMock(return_value=fake_redis)):
            response = await check_store_health(container=container)
        
        assert response["status"] == "healthy"
        assert response["repositories"]["pairs"] == 1
        assert "pairs" in response["dirty"]
    
    async def test_store_unhealthy(self, container):
        """✅ Redis failure → unhealthy payload."""
        with patch("tickersync.api.routes.health.get_redis", new=AsyncMock(side_effect=ConnectionError("down"))):
            response = await check_store_health(container=container)
        
        assert response["status"] == "unhealthy"
        assert response["error_type"] == "ConnectionError"
