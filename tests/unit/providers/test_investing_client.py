"""Unit tests for InvestingClient.

Covers alert creation and deletion, symbol search parsing and error
handling against a mocked HTTP client.
"""
import json
import pytest
from unittest.mock import AsyncMock, MagicMock, patch
import httpx

from tickersync.models.pair import Alert, PairInfo
from tickersync.providers import ProviderError
from tickersync.providers.investing import InvestingClient


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def mock_client():
    """Mock httpx AsyncClient."""
    with patch("httpx.AsyncClient") as mock:
        client_instance = AsyncMock()
        mock.return_value = client_instance
        yield client_instance


@pytest.fixture
def client(mock_client):
    """Create InvestingClient instance."""
    return InvestingClient(base_url="https://in.investing.test/")


def text_response(body: str) -> MagicMock:
    resp = MagicMock()
    resp.status_code = 200
    resp.text = body
    return resp


# ============================================================================
# Alerts
# ============================================================================

@pytest.mark.unit
@pytest.mark.asyncio
class TestCreateAlert:
    """Test create_alert method."""
    
    async def test_price_above_ltp_is_over(self, client, mock_client):
        """✅ Price above last traded price → threshold over."""
        mock_client.post.return_value = text_response(json.dumps({"alert_ID": 123}))
        
        alert = await client.create_alert("Reliance Industries", "6408", 2700.0, 2500.0)
        
        assert alert == Alert(id="123", pair_id="6408", price=2700.0, name="Reliance Industries")
        url = mock_client.post.call_args.args[0]
        data = mock_client.post.call_args.kwargs["data"]
        assert url == "https://in.investing.test/useralerts/service/create"
        assert data["alertParams[threshold]"] == "over"
        assert data["alertParams[pair_ID]"] == "6408"
    
    async def test_price_below_ltp_is_under(self, client, mock_client):
        """✅ Price below last traded price → threshold under."""
        mock_client.post.return_value = text_response(json.dumps({"data": {"alert_ID": "9"}}))
        
        alert = await client.create_alert("Reliance Industries", "6408", 2300.0, 2500.0)
        
        assert alert.id == "9"
        assert mock_client.post.call_args.kwargs["data"]["alertParams[threshold]"] == "under"
    
    async def test_missing_alert_id(self, client, mock_client):
        """✅ Response without an id → ProviderError."""
        mock_client.post.return_value = text_response("")
        
        with pytest.raises(ProviderError) as exc:
            await client.create_alert("X", "1", 1.0, 2.0)
        
        assert "no alert id" in str(exc.value)
    
    async def test_http_error(self, client, mock_client):
        """✅ HTTP error → ProviderError."""
        mock_client.post.side_effect = httpx.HTTPError("Connection failed")
        
        with pytest.raises(ProviderError) as exc:
            await client.create_alert("X", "1", 1.0, 2.0)
        
        assert "Failed to create alert" in str(exc.value)


@pytest.mark.unit
@pytest.mark.asyncio
class TestDeleteAlert:
    """Test delete_alert method."""
    
    async def test_success(self, client, mock_client):
        """✅ Success → the deleted alert is returned."""
        mock_client.post.return_value = text_response("{}")
        alert = Alert(id="a1", pair_id="6408", price=2500.0)
        
        assert await client.delete_alert(alert) is alert
        assert mock_client.post.call_args.kwargs["data"]["alertParams[alert_ID]"] == "a1"
    
    async def test_status_error(self, client, mock_client):
        """✅ 403 → ProviderError."""
        error_resp = MagicMock()
        error_resp.status_code = 403
        mock_client.post.side_effect = httpx.HTTPStatusError("403 Forbidden", request=None, response=error_resp)
        
        with pytest.raises(ProviderError):
            await client.delete_alert(Alert(id="a1", pair_id="6408", price=2500.0))


# ============================================================================
# Symbol search
# ============================================================================

@pytest.mark.unit
@pytest.mark.asyncio
class TestFetchSymbolData:
    """Test fetch_symbol_data method."""
    
    async def test_parses_results(self, client, mock_client):
        """✅ Each hit becomes a PairInfo."""
        mock_client.post.return_value = text_response(json.dumps({
            "All": [
                {"name": "Reliance Industries", "pair_ID": 6408, "exchange_name_short": "NSE", "symbol": "RELI"},
                {"name": "Reliance Industries", "pair_ID": 18225, "exchange_name_short": "BSE", "symbol": "RELI"},
            ]
        }))
        
        pairs = await client.fetch_symbol_data("RELIANCE")
        
        assert pairs[0] == PairInfo(name="Reliance Industries", pair_id="6408", exchange="NSE", symbol="RELI")
        assert [p.exchange for p in pairs] == ["NSE", "BSE"]
    
    async def test_no_results(self, client, mock_client):
        """✅ Empty result → ProviderError."""
        mock_client.post.return_value = text_response(json.dumps({"All": []}))
        
        with pytest.raises(ProviderError) as exc:
            await client.fetch_symbol_data("ZZZ")
        
        assert "No results found" in str(exc.value)
    
    async def test_unparsable_body(self, client, mock_client):
        """✅ Non-JSON body → ProviderError."""
        mock_client.post.return_value = text_response("<html>")
        
        with pytest.raises(ProviderError):
            await client.fetch_symbol_data("RELIANCE")
