"""Unit tests for the audit plugins.

Each plugin is run against a wired container so findings reflect the same
repositories the managers write to.
"""
import pytest

from tickersync.audit import ids
from tickersync.audit.base import TargetsNotSupportedError
from tickersync.audit.plugins import StaleReviewPlugin, TradeRiskPlugin
from tickersync.models.audit import Severity, Status
from tickersync.models.category import CategoryFamily
from tickersync.models.order import Order, OrderType
from tickersync.models.pair import Alert
from tickersync.models.sequence import SequenceType
from tickersync.utils.time import MILLIS_PER_DAY
from tests.conftest import create_alerts, create_pair


NOW = 1_700_000_000_000


async def run(container, plugin_id, targets=None):
    return await container.registry.must_get(plugin_id).run(targets)


# ============================================================================
# Alerts
# ============================================================================

@pytest.mark.unit
@pytest.mark.asyncio
class TestAlertsPlugin:
    """Test alert coverage findings."""
    
    async def test_single_alert(self, reliance, container):
        """✅ One alert → SINGLE_ALERT HIGH."""
        findings = await run(container, ids.ALERTS)
        
        assert len(findings) == 1
        assert findings[0].code == "SINGLE_ALERT"
        assert findings[0].severity == Severity.HIGH
        assert findings[0].status == Status.FAIL
    
    async def test_bracket_passes(self, reliance, container):
        """✅ Two alerts → no finding."""
        container.alert_repo.add_alert("6408", Alert(id="a2", pair_id="6408", price=2700.0))
        
        assert await run(container, ids.ALERTS) == []
    
    async def test_no_alerts(self, container):
        """✅ Pair without alerts → NO_ALERTS MEDIUM."""
        container.pair_repo.set("TCS-NSE", create_pair(symbol="TCS-NSE", pair_id="1"))
        
        findings = await run(container, ids.ALERTS)
        
        assert [(f.code, f.severity) for f in findings] == [("NO_ALERTS", Severity.MEDIUM)]
    
    async def test_targeted_no_pair(self, container):
        """✅ Targeted ticker without PairInfo → NO_PAIR HIGH."""
        findings = await run(container, ids.ALERTS, ["GHOST"])
        
        assert [(f.code, f.target) for f in findings] == [("NO_PAIR", "GHOST")]
    
    async def test_watched_tickers_skipped(self, reliance, container):
        """✅ Watched tv alias suppresses the finding."""
        container.categories.record_category(CategoryFamily.WATCH, 0, ["RELIANCE"])
        
        assert await run(container, ids.ALERTS) == []
    
    async def test_batches_large_universe(self, container):
        """✅ Every ticker is audited across batch boundaries."""
        for i in range(120):
            container.pair_repo.set(f"T{i}", create_pair(symbol=f"T{i}", pair_id=str(i)))
        
        findings = await run(container, ids.ALERTS)
        
        assert len(findings) == 120


# ============================================================================
# Integrity
# ============================================================================

@pytest.mark.unit
@pytest.mark.asyncio
class TestIntegrityPlugins:
    """Test integrity, duplicate pairId and collision audits."""
    
    async def test_unmapped_pair(self, container):
        """✅ Pair without a tv edge → NO_TV_MAPPING HIGH."""
        container.pair_repo.set("TCS-NSE", create_pair(symbol="TCS-NSE", pair_id="1"))
        
        findings = await run(container, ids.INTEGRITY)
        
        assert [(f.code, f.target, f.severity) for f in findings] == [("NO_TV_MAPPING", "TCS-NSE", Severity.HIGH)]
    
    async def test_one_finding_per_pair_id(self, reliance, container):
        """✅ A mapped alias covers its unmapped duplicates."""
        container.pair_repo.set("RELI", create_pair(symbol="RELI"))
        
        assert await run(container, ids.INTEGRITY) == []

    async def test_mapped_later_alias_covers_pair_id(self, container):
        """✅ Unmapped first alias, mapped second alias → pair is reachable."""
        container.pair_repo.set("RELI", create_pair(symbol="RELI"))
        container.pair_repo.set("RELIANCE-NSE", create_pair())
        container.ticker_repo.set("RELIANCE", "RELIANCE-NSE")

        assert await run(container, ids.INTEGRITY) == []

    async def test_duplicate_pair_ids(self, reliance, container):
        """✅ Shared pairId → one finding named after the pair."""
        container.pair_repo.set("RELI", create_pair(symbol="RELI"))
        
        findings = await run(container, ids.DUPLICATE_PAIR_IDS)
        
        assert len(findings) == 1
        assert findings[0].target == "Reliance Industries"
        assert findings[0].data["investingTickers"] == ["RELIANCE-NSE", "RELI"]
        assert findings[0].severity == Severity.MEDIUM
    
    async def test_ticker_collision(self, reliance, container):
        """✅ Two tv aliases → TICKER_COLLISION listing both."""
        container.ticker_repo.set("RELIANCE_ALT", "RELIANCE-NSE")
        
        findings = await run(container, ids.TICKER_COLLISION)
        
        assert findings[0].data["tvTickers"] == ["RELIANCE", "RELIANCE_ALT"]
    
    @pytest.mark.parametrize("plugin_id", [
        ids.INTEGRITY,
        ids.DUPLICATE_PAIR_IDS,
        ids.TICKER_COLLISION,
        ids.ORPHAN_ALERTS,
        ids.ORPHAN_EXCHANGE,
        ids.ORPHAN_FLAGS,
        ids.ORPHAN_SEQUENCES,
        ids.TRADE_RISK,
        ids.STALE_REVIEW,
    ])
    async def test_whole_repository_plugins_reject_targets(self, container, plugin_id):
        """✅ Targets → TargetsNotSupportedError."""
        with pytest.raises(TargetsNotSupportedError):
            await run(container, plugin_id, ["RELIANCE"])


# ============================================================================
# Orphans
# ============================================================================

@pytest.mark.unit
@pytest.mark.asyncio
class TestOrphanPlugins:
    """Test orphan detection."""
    
    async def test_orphan_alerts(self, container):
        """✅ Alerts without a pair → NO_PAIR_MAPPING named after the alert."""
        for alert in create_alerts("99", [1.0, 2.0], name="Old Co"):
            container.alert_repo.add_alert("99", alert)
        
        findings = await run(container, ids.ORPHAN_ALERTS)
        
        assert [(f.code, f.target) for f in findings] == [("NO_PAIR_MAPPING", "Old Co")]
        assert findings[0].data["alertCount"] == 2
    
    async def test_orphan_alerts_fall_back_to_pair_id(self, container):
        """✅ Unnamed alerts are reported by pairId."""
        container.alert_repo.add_alert("99", Alert(id="x", pair_id="99", price=1.0))
        
        findings = await run(container, ids.ORPHAN_ALERTS)
        
        assert findings[0].target == "99"
    
    async def test_orphan_exchange(self, reliance, container):
        """✅ Override for an unmapped tv ticker is reported; composites skipped."""
        container.exchange_repo.set("RELIANCE", "NSE:RELIANCE")
        container.exchange_repo.set("GONE", "NSE:GONE")
        container.exchange_repo.set("A/B", "NSE:A/B")
        
        findings = await run(container, ids.ORPHAN_EXCHANGE)
        
        assert [f.target for f in findings] == ["GONE"]
        assert findings[0].data["exchangeValue"] == "NSE:GONE"
    
    async def test_orphan_flags(self, reliance, container):
        """✅ Flag known to neither repository → ORPHAN_FLAG LOW."""
        container.categories.record_category(CategoryFamily.FLAG, 4, ["RELIANCE", "RELIANCE-NSE", "GONE", "(A+B)"])
        
        findings = await run(container, ids.ORPHAN_FLAGS)
        
        assert [(f.target, f.severity) for f in findings] == [("GONE", Severity.LOW)]
        assert findings[0].data["categoryIndex"] == 4
    
    async def test_orphan_sequences(self, reliance, container):
        """✅ Sequence for an unmapped tv ticker → ORPHAN_SEQUENCE."""
        container.sequence_repo.set("RELIANCE", SequenceType.MWD)
        container.sequence_repo.set("GONE", SequenceType.YR)
        
        findings = await run(container, ids.ORPHAN_SEQUENCES)
        
        assert [f.target for f in findings] == ["GONE"]
        assert findings[0].data["sequence"] == "YR"


# ============================================================================
# Review
# ============================================================================

@pytest.mark.unit
@pytest.mark.asyncio
class TestStaleReviewPlugin:
    """Test stale ticker detection with a fixed clock."""
    
    @pytest.fixture
    def plugin(self, container):
        return StaleReviewPlugin(
            container.recent_repo,
            container.ticker_repo,
            container.categories,
            threshold_days=90,
            clock=lambda: NOW,
        )
    
    async def test_never_opened(self, plugin, reliance):
        """✅ No recent entry → HIGH, daysSinceOpen -1."""
        findings = await plugin.run()
        
        assert findings[0].severity == Severity.HIGH
        assert findings[0].data["daysSinceOpen"] == -1
        assert "never opened" in findings[0].message
    
    async def test_opened_long_ago(self, plugin, reliance, container):
        """✅ Last opened 120 days ago → MEDIUM."""
        container.recent_repo.touch("RELIANCE", NOW - 120 * MILLIS_PER_DAY)
        
        findings = await plugin.run()
        
        assert findings[0].severity == Severity.MEDIUM
        assert findings[0].data["daysSinceOpen"] == 120
    
    async def test_recent_passes(self, plugin, reliance, container):
        """✅ Opened within the window → no finding."""
        container.recent_repo.touch("RELIANCE", NOW - 10 * MILLIS_PER_DAY)
        
        assert await plugin.run() == []
    
    async def test_watched_skipped(self, plugin, reliance, container):
        """✅ Watched tickers are never stale."""
        container.categories.record_category(CategoryFamily.WATCH, 0, ["RELIANCE"])
        
        assert await plugin.run() == []


@pytest.mark.unit
@pytest.mark.asyncio
class TestTradeRiskPlugin:
    """Test the risk ladder."""
    
    @pytest.fixture
    def plugin(self, container):
        return TradeRiskPlugin(container.order_repo, risk_limit=6400.0, tolerance=0.01)
    
    def orders(self, stop: float, qty: int):
        return [
            Order(id="entry", symbol="M&M", type=OrderType.SINGLE, prices=[100.0], qty=qty),
            Order(id="oco", symbol="M&M", type=OrderType.TWO_LEG, prices=[stop, 200.0], qty=qty),
        ]
    
    @pytest.mark.parametrize("stop,qty", [(50.0, 128), (50.0, 64), (60.0, 80)])
    async def test_valid_multiples(self, plugin, container, stop, qty):
        """✅ Risk of 6400 or 3200 passes."""
        container.order_repo.set("M&M", self.orders(stop, qty))
        
        assert await plugin.run() == []
    
    async def test_invalid_multiple(self, plugin, container):
        """✅ Risk 5000 → INVALID_RISK_MULTIPLE HIGH with the order id."""
        container.order_repo.set("M&M", self.orders(50.0, 100))
        
        findings = await plugin.run()
        
        assert findings[0].code == "INVALID_RISK_MULTIPLE"
        assert findings[0].data["orderId"] == "oco"
        assert findings[0].data["computedRisk"] == 5000.0
    
    async def test_within_tolerance(self, plugin):
        """✅ 1% either side of a rung is accepted."""
        assert plugin.is_valid_risk(6400 * 1.009)
        assert plugin.is_valid_risk(3200 * 0.991)
        assert not plugin.is_valid_risk(6400 * 1.02)
    
    async def test_no_entry_order_skipped(self, plugin, container):
        """✅ OCO without a single-leg entry is not evaluated."""
        container.order_repo.set("M&M", self.orders(50.0, 100)[1:])
        
        assert await plugin.run() == []
