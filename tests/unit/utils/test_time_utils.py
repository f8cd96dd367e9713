"""Unit tests for time utilities."""
import pytest

from tickersync.utils.time import MILLIS_PER_DAY, days_since, format_timestamp, now_millis


@pytest.mark.unit
class TestDaysSince:
    """Test days_since function."""
    
    def test_whole_days(self):
        """✅ Partial days are truncated."""
        now = 100 * MILLIS_PER_DAY
        
        assert days_since(now - 3 * MILLIS_PER_DAY - 1000, now) == 3
    
    def test_future_timestamp_clamped(self):
        """✅ Timestamps ahead of now → 0."""
        assert days_since(2 * MILLIS_PER_DAY, MILLIS_PER_DAY) == 0
    
    def test_defaults_to_now(self):
        """✅ Without now_ms the current clock is used."""
        assert days_since(now_millis() - 2 * MILLIS_PER_DAY) == 2


@pytest.mark.unit
class TestFormatTimestamp:
    """Test format_timestamp function."""
    
    def test_ist(self):
        """✅ Epoch 0 is 05:30 in Asia/Kolkata."""
        assert format_timestamp(0) == "1970-01-01 05:30 IST"
    
    def test_utc(self):
        """✅ Other pytz zones are honoured."""
        assert format_timestamp(MILLIS_PER_DAY, "UTC") == "1970-01-02 00:00 UTC"
