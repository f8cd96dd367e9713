"""Time utilities for visit timestamps and timezone handling."""
from datetime import datetime, timezone
from typing import Optional
import pytz


MILLIS_PER_DAY = 24 * 60 * 60 * 1000


def now_millis() -> int:
    """Current UTC time as epoch milliseconds."""
    return int(datetime.now(timezone.utc).timestamp() * 1000)


def days_since(timestamp_ms: int, now_ms: Optional[int] = None) -> int:
    """
    Whole days elapsed since an epoch-millis timestamp.
    
    Args:
        timestamp_ms: Past timestamp in epoch millis
        now_ms: Reference time (defaults to now)
        
    Returns:
        Number of complete days, never negative
    """
    if now_ms is None:
        now_ms = now_millis()
    return max(0, (now_ms - timestamp_ms) // MILLIS_PER_DAY)


def format_timestamp(timestamp_ms: int, timezone_str: str = "Asia/Kolkata") -> str:
    """
    Render an epoch-millis timestamp in the display timezone.
    
    Args:
        timestamp_ms: Epoch millis
        timezone_str: pytz timezone name
        
    Returns:
        "YYYY-MM-DD HH:MM TZ" string
    """
    tz = pytz.timezone(timezone_str)
    moment = datetime.fromtimestamp(timestamp_ms / 1000, tz=pytz.utc).astimezone(tz)
    return moment.strftime("%Y-%m-%d %H:%M %Z")
