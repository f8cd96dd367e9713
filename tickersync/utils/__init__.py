"""Utilities package initialization."""
from tickersync.utils.time import now_millis, days_since, format_timestamp
from tickersync.utils.formatting import format_finding, format_section_header, format_report

__all__ = [
    "now_millis",
    "days_since",
    "format_timestamp",
    "format_finding",
    "format_section_header",
    "format_report"
]
