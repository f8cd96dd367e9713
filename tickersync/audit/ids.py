"""Audit plugin identifiers."""

ALERTS = "alerts"
INTEGRITY = "integrity"
DUPLICATE_PAIR_IDS = "duplicate-pair-ids"
TICKER_COLLISION = "ticker-collision"
ORPHAN_ALERTS = "orphan-alerts"
ORPHAN_EXCHANGE = "orphan-exchange"
ORPHAN_FLAGS = "orphan-flags"
ORPHAN_SEQUENCES = "orphan-sequences"
TRADE_RISK = "trade-risk"
STALE_REVIEW = "stale-review"

ALL = [
    ALERTS,
    INTEGRITY,
    DUPLICATE_PAIR_IDS,
    TICKER_COLLISION,
    ORPHAN_ALERTS,
    ORPHAN_EXCHANGE,
    ORPHAN_FLAGS,
    ORPHAN_SEQUENCES,
    TRADE_RISK,
    STALE_REVIEW,
]
