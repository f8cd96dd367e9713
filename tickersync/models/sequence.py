"""Analysis timeframe sequence."""
from enum import Enum


class SequenceType(str, Enum):
    """Timeframe sequence a ticker is reviewed in."""
    MWD = "MWD"
    YR = "YR"
