"""In-process feed of alert repaint events."""
import asyncio
import logging
from collections import deque
from dataclasses import dataclass
from typing import Deque, List, Set

from tickersync.utils.time import now_millis


logger = logging.getLogger(__name__)


@dataclass
class AlertFeedEvent:
    """A tv ticker whose alert display must be refreshed."""
    tv_ticker: str
    timestamp: int


class AlertFeed:
    """Fan-out of repaint events to subscriber queues."""
    
    def __init__(self, history: int = 100):
        self._history: Deque[AlertFeedEvent] = deque(maxlen=history)
        self._subscribers: Set[asyncio.Queue] = set()
    
    def publish(self, tv_ticker: str) -> AlertFeedEvent:
        event = AlertFeedEvent(tv_ticker=tv_ticker, timestamp=now_millis())
        self._history.append(event)
        for queue in list(self._subscribers):
            try:
                queue.put_nowait(event)
            except asyncio.QueueFull:
                logger.warning(f"Alert feed subscriber full, dropping event for {tv_ticker}")
        return event
    
    def subscribe(self, maxsize: int = 100) -> asyncio.Queue:
        queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize)
        self._subscribers.add(queue)
        return queue
    
    def unsubscribe(self, queue: asyncio.Queue):
        self._subscribers.discard(queue)
    
    def recent(self) -> List[AlertFeedEvent]:
        return list(self._history)
