"""Pending-event queue for the trigger simulator.

Events are kept in a heap keyed on ``(time, counter)``. The counter grows with
every push, so events scheduled for the same logical time come back out in
the order they went in. The queue does not own a clock; the engine advances
its own time to whatever it pops.
"""
from heapq import heappush, heappop
from typing import List, Optional, Tuple
import logging
import math

from .event import Event

_logger = logging.getLogger(__name__)


class EventQueue:
    """Time-ordered queue of pending `Event` objects with FIFO tie-break.

    Methods:
    - `push(event)`: add an event.
    - `pop_min()`: remove and return the earliest event (None when empty).
    - `peek_events(...)`: look ahead without modifying the queue.
    - `clear()`: discard everything that is pending.
    """

    def __init__(self):
        self._queue: List[Tuple[float, int, Event]] = []
        self._counter: int = 0

    def push(self, event: Event) -> int:
        """Insert `event` and return its insertion index.

        Raises TypeError for anything that is not an `Event` and ValueError
        for a negative or non-finite time.
        """
        if not isinstance(event, Event):
            raise TypeError("event must be an Event instance")
        if not isinstance(event.time, (int, float)) or isinstance(event.time, bool):
            raise TypeError("event time must be a number")
        if not math.isfinite(event.time):
            raise ValueError("event time must be finite")
        if event.time < 0:
            raise ValueError("event time must be >= 0")

        heappush(self._queue, (event.time, self._counter, event))
        self._counter += 1
        return self._counter - 1

    def pop_min(self) -> Optional[Event]:
        if not self._queue:
            return None
        _time, _idx, event = heappop(self._queue)
        return event

    def is_empty(self) -> bool:
        return not self._queue

    def clear(self) -> None:
        if self._queue:
            _logger.debug("discarding %d pending event(s)", len(self._queue))
        self._queue = []

    def __len__(self) -> int:
        return len(self._queue)

    def peek_events(self, channel: Optional[str] = None, source_id: Optional[str] = None, limit: Optional[int] = None) -> List[Event]:
        """Look ahead at upcoming events without modifying the queue.

        Returns events in the order `pop_min` would produce them, optionally
        filtered by channel and/or source id. If both filters are given, both
        must match.

        Args:
            channel: Optional channel name to filter by.
            source_id: Optional source id to filter by.
            limit: Optional maximum number of events to return.
        """
        result = []
        for _time, _idx, event in sorted(self._queue):
            if channel is not None and event.channel != channel:
                continue
            if source_id is not None and event.source_id != source_id:
                continue

            result.append(event)

            if limit is not None and len(result) >= limit:
                break

        return result
