"""
Event schedule — binary heap of predicted events, earliest first.

Stale events are never removed here. They sit in the heap until they are
popped and the driver checks ``Event.is_valid``.
"""

import heapq
import itertools
from typing import List, Optional, Tuple

from collisions.event import Event


class ScheduleExhausted(IndexError):
    """Raised by ``extract_min`` on an empty schedule."""


class EventSchedule:
    """Priority queue ordered by event time, ties broken by insertion order."""

    def __init__(self):
        self._heap: List[Tuple[float, int, Event]] = []
        self._seq = itertools.count()
        self.inserted = 0
        self.extracted = 0

    def insert(self, event: Event) -> None:
        heapq.heappush(self._heap, (event.time, next(self._seq), event))
        self.inserted += 1

    def extract_min(self) -> Event:
        if not self._heap:
            raise ScheduleExhausted("extract_min from an empty schedule")
        self.extracted += 1
        return heapq.heappop(self._heap)[2]

    def peek(self) -> Optional[Event]:
        return self._heap[0][2] if self._heap else None

    def clear(self) -> None:
        self._heap.clear()

    def __len__(self) -> int:
        return len(self._heap)

    def __bool__(self) -> bool:
        return bool(self._heap)
