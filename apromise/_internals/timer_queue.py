"""Min-heap queue of callbacks ordered by virtual due time."""

from __future__ import annotations

import heapq
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class TimerQueueEntry:
    due: float
    sequence: int
    callback: Callable[[], Any]


class TimerQueue:
    """Timers due at the same instant pop in submission order."""

    def __init__(self) -> None:
        self._sequence = 0
        self._items: list[tuple[float, int, Callable[[], Any]]] = []

    def push(self, due: float, callback: Callable[[], Any]) -> None:
        self._sequence += 1
        heapq.heappush(self._items, (due, self._sequence, callback))

    def peek_due(self) -> float | None:
        if not self._items:
            return None
        return self._items[0][0]

    def pop(self) -> TimerQueueEntry:
        due, sequence, callback = heapq.heappop(self._items)
        return TimerQueueEntry(due=due, sequence=sequence, callback=callback)

    def empty(self) -> bool:
        return not self._items

    def __len__(self) -> int:
        return len(self._items)
