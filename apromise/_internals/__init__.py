"""Internal virtual-time primitives."""

from .timer_queue import TimerQueue, TimerQueueEntry
from .virtual_clock import VirtualClock

__all__ = [
    "TimerQueue",
    "TimerQueueEntry",
    "VirtualClock",
]
