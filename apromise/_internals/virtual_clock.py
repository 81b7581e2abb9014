"""Monotonic virtual time for the manual scheduler."""

from __future__ import annotations

from apromise._validators import coerce_delay, coerce_finite


class VirtualClock:
    """Time that only moves when the scheduler fires timers or advances."""

    def __init__(self, start: float = 0.0) -> None:
        self._now = coerce_finite(start, name="start_time")

    @property
    def now(self) -> float:
        return self._now

    def deadline(self, delay: float) -> float:
        """Due time for a timer armed ``delay`` seconds from now."""
        return self._now + coerce_delay(delay, name="delay")

    def advance_to(self, target: float) -> None:
        # Timers due in the past fire at their own time, so never rewind.
        if target > self._now:
            self._now = target

    def __repr__(self) -> str:
        return f"VirtualClock(now={self._now})"
