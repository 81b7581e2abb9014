"""Deferred-call services that promise reactions are dispatched on.

A scheduler only has to honour one contract: ``schedule(callback)`` runs
``callback`` after the current synchronous execution has finished, and
callbacks run in submission order. Promises never call reaction handlers
inline; every dispatch goes through the scheduler they were created with.

Two implementations are provided:

- ``ManualScheduler``: a deterministic queue drained explicitly with
  ``run_until_idle()``, plus virtual-time timers driven by ``advance()``.
  This is the default and the one tests use.
- ``AsyncioScheduler``: forwards to an asyncio event loop.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections import deque
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any, Protocol, runtime_checkable

from apromise._internals import TimerQueue, VirtualClock
from apromise._validators import coerce_delay, ensure_callable
from apromise.errors import SchedulerBindingError

logger = logging.getLogger(__name__)

Callback = Callable[[], Any]


@runtime_checkable
class Scheduler(Protocol):
    """Port for the deferred-call service."""

    def schedule(self, callback: Callback) -> None: ...


class ManualScheduler:
    """FIFO callback queue with a virtual clock, driven by the caller.

    ``schedule`` may be called from any thread; draining happens on the
    thread that calls ``run_until_idle``/``advance``.
    """

    def __init__(self, *, start_time: float = 0.0) -> None:
        self._ready: deque[Callback] = deque()
        self._timers = TimerQueue()
        self._clock = VirtualClock(start_time)
        self._lock = threading.Lock()

    @property
    def time(self) -> float:
        return self._clock.now

    @property
    def pending_timers(self) -> int:
        with self._lock:
            return len(self._timers)

    def schedule(self, callback: Callback) -> None:
        ensure_callable(callback, name="callback")
        with self._lock:
            self._ready.append(callback)

    def call_later(self, delay: float, callback: Callback) -> None:
        """Run ``callback`` once virtual time has advanced by ``delay`` seconds."""
        ensure_callable(callback, name="callback")
        with self._lock:
            self._timers.push(self._clock.deadline(delay), callback)

    def has_pending(self) -> bool:
        with self._lock:
            return bool(self._ready)

    def run_until_idle(self) -> int:
        """Run scheduled callbacks, including ones they schedule, until none are left.

        Returns the number of callbacks run. Exceptions raised by a callback
        propagate to the caller; callbacks queued behind it stay queued.
        """
        count = 0
        while True:
            with self._lock:
                if not self._ready:
                    return count
                callback = self._ready.popleft()
            callback()
            count += 1

    def advance(self, seconds: float) -> int:
        """Move virtual time forward, firing due timers in order.

        Scheduled callbacks are drained before the first timer and after
        every timer, so reactions triggered by a timer run before the next
        timer fires. Returns the number of timers fired.
        """
        return self._advance_to(
            self._clock.now + coerce_delay(seconds, name="seconds")
        )

    def run_all_timers(self) -> int:
        """Advance virtual time until no timers remain. Returns timers fired."""
        fired = 0
        while True:
            with self._lock:
                due = self._timers.peek_due()
            if due is None:
                self.run_until_idle()
                return fired
            fired += self._advance_to(due)

    def _advance_to(self, target: float) -> int:
        self.run_until_idle()
        fired = 0
        while True:
            with self._lock:
                due = self._timers.peek_due()
                if due is None or due > target:
                    break
                entry = self._timers.pop()
                self._clock.advance_to(entry.due)
            logger.debug("Firing timer #%d at t=%s", entry.sequence, entry.due)
            entry.callback()
            fired += 1
            self.run_until_idle()
        self._clock.advance_to(target)
        return fired

    def __repr__(self) -> str:
        return (
            f"ManualScheduler(time={self.time}, ready={len(self._ready)}, "
            f"timers={len(self._timers)})"
        )


class AsyncioScheduler:
    """Schedules callbacks on an asyncio event loop.

    Without an explicit loop the scheduler is unbound: every call looks up
    the running loop and nothing is cached, so one instance serves
    successive ``asyncio.run`` calls. Promises pin an unbound scheduler
    with ``bind()`` when they are created or chained on a loop thread, so
    settling them later from another thread still reaches that loop.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    @property
    def is_bound(self) -> bool:
        return self._loop is not None

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is not None:
            return self._loop
        try:
            return asyncio.get_running_loop()
        except RuntimeError:
            raise SchedulerBindingError(self) from None

    def bind(self) -> AsyncioScheduler:
        """Return a scheduler pinned to the running loop (``self`` if already bound)."""
        if self._loop is not None:
            return self
        return AsyncioScheduler(self.loop)

    def schedule(self, callback: Callback) -> None:
        ensure_callable(callback, name="callback")
        self.loop.call_soon_threadsafe(callback)

    def call_later(self, delay: float, callback: Callback) -> asyncio.TimerHandle:
        ensure_callable(callback, name="callback")
        return self.loop.call_later(coerce_delay(delay, name="delay"), callback)

    def __repr__(self) -> str:
        return f"AsyncioScheduler(loop={self._loop!r})"


_default_lock = threading.Lock()
_default_scheduler: Scheduler | None = None


def _create_default_scheduler() -> Scheduler:
    from apromise.config import load_config

    config = load_config()
    if config.scheduler == "asyncio":
        return AsyncioScheduler()
    return ManualScheduler()


def get_default_scheduler() -> Scheduler:
    """Return the process-wide scheduler, creating it from configuration on first use."""
    global _default_scheduler
    with _default_lock:
        if _default_scheduler is None:
            _default_scheduler = _create_default_scheduler()
            logger.debug("Created default scheduler %r", _default_scheduler)
        return _default_scheduler


def set_default_scheduler(scheduler: Scheduler | None) -> Scheduler | None:
    """Install ``scheduler`` as the default and return the previous one.

    Passing ``None`` resets the default so it is recreated from
    configuration on next use.
    """
    global _default_scheduler
    if scheduler is not None and not isinstance(scheduler, Scheduler):
        raise TypeError(
            f"scheduler must implement schedule(), got {type(scheduler).__name__}"
        )
    with _default_lock:
        previous = _default_scheduler
        _default_scheduler = scheduler
    return previous


@contextmanager
def use_scheduler(scheduler: Scheduler) -> Iterator[Scheduler]:
    """Temporarily install ``scheduler`` as the default."""
    previous = set_default_scheduler(scheduler)
    try:
        yield scheduler
    finally:
        set_default_scheduler(previous)


__all__ = [
    "AsyncioScheduler",
    "Callback",
    "ManualScheduler",
    "Scheduler",
    "get_default_scheduler",
    "set_default_scheduler",
    "use_scheduler",
]
