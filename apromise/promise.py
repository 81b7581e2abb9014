"""
Single-assignment deferred values.

A ``Promise`` starts ``PENDING`` and settles exactly once, either
``FULFILLED`` with a value or ``REJECTED`` with a reason. Observers register
handlers with ``then``; handlers always run on a later turn of the promise's
scheduler, whether they were registered before or after settlement.

A promise fulfilled with another promise stores it as is. Observers see the
outcome of the innermost promise: ``then`` follows fulfilled-with-promise
links until it reaches a pending or plainly settled promise. Rejection
reasons are never unwrapped.

Example:
    >>> scheduler = ManualScheduler()
    >>> p = Promise(lambda resolve, reject: resolve(5), scheduler=scheduler)
    >>> doubled = p.then(lambda v: v * 2)
    >>> scheduler.run_until_idle()
    1
    >>> doubled.value
    10
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Generator
from dataclasses import dataclass
from enum import Enum
from functools import partial
from typing import Any, Generic, TypeVar

from frozendict import frozendict

from apromise import config
from apromise._validators import ensure_callable, ensure_optional_callable
from apromise.debug import CodeLocation, capture_creation_site
from apromise.errors import ChainingCycleError, SchedulerBindingError
from apromise.outcome import Fulfilled, Outcome, Rejected
from apromise.scheduler import AsyncioScheduler, Scheduler, get_default_scheduler

logger = logging.getLogger(__name__)

T = TypeVar("T")

ResolveFn = Callable[..., None]
RejectFn = Callable[..., None]
Executor = Callable[[ResolveFn, RejectFn], Any]
Handler = Callable[[Any], Any]


class PromiseState(str, Enum):
    PENDING = "PENDING"
    FULFILLED = "FULFILLED"
    REJECTED = "REJECTED"


@dataclass(frozen=True)
class _Reaction:
    """Handlers registered by one ``then`` call and the promise they settle."""

    derived: Promise[Any]
    on_fulfilled: Handler | None
    on_rejected: Handler | None


class Promise(Generic[T]):
    """Deferred value settled once by an executor or by a parent promise's reaction.

    Args:
        executor: called synchronously with ``(resolve, reject)``. Only the
            first call to either capability has any effect. An exception
            raised by the executor rejects the promise.
        scheduler: deferred-call service reactions are dispatched on.
            Defaults to ``get_default_scheduler()``.
    """

    def __init__(self, executor: Executor, *, scheduler: Scheduler | None = None) -> None:
        ensure_callable(executor, name="executor")
        self._setup(scheduler)
        _call_executor(self, executor)

    def _setup(self, scheduler: Scheduler | None) -> None:
        if scheduler is None:
            scheduler = get_default_scheduler()
        self._scheduler = _pin_scheduler(scheduler, strict=False)
        self._outcome: Outcome[T] | None = None
        self._reactions: list[_Reaction] = []
        self._lock = threading.Lock()
        self._created_at = capture_creation_site() if config.DEBUG_PROMISES else None

    @classmethod
    def _pending(cls, scheduler: Scheduler) -> Promise[Any]:
        promise = cls.__new__(cls)
        promise._setup(scheduler)
        return promise

    @classmethod
    def resolved(cls, value: Any = None, *, scheduler: Scheduler | None = None) -> Promise[Any]:
        """Return a promise resolved with ``value``."""
        return cls(lambda resolve, _reject: resolve(value), scheduler=scheduler)

    @classmethod
    def rejected(cls, reason: Any = None, *, scheduler: Scheduler | None = None) -> Promise[Any]:
        """Return a promise rejected with ``reason``."""
        return cls(lambda _resolve, reject: reject(reason), scheduler=scheduler)

    # ------------------------------------------------------------------
    # Observable state

    @property
    def state(self) -> PromiseState:
        outcome = self._outcome
        if outcome is None:
            return PromiseState.PENDING
        if isinstance(outcome, Fulfilled):
            return PromiseState.FULFILLED
        return PromiseState.REJECTED

    @property
    def value(self) -> Any:
        """Fulfillment value or rejection reason; ``None`` while pending."""
        outcome = self._outcome
        if outcome is None:
            return None
        return outcome.payload

    @property
    def outcome(self) -> Outcome[T] | None:
        return self._outcome

    @property
    def scheduler(self) -> Scheduler:
        return self._scheduler

    @property
    def created_at(self) -> CodeLocation | None:
        """Where this promise was created; only recorded when ``APROMISE_DEBUG`` is set."""
        return self._created_at

    def inspect(self) -> frozendict:
        """Snapshot of the current state as a read-only mapping."""
        outcome = self._outcome
        if outcome is None:
            return frozendict(state="pending")
        if isinstance(outcome, Fulfilled):
            return frozendict(state="fulfilled", value=outcome.value)
        return frozendict(state="rejected", reason=outcome.payload)

    # ------------------------------------------------------------------
    # Settlement

    def _resolve(self, value: Any) -> bool:
        if value is self:
            return self._reject(ChainingCycleError(self))
        return self._settle(Fulfilled(value))

    def _reject(self, reason: Any) -> bool:
        return self._settle(Rejected(reason))

    def _settle(self, outcome: Outcome[Any]) -> bool:
        with self._lock:
            if self._outcome is not None:
                return False
            self._outcome = outcome
            reactions, self._reactions = self._reactions, []
        logger.debug("%r settled, handing off %d reaction(s)", self, len(reactions))
        for reaction in reactions:
            _subscribe(self, reaction)
        return True

    # ------------------------------------------------------------------
    # Chaining

    def then(
        self,
        on_fulfilled: Handler | None = None,
        on_rejected: Handler | None = None,
    ) -> Promise[Any]:
        """Register reactions and return the promise they settle.

        A missing handler passes that outcome through unchanged. A handler's
        return value resolves the returned promise; an exception it raises
        rejects it.
        """
        return self._chain(on_fulfilled, on_rejected, self._scheduler)

    def catch(self, on_rejected: Handler) -> Promise[Any]:
        """Shorthand for ``then(None, on_rejected)``."""
        ensure_callable(on_rejected, name="on_rejected")
        return self._chain(None, on_rejected, self._scheduler)

    def _chain(
        self,
        on_fulfilled: Handler | None,
        on_rejected: Handler | None,
        scheduler: Scheduler,
    ) -> Promise[Any]:
        ensure_optional_callable(on_fulfilled, name="on_fulfilled")
        ensure_optional_callable(on_rejected, name="on_rejected")
        derived = type(self)._pending(_pin_scheduler(scheduler, strict=True))
        _subscribe(self, _Reaction(derived, on_fulfilled, on_rejected))
        return derived

    def __await__(self) -> Generator[Any, None, T]:
        from apromise.aio import to_future

        return (yield from to_future(self).__await__())

    def __repr__(self) -> str:
        state = self.state
        parts = [f"state={state.value}"]
        if state is PromiseState.FULFILLED:
            parts.append(f"value={_payload_repr(self.value)}")
        elif state is PromiseState.REJECTED:
            parts.append(f"reason={_payload_repr(self.value)}")
        if self._created_at is not None:
            parts.append(f"created_at={self._created_at.format()}")
        return f"{type(self).__name__}({', '.join(parts)})"


def _payload_repr(payload: Any) -> str:
    # Nested promises may link back to this one.
    if isinstance(payload, Promise):
        return f"<{type(payload).__name__} {payload.state.value} at {id(payload):#x}>"
    return repr(payload)


def _call_executor(promise: Promise[Any], executor: Executor) -> None:
    called = False
    guard = threading.Lock()

    def claim() -> bool:
        nonlocal called
        with guard:
            if called:
                return False
            called = True
            return True

    def resolve(value: Any = None) -> None:
        if claim():
            promise._resolve(value)

    def reject(reason: Any = None) -> None:
        if claim():
            promise._reject(reason)

    try:
        executor(resolve, reject)
    except Exception as exc:
        logger.debug("Executor for %r raised %r", promise, exc)
        reject(exc)


def _pin_scheduler(scheduler: Scheduler, *, strict: bool) -> Scheduler:
    """Bind an unbound asyncio scheduler to the loop running on this thread.

    With ``strict`` a missing loop raises ``SchedulerBindingError``;
    otherwise the scheduler is returned unbound.
    """
    if not isinstance(scheduler, AsyncioScheduler) or scheduler.is_bound:
        return scheduler
    try:
        return scheduler.bind()
    except SchedulerBindingError:
        if strict:
            raise
        return scheduler


def _subscribe(source: Promise[Any], reaction: _Reaction) -> None:
    """Queue ``reaction`` on the innermost promise ``source`` adopts, or schedule it."""
    visited: set[int] = set()
    while True:
        if id(source) in visited:
            _schedule(reaction, partial(reaction.derived._reject, ChainingCycleError(source)))
            return
        visited.add(id(source))
        with source._lock:
            outcome = source._outcome
            if outcome is None:
                source._reactions.append(reaction)
                return
        if isinstance(outcome, Fulfilled) and isinstance(outcome.value, Promise):
            source = outcome.value
            continue
        _schedule(reaction, partial(_dispatch, reaction, outcome))
        return


def _schedule(reaction: _Reaction, callback: Callable[[], None]) -> None:
    derived = reaction.derived
    try:
        derived.scheduler.schedule(callback)
    except Exception as exc:
        logger.warning("Could not schedule reaction, rejecting %r", derived, exc_info=True)
        derived._reject(exc)


def _dispatch(reaction: _Reaction, outcome: Outcome[Any]) -> None:
    derived = reaction.derived
    if isinstance(outcome, Fulfilled):
        handler = reaction.on_fulfilled
    else:
        handler = reaction.on_rejected

    if handler is None:
        if isinstance(outcome, Fulfilled):
            derived._resolve(outcome.value)
        else:
            derived._reject(outcome.payload)
        return

    try:
        result = handler(outcome.payload)
    except Exception as exc:
        logger.debug("Reaction handler %r raised, rejecting %r", handler, derived, exc_info=True)
        derived._reject(exc)
        return
    derived._resolve(result)


__all__ = [
    "Executor",
    "Handler",
    "Promise",
    "PromiseState",
    "RejectFn",
    "ResolveFn",
]
