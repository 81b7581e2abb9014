"""
apromise - single-assignment deferred values for Python.

A ``Promise`` settles once, either fulfilled with a value or rejected with a
reason, and runs the handlers registered with ``then`` on a later turn of
its scheduler. Promises returned from handlers are adopted, so chains
flatten the way callers expect.

Example:
    >>> from apromise import ManualScheduler, Promise, use_scheduler
    >>>
    >>> with use_scheduler(ManualScheduler()) as scheduler:
    ...     p = Promise(lambda resolve, reject: scheduler.call_later(1, lambda: resolve("late")))
    ...     seen = []
    ...     _ = p.then(seen.append)
    ...     _ = scheduler.advance(1)
    ...     assert seen == ["late"]
"""

from apromise.aio import from_awaitable, to_future
from apromise.config import PromiseConfig, debug_enabled, load_config
from apromise.debug import CodeLocation
from apromise.errors import (
    ChainingCycleError,
    PromiseError,
    RejectedError,
    SchedulerBindingError,
    UnknownSchedulerError,
)
from apromise.outcome import Fulfilled, Outcome, Rejected
from apromise.promise import Executor, Handler, Promise, PromiseState
from apromise.scheduler import (
    AsyncioScheduler,
    ManualScheduler,
    Scheduler,
    get_default_scheduler,
    set_default_scheduler,
    use_scheduler,
)

__version__ = "0.1.0"

__all__ = [
    "AsyncioScheduler",
    "ChainingCycleError",
    "CodeLocation",
    "Executor",
    "Fulfilled",
    "Handler",
    "ManualScheduler",
    "Outcome",
    "Promise",
    "PromiseConfig",
    "PromiseError",
    "PromiseState",
    "Rejected",
    "RejectedError",
    "SchedulerBindingError",
    "Scheduler",
    "UnknownSchedulerError",
    "debug_enabled",
    "from_awaitable",
    "get_default_scheduler",
    "load_config",
    "set_default_scheduler",
    "to_future",
    "use_scheduler",
]
