from __future__ import annotations

from typing import Any


class PromiseError(Exception):
    """Base class for errors raised by apromise."""


class ChainingCycleError(PromiseError, TypeError):
    """Raised (as a rejection reason) when a promise would adopt itself."""

    def __init__(self, promise: Any) -> None:
        self.promise = promise
        super().__init__(
            f"Chaining cycle detected for promise {promise!r}\n"
            "Hint: a promise cannot be resolved with itself or with a promise that resolves back to it"
        )


class RejectedError(PromiseError):
    """Carries a rejection reason that is not an exception instance."""

    def __init__(self, reason: Any) -> None:
        self.reason = reason
        super().__init__(f"Promise rejected with non-exception reason: {reason!r}")


class SchedulerBindingError(PromiseError, RuntimeError):
    """Raised when an unbound asyncio scheduler is used with no running loop."""

    def __init__(self, scheduler: Any) -> None:
        self.scheduler = scheduler
        super().__init__(
            f"{scheduler!r} has no event loop to schedule on\n"
            "Hint: chain promises from inside the event loop, or pass loop= when creating AsyncioScheduler"
        )


class UnknownSchedulerError(PromiseError, ValueError):
    """Raised when configuration names a scheduler that does not exist."""

    def __init__(self, name: str, choices: tuple[str, ...]) -> None:
        self.name = name
        super().__init__(
            f"Unknown scheduler: {name!r}\n"
            f"Hint: set APROMISE_SCHEDULER to one of {', '.join(choices)}"
        )


def as_exception(reason: Any) -> BaseException:
    """Return ``reason`` if it can be raised, otherwise wrap it in ``RejectedError``."""

    if isinstance(reason, BaseException):
        return reason
    return RejectedError(reason)


__all__ = [
    "ChainingCycleError",
    "PromiseError",
    "RejectedError",
    "SchedulerBindingError",
    "UnknownSchedulerError",
    "as_exception",
]
