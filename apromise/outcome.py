"""
Settled payload of a promise.

An ``Outcome`` is either ``Fulfilled(value)`` or ``Rejected(reason)``. Unlike
an exception-only result type, a rejection reason may be any object,
including another promise.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar, cast

from apromise.errors import as_exception

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)


class Outcome(Generic[T_co]):
    """Sum type holding the settled value or rejection reason of a promise."""

    __slots__ = ()

    def is_fulfilled(self) -> bool:
        return isinstance(self, Fulfilled)

    def is_rejected(self) -> bool:
        return isinstance(self, Rejected)

    @property
    def payload(self) -> Any:
        """The fulfillment value or rejection reason, whichever is present."""

        if isinstance(self, Fulfilled):
            return self.value
        return cast(Rejected, self).reason

    def unwrap(self) -> T_co:
        """Return the value or raise the rejection reason.

        Reasons that are not exceptions are raised wrapped in ``RejectedError``.
        """

        if isinstance(self, Fulfilled):
            return self.value
        raise as_exception(cast(Rejected, self).reason)


@dataclass(frozen=True)
class Fulfilled(Outcome[T], Generic[T]):
    value: T


@dataclass(frozen=True)
class Rejected(Outcome[Any]):
    reason: Any


__all__ = [
    "Fulfilled",
    "Outcome",
    "Rejected",
]
