"""Bridges between promises and asyncio awaitables."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from typing import Any

from apromise.errors import as_exception
from apromise.promise import Promise
from apromise.scheduler import AsyncioScheduler, Scheduler


def to_future(
    promise: Promise[Any],
    *,
    loop: asyncio.AbstractEventLoop | None = None,
) -> asyncio.Future[Any]:
    """Return a future settled with the outcome of ``promise``.

    The reaction is dispatched on ``loop`` regardless of the promise's own
    scheduler. Rejection reasons that are not exceptions are raised as
    ``RejectedError``.
    """
    target_loop = loop if loop is not None else asyncio.get_running_loop()
    future = target_loop.create_future()

    def on_fulfilled(value: Any) -> None:
        if not future.done():
            future.set_result(value)

    def on_rejected(reason: Any) -> None:
        if not future.done():
            future.set_exception(as_exception(reason))

    promise._chain(on_fulfilled, on_rejected, AsyncioScheduler(target_loop))
    return future


def from_awaitable(
    awaitable: Awaitable[Any],
    *,
    scheduler: Scheduler | None = None,
) -> Promise[Any]:
    """Return a promise settled by ``awaitable``.

    Coroutines are wrapped in a task on the running loop. The promise is
    rejected with ``CancelledError`` if the task is cancelled. Reactions run
    on an ``AsyncioScheduler`` bound to the task's loop unless ``scheduler``
    is given.
    """
    future = asyncio.ensure_future(awaitable)

    def executor(resolve: Any, reject: Any) -> None:
        def on_done(done: asyncio.Future[Any]) -> None:
            if done.cancelled():
                reject(asyncio.CancelledError())
                return
            error = done.exception()
            if error is not None:
                reject(error)
            else:
                resolve(done.result())

        future.add_done_callback(on_done)

    if scheduler is None:
        scheduler = AsyncioScheduler(future.get_loop())
    return Promise(executor, scheduler=scheduler)


__all__ = ["from_awaitable", "to_future"]
