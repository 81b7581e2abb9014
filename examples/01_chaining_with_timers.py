"""Chaining promises on a manually driven scheduler.

This example shows how reactions are deferred until the scheduler runs, and
how a promise returned from a handler is adopted by the chain.

Key concepts:
- Promise executors run synchronously; handlers never do
- ManualScheduler.advance() moves virtual time and fires timers
- Returning a promise from a handler flattens the chain

Run with: uv run python examples/01_chaining_with_timers.py
"""

from apromise import ManualScheduler, Promise, use_scheduler


def fetch_user(scheduler: ManualScheduler, user_id: int) -> Promise:
    def executor(resolve, reject):
        if user_id < 0:
            raise ValueError(f"invalid user id {user_id}")
        scheduler.call_later(1.0, lambda: resolve({"id": user_id, "name": f"user-{user_id}"}))

    return Promise(executor)


def main() -> None:
    with use_scheduler(ManualScheduler()) as scheduler:
        greeting = (
            Promise.resolved(7)
            .then(lambda user_id: fetch_user(scheduler, user_id))
            .then(lambda user: f"hello, {user['name']}")
        )
        failure = fetch_user(scheduler, -1).catch(lambda error: f"failed: {error}")

        scheduler.run_until_idle()
        print(f"t={scheduler.time}: {greeting!r}")

        scheduler.advance(1.0)
        print(f"t={scheduler.time}: {greeting!r}")
        print(f"t={scheduler.time}: {failure!r}")


if __name__ == "__main__":
    main()
