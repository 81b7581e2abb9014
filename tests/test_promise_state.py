"""Tests for promise construction, the executor contract and settlement."""

import threading

import pytest

from apromise import (
    ChainingCycleError,
    Fulfilled,
    ManualScheduler,
    Promise,
    PromiseState,
    Rejected,
)


def test_executor_is_called_once_with_two_capabilities():
    calls = []

    Promise(lambda resolve, reject: calls.append((resolve, reject)))

    assert len(calls) == 1
    resolve, reject = calls[0]
    assert callable(resolve)
    assert callable(reject)


def test_new_promise_is_pending():
    promise = Promise(lambda resolve, reject: None)

    assert promise.state is PromiseState.PENDING
    assert promise.state == "PENDING"
    assert promise.value is None
    assert promise.outcome is None


def test_resolve_transitions_to_fulfilled_synchronously():
    promise = Promise(lambda resolve, reject: resolve("v"))

    assert promise.state is PromiseState.FULFILLED
    assert promise.value == "v"
    assert promise.outcome == Fulfilled("v")


def test_reject_transitions_to_rejected_synchronously():
    promise = Promise(lambda resolve, reject: reject("rejected"))

    assert promise.state is PromiseState.REJECTED
    assert promise.value == "rejected"
    assert promise.outcome == Rejected("rejected")


def test_resolve_without_argument_fulfills_with_none():
    promise = Promise(lambda resolve, reject: resolve())

    assert promise.state is PromiseState.FULFILLED
    assert promise.value is None


def test_non_callable_executor_is_rejected_eagerly():
    with pytest.raises(TypeError, match="executor must be callable, got int"):
        Promise(42)  # type: ignore[arg-type]


class TestSingleTransition:
    def test_first_resolve_wins(self):
        def executor(resolve, reject):
            resolve(1)
            resolve(2)
            reject("nope")

        promise = Promise(executor)

        assert promise.state is PromiseState.FULFILLED
        assert promise.value == 1

    def test_first_reject_wins(self):
        def executor(resolve, reject):
            reject("first")
            resolve("second")
            reject("third")

        promise = Promise(executor)

        assert promise.state is PromiseState.REJECTED
        assert promise.value == "first"

    def test_capabilities_stay_one_shot_when_called_later(self):
        captured = {}

        def executor(resolve, reject):
            captured["resolve"] = resolve
            captured["reject"] = reject

        promise = Promise(executor)
        captured["reject"]("late failure")
        captured["resolve"]("late success")

        assert promise.state is PromiseState.REJECTED
        assert promise.value == "late failure"

    def test_settled_cell_ignores_direct_settlement(self):
        promise = Promise(lambda resolve, reject: resolve("kept"))

        assert promise._resolve("other") is False
        assert promise._reject("other") is False
        assert promise.value == "kept"

    def test_concurrent_producers_settle_once(self):
        captured = {}
        promise = Promise(lambda resolve, reject: captured.update(resolve=resolve, reject=reject))
        barrier = threading.Barrier(8)

        def race(index: int) -> None:
            barrier.wait()
            if index % 2:
                captured["resolve"](index)
            else:
                captured["reject"](index)

        threads = [threading.Thread(target=race, args=(i,)) for i in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert promise.value in range(8)
        expected = PromiseState.FULFILLED if promise.value % 2 else PromiseState.REJECTED
        assert promise.state is expected


class TestExecutorFaults:
    def test_raising_executor_rejects_with_the_exception(self):
        error = RuntimeError("boom")

        def executor(resolve, reject):
            raise error

        promise = Promise(executor)

        assert promise.state is PromiseState.REJECTED
        assert promise.value is error

    def test_raise_after_resolve_is_ignored(self):
        def executor(resolve, reject):
            resolve("done")
            raise ValueError("ignored")

        promise = Promise(executor)

        assert promise.state is PromiseState.FULFILLED
        assert promise.value == "done"

    def test_base_exceptions_propagate(self):
        def executor(resolve, reject):
            raise KeyboardInterrupt

        with pytest.raises(KeyboardInterrupt):
            Promise(executor)


class TestResolutionProcedure:
    def test_resolving_with_itself_rejects_with_type_error(self):
        captured = {}

        def executor(resolve, reject):
            captured["resolve"] = resolve

        promise = Promise(executor)
        captured["resolve"](promise)

        assert promise.state is PromiseState.REJECTED
        assert isinstance(promise.value, ChainingCycleError)
        assert isinstance(promise.value, TypeError)
        assert promise.value.promise is promise

    def test_resolving_with_another_promise_stores_it(self):
        inner = Promise(lambda resolve, reject: None)
        outer = Promise(lambda resolve, reject: resolve(inner))

        assert outer.state is PromiseState.FULFILLED
        assert outer.value is inner

    def test_rejection_reason_may_be_a_promise(self):
        inner = Promise.resolved("not unwrapped")
        outer = Promise(lambda resolve, reject: reject(inner))

        assert outer.state is PromiseState.REJECTED
        assert outer.value is inner


class TestConstructors:
    def test_resolved(self):
        promise = Promise.resolved(3)

        assert promise.state is PromiseState.FULFILLED
        assert promise.value == 3

    def test_rejected(self):
        error = ValueError("bad")
        promise = Promise.rejected(error)

        assert promise.state is PromiseState.REJECTED
        assert promise.value is error

    def test_explicit_scheduler_overrides_default(self, scheduler: ManualScheduler):
        other = ManualScheduler()
        promise = Promise.resolved(1, scheduler=other)

        assert promise.scheduler is other
        assert Promise.resolved(1).scheduler is scheduler


class TestInspection:
    def test_inspect_snapshots(self):
        pending = Promise(lambda resolve, reject: None)
        fulfilled = Promise.resolved("v")
        rejected = Promise.rejected("r")

        assert pending.inspect() == {"state": "pending"}
        assert fulfilled.inspect() == {"state": "fulfilled", "value": "v"}
        assert rejected.inspect() == {"state": "rejected", "reason": "r"}

    def test_inspect_is_read_only(self):
        snapshot = Promise.resolved(1).inspect()

        with pytest.raises(TypeError):
            snapshot["state"] = "pending"  # type: ignore[index]

    def test_repr_shows_state_and_payload(self):
        assert repr(Promise(lambda resolve, reject: None)) == "Promise(state=PENDING)"
        assert repr(Promise.resolved(5)) == "Promise(state=FULFILLED, value=5)"
        assert repr(Promise.rejected("x")) == "Promise(state=REJECTED, reason='x')"

    def test_repr_of_nested_promise_does_not_recurse(self):
        inner = Promise(lambda resolve, reject: None)
        outer = Promise.resolved(inner)

        assert f"<Promise PENDING at {id(inner):#x}>" in repr(outer)

    def test_created_at_is_recorded_in_debug_mode(self, monkeypatch: pytest.MonkeyPatch):
        from apromise import config

        monkeypatch.setattr(config, "DEBUG_PROMISES", True)
        promise = Promise.resolved(1)

        assert promise.created_at is not None
        assert promise.created_at.filename == __file__
        assert promise.created_at.function == "test_created_at_is_recorded_in_debug_mode"
        assert "created_at=" in repr(promise)

    def test_created_at_is_skipped_by_default(self, monkeypatch: pytest.MonkeyPatch):
        from apromise import config

        monkeypatch.setattr(config, "DEBUG_PROMISES", False)

        assert Promise.resolved(1).created_at is None
