import pytest

from apromise._internals import TimerQueue, VirtualClock


def test_timer_queue_orders_entries_by_due_time():
    queue = TimerQueue()

    def first():
        return None

    def second():
        return None

    def third():
        return None

    queue.push(3.0, third)
    queue.push(1.0, first)
    queue.push(2.0, second)

    assert queue.peek_due() == 1.0
    entries = [queue.pop(), queue.pop(), queue.pop()]

    assert [entry.due for entry in entries] == [1.0, 2.0, 3.0]
    assert [entry.callback for entry in entries] == [first, second, third]
    assert queue.empty()
    assert queue.peek_due() is None


def test_timer_queue_breaks_ties_by_submission():
    queue = TimerQueue()
    callbacks = [lambda: "a", lambda: "b", lambda: "c"]

    for callback in callbacks:
        queue.push(5.0, callback)

    assert len(queue) == 3
    assert [queue.pop().callback for _ in range(3)] == callbacks


def test_virtual_clock_only_moves_forward():
    clock = VirtualClock(2)

    assert clock.now == 2.0
    clock.advance_to(5)
    assert clock.now == 5.0
    clock.advance_to(1)
    assert clock.now == 5.0


def test_virtual_clock_deadline_is_relative_to_now():
    clock = VirtualClock(1.5)

    assert clock.deadline(0) == 1.5
    assert clock.deadline(2) == 3.5


def test_virtual_clock_validates_through_shared_coercion():
    with pytest.raises(ValueError, match="start_time must be finite"):
        VirtualClock(float("inf"))
    with pytest.raises(TypeError, match="start_time must be float, got bool"):
        VirtualClock(True)  # type: ignore[arg-type]
    with pytest.raises(ValueError, match="delay must be non-negative"):
        VirtualClock().deadline(-1)
