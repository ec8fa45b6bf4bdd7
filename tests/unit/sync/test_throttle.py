from __future__ import annotations

from conftest import ManualClock
from texpreview.utils.throttle import Throttle


def _throttled(clock: ManualClock, interval: float = 0.05):
    calls = []

    def record(value):
        calls.append(value)
        return value * 10

    return Throttle(record, interval, clock), calls


def test_first_call_runs_immediately(clock: ManualClock) -> None:
    throttled, calls = _throttled(clock)
    assert throttled(1) == 10
    assert calls == [1]
    assert not throttled.pending


def test_calls_within_interval_coalesce(clock: ManualClock) -> None:
    throttled, calls = _throttled(clock)
    throttled(1)
    assert throttled(2) is None
    assert throttled(3) is None
    assert throttled.pending

    clock.advance(0.01)
    assert throttled.poll() is None
    clock.advance(0.05)
    assert throttled.poll() == 30
    assert calls == [1, 3]
    assert throttled.poll() is None


def test_call_after_interval_runs(clock: ManualClock) -> None:
    throttled, calls = _throttled(clock)
    throttled(1)
    clock.advance(0.1)
    assert throttled(2) == 20
    assert calls == [1, 2]


def test_flush_runs_pending_now(clock: ManualClock) -> None:
    throttled, calls = _throttled(clock)
    throttled(1)
    throttled(2)
    assert throttled.flush() == 20
    assert throttled.flush() is None
    assert calls == [1, 2]


def test_cancel_drops_pending(clock: ManualClock) -> None:
    throttled, calls = _throttled(clock)
    throttled(1)
    throttled(2)
    throttled.cancel()
    clock.advance(1)
    assert throttled.poll() is None
    assert calls == [1]


def test_zero_interval_never_defers(clock: ManualClock) -> None:
    throttled, calls = _throttled(clock, interval=0)
    throttled(1)
    throttled(2)
    assert calls == [1, 2]
