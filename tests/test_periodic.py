"""Tests for the periodic scheduler."""

from __future__ import annotations

import logging
import threading
import time

import pytest

from core.clock import FakeClock
from measurement.base import Probe
from measurement.models import ProbeResult, SchedulerState
from measurement.periodic import Periodic
from measurement.result_set import ResultSet
from measurement.retry import AUTH_EXPIRED_MESSAGE, RetryPolicy

LOGGER = logging.getLogger("test.periodic")


class _ScriptedProbe(Probe):
    name = "Scripted"
    summary_phrase = "do the scripted thing"

    def __init__(self, results: list[ProbeResult]) -> None:
        self._results = list(results)
        self._lock = threading.Lock()
        self.calls = 0
        self.cancelled = False

    def run(self) -> ProbeResult:
        with self._lock:
            index = self.calls
            self.calls += 1
        if index < len(self._results):
            return self._results[index]
        return ProbeResult(success=True)

    def cancel(self) -> None:
        self.cancelled = True


class _ExplodingProbe(Probe):
    name = "Exploding"

    def run(self) -> ProbeResult:
        raise RuntimeError("kaboom")


_FAIL = ProbeResult(success=False, stdout="out", stderr="err", message="nope")
_OK = ProbeResult(success=True)
_AUTH = ProbeResult(success=False, stderr=AUTH_EXPIRED_MESSAGE)


def _periodic(probe: Probe, allowed: int, retry: RetryPolicy | None = None, clock=None) -> Periodic:
    return Periodic(LOGGER, clock or FakeClock(), 1.0, probe, ResultSet(), allowed, retry)


def _wait_for(predicate, timeout_s: float = 5.0) -> bool:
    end = time.monotonic() + timeout_s
    while time.monotonic() < end:
        if predicate():
            return True
        time.sleep(0.005)
    return predicate()


def test_three_failures_with_no_tolerance_fails() -> None:
    periodic = _periodic(_ScriptedProbe([_FAIL, _FAIL, _FAIL]), allowed=0)

    for _ in range(3):
        periodic.tick()

    assert periodic.result_set.failure_count() == 3
    assert periodic.failed()


def test_failures_above_tolerance_fail_at_window_end() -> None:
    periodic = _periodic(_ScriptedProbe([_FAIL, _FAIL, _OK, _FAIL]), allowed=2)

    for _ in range(4):
        periodic.tick()

    assert periodic.result_set.failure_count() == 3
    assert periodic.failed()


def test_failures_within_tolerance_pass() -> None:
    periodic = _periodic(_ScriptedProbe([_FAIL, _OK, _FAIL, _OK]), allowed=2)

    for _ in range(4):
        periodic.tick()

    assert periodic.result_set.failure_count() == 2
    assert not periodic.failed()


def test_retryable_failures_are_not_recorded() -> None:
    probe = _ScriptedProbe([_AUTH, _AUTH, _OK])
    periodic = _periodic(probe, allowed=0, retry=RetryPolicy.auth_expired())

    for _ in range(3):
        periodic.tick()

    assert probe.calls == 3
    assert periodic.result_set.failure_count() == 0
    assert periodic.result_set.total() == 1
    assert periodic.retries == 2
    assert not periodic.failed()


def test_auth_failure_counts_without_retry_policy() -> None:
    periodic = _periodic(_ScriptedProbe([_AUTH]), allowed=0, retry=RetryPolicy.never())

    periodic.tick()

    assert periodic.result_set.failure_count() == 1


def test_probe_exception_counts_as_failure() -> None:
    periodic = _periodic(_ExplodingProbe(), allowed=0)

    result = periodic.tick()

    assert not result.success
    assert "kaboom" in result.message
    assert periodic.result_set.failure_count() == 1


def test_failure_is_logged_with_captured_text(caplog) -> None:
    periodic = _periodic(_ScriptedProbe([_FAIL]), allowed=5)

    with caplog.at_level(logging.ERROR, logger="test.periodic"):
        periodic.tick()

    assert "FAILURE (Scripted): nope" in caplog.text
    assert "interval: 1s" in caplog.text
    assert "out" in caplog.text and "err" in caplog.text


def test_summary_reports_counts() -> None:
    periodic = _periodic(_ScriptedProbe([_FAIL, _OK]), allowed=0)
    periodic.tick()
    periodic.tick()

    assert periodic.summary() == "[FAILED] Scripted: 1 of 2 attempts to do the scripted thing failed (allowed 0)"


def test_invalid_arguments_rejected() -> None:
    with pytest.raises(ValueError):
        Periodic(LOGGER, FakeClock(), 0, _ScriptedProbe([]), ResultSet(), 0)
    with pytest.raises(ValueError):
        Periodic(LOGGER, FakeClock(), 1.0, _ScriptedProbe([]), ResultSet(), -1)


def test_scheduler_ticks_on_the_clock_until_stopped() -> None:
    clock = FakeClock()
    probe = _ScriptedProbe([_FAIL, _OK, _FAIL])
    periodic = _periodic(probe, allowed=1, clock=clock)

    periodic.start()
    assert periodic.state is SchedulerState.TICKING
    for expected_calls in (1, 2, 3):
        assert clock.block_until_waiters(1)
        assert probe.calls == expected_calls - 1
        clock.advance(1.0)
        assert _wait_for(lambda: probe.calls == expected_calls)
    assert clock.block_until_waiters(1)
    periodic.stop(timeout_s=5)

    assert periodic.state is SchedulerState.STOPPED
    assert probe.cancelled
    assert periodic.result_set.failure_count() == 2
    assert periodic.failed()


def test_scheduler_does_not_tick_before_first_interval() -> None:
    clock = FakeClock()
    probe = _ScriptedProbe([])
    periodic = _periodic(probe, allowed=0, clock=clock)

    periodic.start()
    assert clock.block_until_waiters(1)
    clock.advance(0.5)
    time.sleep(0.05)
    periodic.stop(timeout_s=5)

    assert probe.calls == 0
    assert periodic.result_set.total() == 0


def test_missed_ticks_are_dropped() -> None:
    clock = FakeClock()
    release = threading.Event()

    class _SlowProbe(Probe):
        name = "Slow"

        def __init__(self) -> None:
            self.calls = 0

        def run(self) -> ProbeResult:
            self.calls += 1
            release.wait(timeout=5)
            return ProbeResult(success=True)

    probe = _SlowProbe()
    periodic = _periodic(probe, allowed=0, clock=clock)
    periodic.start()

    assert clock.block_until_waiters(1)
    clock.advance(1.0)
    assert _wait_for(lambda: probe.calls == 1)
    clock.advance(3.5)
    release.set()
    assert clock.block_until_waiters(1)
    periodic.stop(timeout_s=5)

    assert probe.calls == 1
    assert periodic.result_set.total() == 1


def test_start_twice_is_an_error() -> None:
    periodic = _periodic(_ScriptedProbe([]), allowed=0)
    periodic.start()
    try:
        with pytest.raises(RuntimeError):
            periodic.start()
    finally:
        periodic.stop(timeout_s=5)


class _GatedFailingProbe(Probe):
    name = "Gated"

    def __init__(self, cancellable: bool) -> None:
        self.cancellable = cancellable
        self.started = threading.Event()
        self.release = threading.Event()
        self.cancel_calls = 0

    def run(self) -> ProbeResult:
        self.started.set()
        self.release.wait(timeout=5)
        return ProbeResult(success=False, message="gated failure")

    def cancel(self) -> None:
        self.cancel_calls += 1
        if self.cancellable:
            self.release.set()


def test_in_flight_failure_is_kept_when_stopping_plain_probe() -> None:
    clock = FakeClock()
    probe = _GatedFailingProbe(cancellable=False)
    periodic = _periodic(probe, allowed=0, clock=clock)
    periodic.start()
    assert clock.block_until_waiters(1)
    clock.advance(1.0)
    assert probe.started.wait(timeout=5)

    stopper = threading.Thread(target=periodic.stop, kwargs={"timeout_s": 5})
    stopper.start()
    assert _wait_for(lambda: probe.cancel_calls == 1)
    probe.release.set()
    stopper.join(timeout=5)

    assert periodic.result_set.failure_count() == 1


def test_cancelled_in_flight_failure_is_discarded() -> None:
    clock = FakeClock()
    probe = _GatedFailingProbe(cancellable=True)
    periodic = _periodic(probe, allowed=0, clock=clock)
    periodic.start()
    assert clock.block_until_waiters(1)
    clock.advance(1.0)
    assert probe.started.wait(timeout=5)

    periodic.stop(timeout_s=5)

    assert periodic.result_set.failure_count() == 0
    assert not periodic.failed()


class _StopAtDeadlineClock(FakeClock):
    """Reports the deadline as reached while a stop lands at the same moment."""

    def wait_until(self, deadline: float, stop_event: threading.Event) -> bool:
        stop_event.set()
        return False


def test_stop_racing_a_due_tick_skips_the_run() -> None:
    probe = _ScriptedProbe([_FAIL])
    periodic = _periodic(probe, allowed=0, clock=_StopAtDeadlineClock())

    periodic.start()
    periodic.stop(timeout_s=5)

    assert probe.calls == 0
    assert periodic.result_set.total() == 0
    assert periodic.state is SchedulerState.STOPPED
