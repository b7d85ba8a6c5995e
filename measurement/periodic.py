"""Periodic scheduler driving one probe on a fixed interval."""

from __future__ import annotations

import logging
import threading

from core.clock import Clock
from core.logging import log_error, log_warning
from measurement.base import Probe
from measurement.models import ProbeResult, SchedulerState
from measurement.result_set import ResultSet
from measurement.retry import RetryPolicy


class Periodic:
    """Run a probe every ``interval_s`` seconds until stopped.

    Each tick invokes the probe, checks a failed result against the retry
    policy, and records the outcome. Ticks of one scheduler never overlap:
    ticks that fall due while the probe is still running are dropped. A
    failure from a cancellable run cut short by ``stop`` is not recorded. The
    allowed-failures tolerance is only compared once the scheduler stops.
    """

    def __init__(
        self,
        logger: logging.Logger,
        clock: Clock,
        interval_s: float,
        probe: Probe,
        result_set: ResultSet,
        allowed_failures: int,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        if interval_s <= 0:
            raise ValueError(f"interval_s must be positive, got {interval_s}")
        if allowed_failures < 0:
            raise ValueError(f"allowed_failures must be non-negative, got {allowed_failures}")
        self._logger = logger
        self._clock = clock
        self._interval_s = float(interval_s)
        self._probe = probe
        self._result_set = result_set
        self._allowed_failures = int(allowed_failures)
        self._retry_policy = retry_policy or RetryPolicy.never()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._lock = threading.Lock()
        self._state = SchedulerState.IDLE
        self._retries = 0

    @property
    def name(self) -> str:
        return self._probe.name

    @property
    def interval_s(self) -> float:
        return self._interval_s

    @property
    def allowed_failures(self) -> int:
        return self._allowed_failures

    @property
    def result_set(self) -> ResultSet:
        return self._result_set

    @property
    def state(self) -> SchedulerState:
        with self._lock:
            return self._state

    @property
    def retries(self) -> int:
        with self._lock:
            return self._retries

    def start(self) -> None:
        with self._lock:
            if self._state is not SchedulerState.IDLE:
                raise RuntimeError(f"{self.name} scheduler already {self._state.value}")
            self._state = SchedulerState.TICKING
        self._stop_event.clear()
        first_tick = self._clock.now() + self._interval_s
        self._thread = threading.Thread(
            target=self._loop,
            args=(first_tick,),
            name=f"periodic-{self.name}",
            daemon=True,
        )
        self._thread.start()

    def stop(self, timeout_s: float | None = None) -> None:
        """Stop ticking, letting an in-flight probe run finish unless it is cancellable."""

        self._stop_event.set()
        self._probe.cancel()
        if self._thread is not None:
            self._thread.join(timeout=timeout_s)
            if self._thread.is_alive():
                log_warning(
                    f"{self.name} tick still running after {timeout_s:.2f}s; continuing shutdown.",
                    target=self._logger,
                )
        with self._lock:
            self._state = SchedulerState.STOPPED

    def tick(self) -> ProbeResult:
        """Invoke the probe once and account for the outcome."""

        now = self._clock.now()
        try:
            result = self._probe.run()
        except Exception as exc:  # noqa: BLE001 - a broken probe counts as a failure
            self._logger.exception("%s raised during measurement", self.name)
            result = ProbeResult(success=False, message=f"Probe raised exception: {exc}")

        if result.success:
            self._result_set.record(True, at=now)
            return result

        if self._probe.cancellable and self._stop_event.is_set():
            self._logger.debug("%s run interrupted by stop; outcome discarded", self.name)
            return result

        if self._retry_policy.should_retry(result.stdout, result.stderr):
            with self._lock:
                self._retries += 1
            self._logger.debug("%s hit a transient failure; retrying on next tick", self.name)
            return result

        self._result_set.record(False, at=now)
        log_error(
            f"FAILURE ({self.name}): {result.message or 'probe failed'}\n"
            f"interval: {self._interval_s:g}s\n"
            f"stdout:\n{result.stdout}\n"
            f"stderr:\n{result.stderr}\n",
            target=self._logger,
        )
        return result

    def failed(self) -> bool:
        return self._result_set.failure_count() > self._allowed_failures

    def summary(self) -> str:
        failures = self._result_set.failure_count()
        total = self._result_set.total()
        line = f"{failures} of {total} attempts to {self._probe.summary_phrase} failed"
        if self.failed():
            return f"[FAILED] {self.name}: {line} (allowed {self._allowed_failures})"
        return f"[OK] {self.name}: {line}"

    def _loop(self, next_tick: float) -> None:
        while not self._clock.wait_until(next_tick, self._stop_event):
            if self._stop_event.is_set():
                break
            self.tick()
            now = self._clock.now()
            missed = max(int((now - next_tick) // self._interval_s), 0)
            next_tick += self._interval_s * (missed + 1)
