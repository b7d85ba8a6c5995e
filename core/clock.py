"""Injectable time sources for scheduling."""

from __future__ import annotations

import heapq
import itertools
import threading
import time
from typing import Callable


class TimerHandle:
    """Handle for a callback scheduled with ``call_later``."""

    def __init__(self, cancel: Callable[[], None]) -> None:
        self._cancel = cancel

    def cancel(self) -> None:
        self._cancel()


class Clock:
    """Wall-clock time source backed by ``time.monotonic``."""

    def now(self) -> float:
        return time.monotonic()

    def wait_until(self, deadline: float, stop_event: threading.Event) -> bool:
        """Block until ``deadline`` or until ``stop_event`` is set.

        Returns:
            True when the wait ended because ``stop_event`` was set.
        """

        remaining = deadline - self.now()
        while remaining > 0:
            if stop_event.wait(timeout=remaining):
                return True
            remaining = deadline - self.now()
        return stop_event.is_set()

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> TimerHandle:
        timer = threading.Timer(max(delay_s, 0.0), callback)
        timer.daemon = True
        timer.start()
        return TimerHandle(timer.cancel)


class FakeClock(Clock):
    """Logical clock that only moves when ``advance`` is called.

    Waiters are released and due callbacks fire from inside ``advance``, so
    tests control exactly which ticks and deadlines have elapsed.
    """

    _POLL_S = 0.01

    def __init__(self, start: float = 0.0) -> None:
        self._now = float(start)
        self._condition = threading.Condition()
        self._pending: list[tuple[float, int, Callable[[], None]]] = []
        self._cancelled: set[int] = set()
        self._sequence = itertools.count()
        self._waiters = 0

    def now(self) -> float:
        with self._condition:
            return self._now

    @property
    def waiters(self) -> int:
        with self._condition:
            return self._waiters

    def wait_until(self, deadline: float, stop_event: threading.Event) -> bool:
        with self._condition:
            self._waiters += 1
            self._condition.notify_all()
            try:
                while self._now < deadline and not stop_event.is_set():
                    self._condition.wait(timeout=self._POLL_S)
            finally:
                self._waiters -= 1
                self._condition.notify_all()
        return stop_event.is_set()

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> TimerHandle:
        with self._condition:
            key = next(self._sequence)
            heapq.heappush(self._pending, (self._now + max(delay_s, 0.0), key, callback))

        def cancel() -> None:
            with self._condition:
                self._cancelled.add(key)

        return TimerHandle(cancel)

    def advance(self, seconds: float) -> None:
        """Move logical time forward and fire callbacks that became due."""

        due: list[Callable[[], None]] = []
        with self._condition:
            self._now += float(seconds)
            while self._pending and self._pending[0][0] <= self._now:
                _, key, callback = heapq.heappop(self._pending)
                if key in self._cancelled:
                    self._cancelled.discard(key)
                    continue
                due.append(callback)
            self._condition.notify_all()
        for callback in due:
            callback()

    def block_until_waiters(self, count: int, timeout_s: float = 5.0) -> bool:
        """Wait in real time until ``count`` threads are blocked in ``wait_until``."""

        end = time.monotonic() + timeout_s
        with self._condition:
            while self._waiters < count:
                remaining = end - time.monotonic()
                if remaining <= 0:
                    return False
                self._condition.wait(timeout=min(remaining, self._POLL_S))
        return True
