"""Append-only record of probe outcomes."""

from __future__ import annotations

import threading


class ResultSet:
    """Chronological pass/fail outcomes for one probe during one run."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._outcomes: list[tuple[float, bool]] = []
        self._failures = 0

    def record(self, success: bool, at: float = 0.0) -> None:
        with self._lock:
            self._outcomes.append((float(at), bool(success)))
            if not success:
                self._failures += 1

    def failure_count(self) -> int:
        with self._lock:
            return self._failures

    def success_count(self) -> int:
        with self._lock:
            return len(self._outcomes) - self._failures

    def total(self) -> int:
        with self._lock:
            return len(self._outcomes)

    def outcomes(self) -> list[tuple[float, bool]]:
        with self._lock:
            return list(self._outcomes)

    @property
    def last_failure_at(self) -> float | None:
        with self._lock:
            for at, success in reversed(self._outcomes):
                if not success:
                    return at
        return None
