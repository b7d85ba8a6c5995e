"""Decide whether fetched log text carries fresh output from the sample app."""

from __future__ import annotations

import re
import threading

DEFAULT_PATTERN = r"\[(APP/[^\]]*)\]\s+OUT\s+(\d+)"


class AppLogValidator:
    """Accept log text in which some app instance logged a new counter.

    Every instance of the sample app logs its own increasing integer, so the
    last counter is tracked per source tag (``APP/PROC/WEB/0``, ...). Text is
    fresh when any instance moved forward, or restarted and began counting
    again from a lower value. Output repeating only known counters is stale.
    """

    def __init__(self, pattern: str = DEFAULT_PATTERN) -> None:
        self._pattern = re.compile(pattern)
        self._lock = threading.Lock()
        self._last_counters: dict[str, int] = {}

    @property
    def last_counters(self) -> dict[str, int]:
        with self._lock:
            return dict(self._last_counters)

    def latest_counters(self, text: str) -> dict[str, int]:
        """Return the last counter logged by each source in ``text``."""

        latest: dict[str, int] = {}
        for source, counter in self._pattern.findall(text):
            latest[source] = int(counter)
        return latest

    def accepts(self, text: str) -> bool:
        latest = self.latest_counters(text)
        if not latest:
            return False
        with self._lock:
            fresh = any(
                self._last_counters.get(source) != counter
                for source, counter in latest.items()
            )
            self._last_counters.update(latest)
        return fresh
