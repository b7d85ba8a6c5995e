"""Immutable command descriptors and cancellation tokens."""

from __future__ import annotations

from dataclasses import dataclass, field
import threading
from types import MappingProxyType
from typing import TYPE_CHECKING, Callable, Mapping, Sequence

if TYPE_CHECKING:
    from core.clock import Clock, TimerHandle


class CancellationToken:
    """One-shot cancellation signal shared between a probe and its commands."""

    def __init__(self) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: list[Callable[[], None]] = []
        self._timer: "TimerHandle | None" = None

    @classmethod
    def with_deadline(cls, deadline_s: float, clock: "Clock") -> "CancellationToken":
        """Return a token that cancels itself ``deadline_s`` seconds from now on ``clock``."""

        token = cls()
        token._timer = clock.call_later(deadline_s, token.cancel)
        return token

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: float | None = None) -> bool:
        return self._event.wait(timeout)

    def on_cancel(self, callback: Callable[[], None]) -> None:
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(callback)
                return
        callback()

    def cancel(self) -> None:
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            callbacks = list(self._callbacks)
            self._callbacks.clear()
        for callback in callbacks:
            callback()

    def release(self) -> None:
        """Drop the pending deadline without cancelling."""

        if self._timer is not None:
            self._timer.cancel()
            self._timer = None


@dataclass(frozen=True)
class Command:
    """A single external command: program, arguments, directory and env overrides."""

    program: str
    args: Sequence[str] = ()
    cwd: str | None = None
    env: Mapping[str, str] = field(default_factory=dict)
    cancel: CancellationToken | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "args", tuple(str(arg) for arg in self.args))
        object.__setattr__(self, "env", MappingProxyType(dict(self.env)))

    @property
    def argv(self) -> list[str]:
        return [self.program, *self.args]

    def describe(self) -> str:
        return " ".join(self.argv)
