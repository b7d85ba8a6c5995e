"""Live log streaming probe."""

from __future__ import annotations

import io
import threading
from typing import TYPE_CHECKING, Callable, TextIO

from commands.models import CancellationToken
from commands.runner import CommandFailedError, CommandRunner
from core.clock import Clock
from measurement.base import Probe
from measurement.models import ProbeResult
from measurement.recent_logs import INVALID_LOG_MESSAGE

if TYPE_CHECKING:
    from services.app_log_validator import AppLogValidator
    from services.cf_commands import CfCommandGenerator
    from services.cf_workflow import CfWorkflow

DEFAULT_DEADLINE_S = 15.0


class StreamingLogs(Probe):
    """Stream app logs until a fixed deadline, then validate what arrived.

    Every run gets a fresh cancellation token armed with the deadline on the
    injected clock. A stream stopped by the token is expected; its partial
    output is validated like recent logs.
    """

    name = "Streaming logs"
    summary_phrase = "stream logs"
    cancellable = True

    def __init__(
        self,
        workflow: "CfWorkflow",
        generator: "CfCommandGenerator",
        validator: "AppLogValidator",
        clock: Clock,
        *,
        deadline_s: float = DEFAULT_DEADLINE_S,
        runner_factory: Callable[[TextIO, TextIO], CommandRunner] = CommandRunner,
    ) -> None:
        if deadline_s <= 0:
            raise ValueError(f"deadline_s must be positive, got {deadline_s}")
        self._workflow = workflow
        self._generator = generator
        self._validator = validator
        self._clock = clock
        self._deadline_s = float(deadline_s)
        self._runner_factory = runner_factory
        self._lock = threading.Lock()
        self._token: CancellationToken | None = None

    @property
    def deadline_s(self) -> float:
        return self._deadline_s

    def cancel(self) -> None:
        with self._lock:
            token = self._token
        if token is not None:
            token.cancel()

    def run(self) -> ProbeResult:
        token = CancellationToken.with_deadline(self._deadline_s, self._clock)
        with self._lock:
            self._token = token
        stdout, stderr = io.StringIO(), io.StringIO()
        runner = self._runner_factory(stdout, stderr)
        try:
            runner.run_in_sequence(*self._workflow.stream_logs(self._generator, token))
        except CommandFailedError as exc:
            if not token.cancelled:
                return ProbeResult(
                    success=False,
                    stdout=stdout.getvalue(),
                    stderr=stderr.getvalue(),
                    message=f"Streaming logs failed: {exc}",
                )
        finally:
            token.release()
            with self._lock:
                self._token = None

        captured = stdout.getvalue()
        if not self._validator.accepts(captured):
            return ProbeResult(
                success=False,
                stdout=captured,
                stderr=stderr.getvalue(),
                message=INVALID_LOG_MESSAGE,
            )
        return ProbeResult(success=True, stdout=captured, stderr=stderr.getvalue())
