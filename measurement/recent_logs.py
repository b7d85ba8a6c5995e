"""Recent-log fetch probe."""

from __future__ import annotations

import io
from typing import TYPE_CHECKING, Callable, TextIO

from commands.runner import CommandFailedError, CommandRunner
from measurement.base import Probe
from measurement.models import ProbeResult

if TYPE_CHECKING:
    from services.app_log_validator import AppLogValidator
    from services.cf_commands import CfCommandGenerator
    from services.cf_workflow import CfWorkflow

INVALID_LOG_MESSAGE = "App log fetched was not from the app"


class RecentLogs(Probe):
    """Fetch recent app logs and check that they contain fresh app output."""

    name = "Recent logs fetching"
    summary_phrase = "fetch recent logs"

    def __init__(
        self,
        workflow: "CfWorkflow",
        generator: "CfCommandGenerator",
        validator: "AppLogValidator",
        runner_factory: Callable[[TextIO, TextIO], CommandRunner] = CommandRunner,
    ) -> None:
        self._workflow = workflow
        self._generator = generator
        self._validator = validator
        self._runner_factory = runner_factory

    def run(self) -> ProbeResult:
        stdout, stderr = io.StringIO(), io.StringIO()
        runner = self._runner_factory(stdout, stderr)
        try:
            runner.run_in_sequence(*self._workflow.recent_logs(self._generator))
        except CommandFailedError as exc:
            return ProbeResult(
                success=False,
                stdout=stdout.getvalue(),
                stderr=stderr.getvalue(),
                message=f"Fetching recent logs failed: {exc}",
            )

        captured = stdout.getvalue()
        if not self._validator.accepts(captured):
            return ProbeResult(
                success=False,
                stdout=captured,
                stderr=stderr.getvalue(),
                message=INVALID_LOG_MESSAGE,
            )
        return ProbeResult(success=True, stdout=captured, stderr=stderr.getvalue())
