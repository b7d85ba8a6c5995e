"""Deploy-then-delete probe."""

from __future__ import annotations

import io
from typing import TYPE_CHECKING, Callable, TextIO

from commands.runner import CommandFailedError, CommandRunner
from measurement.base import Probe
from measurement.models import ProbeResult

if TYPE_CHECKING:
    from services.cf_commands import CfCommandGenerator
    from services.cf_workflow import CfWorkflow


class AppPushability(Probe):
    """Push the sample app and delete it again with a fresh runner per run."""

    name = "App pushability"
    summary_phrase = "push and delete an app"

    def __init__(
        self,
        workflow: "CfWorkflow",
        generator: "CfCommandGenerator",
        runner_factory: Callable[[TextIO, TextIO], CommandRunner] = CommandRunner,
    ) -> None:
        self._workflow = workflow
        self._generator = generator
        self._runner_factory = runner_factory

    def run(self) -> ProbeResult:
        stdout, stderr = io.StringIO(), io.StringIO()
        runner = self._runner_factory(stdout, stderr)
        commands = [*self._workflow.push(self._generator), *self._workflow.delete(self._generator)]
        try:
            runner.run_in_sequence(*commands)
        except CommandFailedError as exc:
            return ProbeResult(
                success=False,
                stdout=stdout.getvalue(),
                stderr=stderr.getvalue(),
                message=f"App push/delete failed: {exc}",
            )
        return ProbeResult(success=True, stdout=stdout.getvalue(), stderr=stderr.getvalue())
