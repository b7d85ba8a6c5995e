"""Setup, measure and tear down one observation window."""

from __future__ import annotations

from enum import Enum
import logging
import threading
from typing import Sequence

from commands.models import Command
from commands.runner import CommandFailedError, CommandRunner
from core.logging import log_error, log_info, logger as LOGGER
from measurement.periodic import Periodic
from services.cf_commands import CfCommandGenerator
from services.cf_workflow import CfWorkflow


class OrchestratorState(str, Enum):
    """Lifecycle of an orchestrated run."""

    NOT_STARTED = "not_started"
    SETTING_UP = "setting_up"
    RUNNING = "running"
    TEARING_DOWN = "tearing_down"
    DONE = "done"


class WorkloadInterrupted(RuntimeError):
    """Raised in place of ``KeyboardInterrupt`` when the workload is interrupted."""


class Orchestrator:
    """Drive setup, concurrent measurement during the workload, and teardown.

    The observation window lasts exactly as long as the ``while`` commands;
    every scheduler is started before them and stopped after them.
    """

    def __init__(
        self,
        while_commands: Sequence[Command],
        logger: logging.Logger | None,
        workflow: CfWorkflow,
        runner: CommandRunner,
        measurements: Sequence[Periodic],
    ) -> None:
        self._while_commands = tuple(while_commands)
        self._logger = logger or LOGGER
        self._workflow = workflow
        self._runner = runner
        self._measurements = tuple(measurements)
        self._lock = threading.Lock()
        self._state = OrchestratorState.NOT_STARTED
        self._failed = False

    @property
    def state(self) -> OrchestratorState:
        with self._lock:
            return self._state

    @property
    def failed(self) -> bool:
        with self._lock:
            return self._failed

    @property
    def measurements(self) -> tuple[Periodic, ...]:
        return self._measurements

    def _transition(self, state: OrchestratorState, *, failed: bool = False) -> None:
        with self._lock:
            self._state = state
            if failed:
                self._failed = True

    def setup(self, runner: CommandRunner, generator: CfCommandGenerator) -> None:
        """Provision the org, space and app measured during the run.

        Raises:
            CommandFailedError: if any provisioning command fails.
        """

        self._transition(OrchestratorState.SETTING_UP)
        try:
            runner.run_in_sequence(
                *self._workflow.setup(generator),
                *self._workflow.push(generator),
            )
        except CommandFailedError:
            self._transition(OrchestratorState.SETTING_UP, failed=True)
            raise

    def run(self, perform_measurements: bool) -> tuple[int, BaseException | None]:
        """Run the workload with all measurements active and return ``(exit_code, error)``."""

        self._transition(OrchestratorState.RUNNING)
        if not perform_measurements:
            log_error("Measurements disabled by failed setup; not running workload", target=self._logger)
            self._transition(OrchestratorState.RUNNING, failed=True)
            return 1, None

        log_info("[UPTIMER] Starting measurements", target=self._logger)
        for measurement in self._measurements:
            measurement.start()

        error: BaseException | None = None
        for command in self._while_commands:
            log_info(f"[UPTIMER] Running command: `{command.describe()}`", target=self._logger)
        try:
            self._runner.run_in_sequence(*self._while_commands)
        except CommandFailedError as exc:
            error = exc
        except KeyboardInterrupt:
            error = WorkloadInterrupted("Workload interrupted")
        log_info("[UPTIMER] Finished running command", target=self._logger)

        log_info("[UPTIMER] Stopping measurements", target=self._logger)
        for measurement in self._measurements:
            measurement.stop()

        exit_code = 0 if error is None else 1
        lines = []
        for measurement in self._measurements:
            if measurement.failed():
                exit_code = 1
            lines.append(measurement.summary())
        if lines:
            log_info("[UPTIMER] Measurement summaries:\n" + "\n".join(lines), target=self._logger)

        self._transition(OrchestratorState.RUNNING, failed=exit_code != 0)
        return exit_code, error

    def tear_down(self, runner: CommandRunner, generator: CfCommandGenerator) -> None:
        """Delete everything ``setup`` created; always attempted.

        Raises:
            CommandFailedError: if a teardown command fails. Callers log it and continue.
        """

        self._transition(OrchestratorState.TEARING_DOWN)
        try:
            runner.run_in_sequence(*self._workflow.tear_down(generator))
        finally:
            self._transition(OrchestratorState.DONE)
