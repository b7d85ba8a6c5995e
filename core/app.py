"""Application runtime wiring for one uptimer run."""

from __future__ import annotations

import logging
from pathlib import Path
import sys
import tempfile

from commands.diagnostics import probe as while_probe
from commands.models import Command
from commands.runner import (
    CommandFailedError,
    CommandRunner,
    create_buffered_runner,
    log_buffered_runner_failure,
    reset_buffers,
)
from config.controller import UptimerConfig
from config.diagnostics import check_loaded as config_check_loaded
from core.clock import Clock
from core.logging import log_info, logger as LOGGER
from diagnostics.models import DiagnosticResult
from diagnostics.runner import format_results, has_failures, run_diagnostics
from measurement.app_pushability import AppPushability
from measurement.http_availability import HTTPAvailability
from measurement.periodic import Periodic
from measurement.recent_logs import RecentLogs
from measurement.result_set import ResultSet
from measurement.retry import RetryPolicy
from measurement.streaming_logs import StreamingLogs
from services.app_log_validator import AppLogValidator
from services.cf_commands import CfCommandGenerator
from services.cf_workflow import CfWorkflow
from services.diagnostics import probe_app_path, probe_cf_cli
from services.orchestrator import Orchestrator


def while_commands(config: UptimerConfig) -> list[Command]:
    return [Command(entry.command, entry.command_args) for entry in config.while_commands]


def preflight(config: UptimerConfig, config_file: Path) -> list[DiagnosticResult]:
    """Run the checks whose failure makes measuring pointless."""

    def config_check() -> DiagnosticResult:
        return config_check_loaded(config, config_file)

    def cf_cli_check() -> DiagnosticResult:
        return probe_cf_cli()

    def app_check() -> DiagnosticResult:
        return probe_app_path(config.app.path)

    def while_check() -> DiagnosticResult:
        return while_probe(while_commands(config))

    return run_diagnostics([config_check, cf_cli_check, app_check, while_check])


def create_measurements(
    logger: logging.Logger,
    clock: Clock,
    config: UptimerConfig,
    orc_workflow: CfWorkflow,
    push_workflow: CfWorkflow,
    recent_logs_generator: CfCommandGenerator,
    streaming_logs_generator: CfCommandGenerator,
    push_generator: CfCommandGenerator,
) -> list[Periodic]:
    """Build one scheduler per probe, each owning its own dependencies."""

    retry_policy = RetryPolicy.from_names(config.retry_on)
    allowed = config.allowed_failures
    intervals = config.intervals

    http_availability = HTTPAvailability(orc_workflow.app_url, timeout_s=config.http_timeout_s)
    app_pushability = AppPushability(push_workflow, push_generator)
    recent_logs = RecentLogs(orc_workflow, recent_logs_generator, AppLogValidator())
    streaming_logs = StreamingLogs(
        orc_workflow,
        streaming_logs_generator,
        AppLogValidator(),
        clock,
        deadline_s=config.streaming_logs_deadline_s,
    )

    return [
        Periodic(
            logger,
            clock,
            intervals.http_availability,
            http_availability,
            ResultSet(),
            allowed.http_availability,
            RetryPolicy.never(),
        ),
        Periodic(
            logger,
            clock,
            intervals.app_pushability,
            app_pushability,
            ResultSet(),
            allowed.app_pushability,
            retry_policy,
        ),
        Periodic(
            logger,
            clock,
            intervals.recent_logs,
            recent_logs,
            ResultSet(),
            allowed.recent_logs,
            retry_policy,
        ),
        Periodic(
            logger,
            clock,
            intervals.streaming_logs,
            streaming_logs,
            ResultSet(),
            allowed.streaming_logs,
            retry_policy,
        ),
    ]


def run(config: UptimerConfig, config_file: Path, logger: logging.Logger | None = None) -> int:
    """Provision, measure during the workload, tear down, and return the exit code."""

    logger = logger or LOGGER
    perform_measurements = True

    results = preflight(config, config_file)
    log_info(format_results(results), target=logger)
    if has_failures(results):
        logger.error("[UPTIMER] Preflight failed; measurements disabled")
        perform_measurements = False

    with tempfile.TemporaryDirectory(prefix="uptimer-") as tmp_root:
        homes = {}
        for name in ("orchestrator", "recent_logs", "streaming_logs", "push"):
            home = Path(tmp_root) / name
            home.mkdir()
            homes[name] = str(home)

        buffered_runner, runner_out, runner_err = create_buffered_runner()

        push_generator = CfCommandGenerator(homes["push"])
        push_workflow = CfWorkflow.create(config.cf, config.app)
        log_info(f"[UPTIMER] Setting up push workflow with org {push_workflow.org} ...", target=logger)
        try:
            buffered_runner.run_in_sequence(*push_workflow.setup(push_generator))
        except CommandFailedError as exc:
            log_buffered_runner_failure(logger, "push workflow setup", exc, runner_out, runner_err)
            perform_measurements = False
        else:
            reset_buffers(runner_out, runner_err)
            log_info("[UPTIMER] Finished setting up push workflow", target=logger)

        orc_generator = CfCommandGenerator(homes["orchestrator"])
        orc_workflow = CfWorkflow.create(config.cf, config.app)
        measurements = create_measurements(
            logger,
            Clock(),
            config,
            orc_workflow,
            push_workflow,
            CfCommandGenerator(homes["recent_logs"]),
            CfCommandGenerator(homes["streaming_logs"]),
            push_generator,
        )
        orchestrator = Orchestrator(
            while_commands(config),
            logger,
            orc_workflow,
            CommandRunner(sys.stdout, sys.stderr),
            measurements,
        )

        log_info(f"[UPTIMER] Setting up main workflow with org {orc_workflow.org} ...", target=logger)
        try:
            orchestrator.setup(buffered_runner, orc_generator)
        except CommandFailedError as exc:
            log_buffered_runner_failure(logger, "main workflow setup", exc, runner_out, runner_err)
            perform_measurements = False
        else:
            reset_buffers(runner_out, runner_err)
            log_info("[UPTIMER] Finished setting up main workflow", target=logger)

        exit_code, error = orchestrator.run(perform_measurements)
        if error is not None:
            logger.error("[UPTIMER] Failed run: %s", error)

        log_info("[UPTIMER] Tearing down...", target=logger)
        try:
            orchestrator.tear_down(buffered_runner, orc_generator)
        except CommandFailedError as exc:
            log_buffered_runner_failure(logger, "main teardown", exc, runner_out, runner_err)
        else:
            reset_buffers(runner_out, runner_err)
        try:
            buffered_runner.run_in_sequence(*push_workflow.tear_down(push_generator))
        except CommandFailedError as exc:
            log_buffered_runner_failure(logger, "push workflow teardown", exc, runner_out, runner_err)
        log_info("[UPTIMER] Finished tearing down", target=logger)

    return exit_code
