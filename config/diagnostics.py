"""Diagnostics routines for the configuration subsystem."""

from __future__ import annotations

from pathlib import Path

from config.controller import ConfigController, ConfigError, UptimerConfig
from diagnostics.models import DiagnosticResult, DiagnosticStatus


def probe(config_file: Path) -> DiagnosticResult:
    """Run a configuration probe to validate the config file.

    Args:
        config_file: Path to the uptimer config file.

    Returns:
        Diagnostic result indicating config readiness.
    """

    try:
        config = ConfigController.load(config_file)
    except ConfigError as exc:
        return DiagnosticResult(
            name="config",
            status=DiagnosticStatus.FAIL,
            details=str(exc),
        )
    return check_loaded(config, config_file)


def check_loaded(config: UptimerConfig, config_file: Path) -> DiagnosticResult:
    """Report readiness of a configuration that has already been loaded."""

    name = "config"
    if not config.cf.tcp_domain:
        return DiagnosticResult(
            name=name,
            status=DiagnosticStatus.WARN,
            details=f"Config valid at {config_file}; no tcp_domain set",
        )
    return DiagnosticResult(
        name=name,
        status=DiagnosticStatus.PASS,
        details=f"Config valid at {config_file}",
    )
