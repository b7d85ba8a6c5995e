"""Diagnostics routines for the platform services."""

from __future__ import annotations

from pathlib import Path
import shutil

from diagnostics.models import DiagnosticResult, DiagnosticStatus
from services.cf_commands import CF_PROGRAM


def probe_cf_cli(program: str = CF_PROGRAM) -> DiagnosticResult:
    """Check that the platform CLI is on ``PATH``."""

    name = "cf_cli"
    resolved = shutil.which(program)
    if resolved is None:
        return DiagnosticResult(
            name=name,
            status=DiagnosticStatus.FAIL,
            details=f"'{program}' not found on PATH",
        )
    return DiagnosticResult(name=name, status=DiagnosticStatus.PASS, details=resolved)


def probe_app_path(app_path: str) -> DiagnosticResult:
    """Check that the prebuilt sample app exists.

    Args:
        app_path: Directory or archive pushed by the workflows.

    Returns:
        Diagnostic result indicating app readiness.
    """

    name = "app"
    if not app_path:
        return DiagnosticResult(
            name=name,
            status=DiagnosticStatus.FAIL,
            details="No app path configured (app.path)",
        )
    path = Path(app_path).expanduser()
    if not path.exists():
        return DiagnosticResult(
            name=name,
            status=DiagnosticStatus.FAIL,
            details=f"App missing at {path}",
        )
    if path.is_dir() and not any(path.iterdir()):
        return DiagnosticResult(
            name=name,
            status=DiagnosticStatus.WARN,
            details=f"App directory {path} is empty",
        )
    return DiagnosticResult(name=name, status=DiagnosticStatus.PASS, details=f"App found at {path}")
