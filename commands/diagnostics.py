"""Diagnostics routines for the workload commands."""

from __future__ import annotations

from pathlib import Path
import shutil
from typing import Sequence

from commands.models import Command
from diagnostics.models import DiagnosticResult, DiagnosticStatus


def probe(commands: Sequence[Command]) -> DiagnosticResult:
    """Check that every workload program can be resolved."""

    name = "while"
    if not commands:
        return DiagnosticResult(
            name=name,
            status=DiagnosticStatus.FAIL,
            details="No workload commands configured",
        )
    unresolved = [
        command.program
        for command in commands
        if shutil.which(command.program) is None and not Path(command.program).exists()
    ]
    if unresolved:
        return DiagnosticResult(
            name=name,
            status=DiagnosticStatus.FAIL,
            details=f"Cannot resolve: {', '.join(unresolved)}",
        )
    return DiagnosticResult(
        name=name,
        status=DiagnosticStatus.PASS,
        details=f"{len(commands)} workload command(s) resolvable",
    )
