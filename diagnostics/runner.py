"""Preflight runner utilities."""

from __future__ import annotations

from collections.abc import Callable, Iterable
import logging

from core.logging import logger as LOGGER
from diagnostics.models import DiagnosticResult, DiagnosticStatus


def format_results(results: Iterable[DiagnosticResult]) -> str:
    """Return a human-friendly preflight report."""

    lines = ["Preflight report", "-" * 60]
    for result in results:
        lines.append(f"[{result.status.value}] {result.name}: {result.details}")
    lines.append("-" * 60)
    return "\n".join(lines)


def run_diagnostics(
    probes: Iterable[Callable[[], DiagnosticResult]],
    logger: logging.Logger | None = None,
) -> list[DiagnosticResult]:
    """Run preflight probes and return results."""

    log = logger or LOGGER
    results: list[DiagnosticResult] = []
    for probe in probes:
        try:
            result = probe()
        except Exception as exc:  # noqa: BLE001 - every check must report
            log.exception("Preflight check failed: %s", probe)
            result = DiagnosticResult(
                name=getattr(probe, "__name__", "unknown_probe"),
                status=DiagnosticStatus.FAIL,
                details=f"Check raised exception: {exc}",
            )
        results.append(result)
    return results


def has_failures(results: Iterable[DiagnosticResult]) -> bool:
    return any(result.failed for result in results)
