"""Tests for preflight diagnostics."""

from __future__ import annotations

import json
import sys

from commands.diagnostics import probe as while_probe
from commands.models import Command
from config.diagnostics import probe as config_probe
from diagnostics.models import DiagnosticResult, DiagnosticStatus
from diagnostics.runner import format_results, has_failures, run_diagnostics
from services.diagnostics import probe_app_path, probe_cf_cli


def test_cf_cli_missing(monkeypatch) -> None:
    monkeypatch.setattr("services.diagnostics.shutil.which", lambda program: None)

    result = probe_cf_cli()

    assert result.status is DiagnosticStatus.FAIL


def test_cf_cli_present(monkeypatch) -> None:
    monkeypatch.setattr("services.diagnostics.shutil.which", lambda program: "/usr/local/bin/cf")

    assert probe_cf_cli().status is DiagnosticStatus.PASS


def test_app_path_checks(tmp_path) -> None:
    assert probe_app_path("").status is DiagnosticStatus.FAIL
    assert probe_app_path(str(tmp_path / "missing")).status is DiagnosticStatus.FAIL
    assert probe_app_path(str(tmp_path)).status is DiagnosticStatus.WARN
    (tmp_path / "app").write_text("binary", encoding="utf-8")
    assert probe_app_path(str(tmp_path)).status is DiagnosticStatus.PASS


def test_while_probe() -> None:
    assert while_probe([Command(sys.executable)]).status is DiagnosticStatus.PASS
    assert while_probe([Command("no-such-workload-tool")]).status is DiagnosticStatus.FAIL
    assert while_probe([]).status is DiagnosticStatus.FAIL


def test_config_probe(tmp_path) -> None:
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps(
            {
                "while": [{"command": "true"}],
                "cf": {"api": "a", "app_domain": "b", "admin_user": "c", "admin_password": "d"},
            }
        ),
        encoding="utf-8",
    )

    assert config_probe(path).status is DiagnosticStatus.WARN
    assert config_probe(tmp_path / "absent.json").status is DiagnosticStatus.FAIL


def test_run_diagnostics_converts_exceptions() -> None:
    def broken_check() -> DiagnosticResult:
        raise RuntimeError("nope")

    def good_check() -> DiagnosticResult:
        return DiagnosticResult(name="good", status=DiagnosticStatus.PASS, details="fine")

    results = run_diagnostics([broken_check, good_check])

    assert results[0].name == "broken_check"
    assert results[0].status is DiagnosticStatus.FAIL
    assert has_failures(results)
    report = format_results(results)
    assert "[FAIL] broken_check" in report
    assert "[PASS] good: fine" in report
