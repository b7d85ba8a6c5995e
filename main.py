"""Command-line entry point for uptimer."""

from __future__ import annotations

import argparse
from pathlib import Path
import sys

from config.controller import ConfigController, ConfigError
from core import app
from core.logging import enable_file_logging, log_error, set_level
from core.version import __version__
from diagnostics.runner import format_results, has_failures


def parse_args(argv: list[str]) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        argv: Raw command-line arguments.

    Returns:
        Parsed arguments namespace.
    """

    parser = argparse.ArgumentParser(
        description="Measure platform availability while a workload runs."
    )
    parser.add_argument("-configFile", dest="config_file", type=str, default="", help="Path to the config file")
    parser.add_argument(
        "-v",
        dest="show_version",
        action="store_true",
        help="Prints the version of uptimer and exits",
    )
    parser.add_argument(
        "--diagnostics",
        action="store_true",
        help="Run preflight checks and exit.",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Application entry point.

    Args:
        argv: Optional list of command-line arguments.

    Returns:
        Process exit code.
    """

    if argv is None:
        argv = sys.argv[1:]

    args = parse_args(argv)
    if args.show_version:
        print(f"version: {__version__}")
        return 0

    if not args.config_file:
        log_error("Failed to load config: '-configFile' flag required")
        return 1

    config_file = Path(args.config_file)
    try:
        config = ConfigController.load(config_file)
    except ConfigError as exc:
        log_error(f"Failed to load config: {exc}")
        return 1

    set_level(config.logging_level)
    if config.log_file:
        enable_file_logging(Path(config.log_file))

    if args.diagnostics:
        results = app.preflight(config, config_file)
        print(format_results(results))
        return 1 if has_failures(results) else 0

    return app.run(config, config_file)


if __name__ == "__main__":
    raise SystemExit(main())
