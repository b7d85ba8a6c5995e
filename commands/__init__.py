"""Command descriptors and the runner that executes them."""

from commands.models import CancellationToken, Command
from commands.runner import (
    CommandFailedError,
    CommandRunner,
    create_buffered_runner,
    log_buffered_runner_failure,
    reset_buffers,
)

__all__ = [
    "CancellationToken",
    "Command",
    "CommandFailedError",
    "CommandRunner",
    "create_buffered_runner",
    "log_buffered_runner_failure",
    "reset_buffers",
]
