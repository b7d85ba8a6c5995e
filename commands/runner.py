"""Run command descriptors with full output capture."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
import io
import logging
import os
import subprocess
import threading
from typing import IO, Iterable, TextIO

from commands.models import Command
from core.logging import log_error


class CommandFailedError(RuntimeError):
    """Raised when one or more commands exit non-zero or fail to launch."""

    def __init__(self, failures: Iterable[tuple[Command, int | None, str]]) -> None:
        self.failures = list(failures)
        parts = []
        for command, returncode, reason in self.failures:
            if returncode is None:
                parts.append(f"{command.program}: {reason}")
            else:
                parts.append(f"{command.program}: exit status {returncode}")
        super().__init__("; ".join(parts) or "command failed")

    @property
    def command(self) -> Command | None:
        return self.failures[0][0] if self.failures else None

    @property
    def returncode(self) -> int | None:
        return self.failures[0][1] if self.failures else None


class CommandRunner:
    """Execute commands, copying stdout and stderr into fixed sinks.

    Sinks accumulate across calls; callers that log per phase clear them
    with :func:`reset_buffers` after reading.
    """

    def __init__(self, stdout_sink: TextIO, stderr_sink: TextIO) -> None:
        self._stdout_sink = stdout_sink
        self._stderr_sink = stderr_sink
        self._write_lock = threading.Lock()

    def run(self, command: Command) -> None:
        """Run one command to completion, raising ``CommandFailedError`` on failure."""

        token = command.cancel
        env = dict(os.environ)
        env.update(command.env)
        try:
            process = subprocess.Popen(
                command.argv,
                cwd=command.cwd,
                env=env,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                errors="replace",
            )
        except OSError as exc:
            with self._write_lock:
                self._stderr_sink.write(f"{exc}\n")
            raise CommandFailedError([(command, None, str(exc))]) from exc

        if token is not None:
            token.on_cancel(lambda: _kill_quietly(process))

        copiers = [
            threading.Thread(target=self._copy, args=(process.stdout, self._stdout_sink), daemon=True),
            threading.Thread(target=self._copy, args=(process.stderr, self._stderr_sink), daemon=True),
        ]
        for copier in copiers:
            copier.start()
        for copier in copiers:
            copier.join()
        returncode = process.wait()

        if returncode != 0:
            reason = "cancelled" if token is not None and token.cancelled else "non-zero exit"
            raise CommandFailedError([(command, returncode, reason)])

    def run_in_sequence(self, *commands: Command) -> None:
        """Run commands in order, stopping at the first failure."""

        for command in commands:
            self.run(command)

    def run_concurrently(self, *commands: Command) -> None:
        """Run all commands in parallel and wait for every one of them."""

        if not commands:
            return
        failures: list[tuple[Command, int | None, str]] = []
        with ThreadPoolExecutor(max_workers=len(commands)) as executor:
            futures = [executor.submit(self.run, command) for command in commands]
        for future in futures:
            exc = future.exception()
            if isinstance(exc, CommandFailedError):
                failures.extend(exc.failures)
            elif exc is not None:
                raise exc
        if failures:
            raise CommandFailedError(failures)

    def _copy(self, source: IO[str] | None, sink: TextIO) -> None:
        if source is None:
            return
        with source:
            for chunk in iter(lambda: source.readline(), ""):
                with self._write_lock:
                    sink.write(chunk)
                    if hasattr(sink, "flush"):
                        sink.flush()


def _kill_quietly(process: subprocess.Popen) -> None:
    if process.poll() is None:
        try:
            process.kill()
        except ProcessLookupError:
            pass


def create_buffered_runner() -> tuple[CommandRunner, io.StringIO, io.StringIO]:
    """Return a runner writing into fresh in-memory buffers, plus the buffers."""

    stdout_buffer = io.StringIO()
    stderr_buffer = io.StringIO()
    return CommandRunner(stdout_buffer, stderr_buffer), stdout_buffer, stderr_buffer


def reset_buffers(*buffers: io.StringIO) -> None:
    for buffer in buffers:
        buffer.seek(0)
        buffer.truncate(0)


def log_buffered_runner_failure(
    logger: logging.Logger,
    what_failed: str,
    error: BaseException,
    stdout_buffer: io.StringIO,
    stderr_buffer: io.StringIO,
) -> None:
    """Log a failed phase with everything its runner captured, then clear the buffers."""

    log_error(
        f"Failed {what_failed}: {error}\n"
        f"stdout:\n{stdout_buffer.getvalue()}\n"
        f"stderr:\n{stderr_buffer.getvalue()}\n",
        target=logger,
    )
    reset_buffers(stdout_buffer, stderr_buffer)
