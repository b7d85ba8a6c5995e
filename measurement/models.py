"""Models shared by probes and their schedulers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of one probe invocation with the text it captured."""

    success: bool
    stdout: str = ""
    stderr: str = ""
    message: str = ""


class SchedulerState(str, Enum):
    """Lifecycle of a periodic scheduler."""

    IDLE = "idle"
    TICKING = "ticking"
    STOPPED = "stopped"
