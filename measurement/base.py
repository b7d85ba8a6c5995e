"""Base class for probes."""

from __future__ import annotations

from abc import ABC, abstractmethod

from measurement.models import ProbeResult


class Probe(ABC):
    """One kind of observation performed against the target deployment."""

    name: str = "probe"
    summary_phrase: str = "run the probe"
    cancellable: bool = False

    @abstractmethod
    def run(self) -> ProbeResult:
        """Perform one observation and return its outcome."""

    def cancel(self) -> None:
        """Interrupt an in-flight run; probes without a cancellable run ignore this."""
