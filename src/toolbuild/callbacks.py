"""Status callback protocol for the build coordinator.

The coordinator reports each BuildResult through this interface as it is
collected, in dispatch order. The console display implements it.
"""

from typing import Protocol, runtime_checkable

from .models import BuildResult


@runtime_checkable
class StatusCallback(Protocol):
    """Protocol for receiving per-target results from the coordinator."""

    def on_result(self, result: BuildResult) -> None:
        """Called once per target, in dispatch order.

        Args:
            result: Outcome of the target's build job.
        """
        ...

    def on_complete(self) -> None:
        """Called once every target succeeded, before the manifest is written."""
        ...


class NullCallback:
    """No-op callback implementation for testing and non-interactive use."""

    def on_result(self, result: BuildResult) -> None:
        """Discard result."""
        pass

    def on_complete(self) -> None:
        pass
