"""Data models for the build phase.

Defines the core dataclasses passed between the orchestrator, the
coordinator and the status display:
- TargetStatus: Enum of per-target outcomes
- BuildJob: One enabled target and whether it needs building
- BuildResult: Outcome of one job
- BuildReport: Aggregated outcome of a run
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from .config_scanner import TargetDescriptor
from .errors import BuildError


class TargetStatus(Enum):
    """Outcome of a single target."""

    BUILT = "built"
    UP_TO_DATE = "up-to-date"
    FAILED = "failed"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class BuildJob:
    """A single enabled target to process.

    Attributes:
        target: Target descriptor with entry_path set
        outputs: Paths produced by the build
        needs_build: Result of the staleness check
    """

    target: TargetDescriptor
    outputs: frozenset[Path]
    needs_build: bool

    @property
    def name(self) -> str:
        return self.target.name


@dataclass(frozen=True)
class BuildResult:
    """Outcome of one BuildJob.

    Attributes:
        name: Target name
        built: True if the toolchain produced a new binary
        error: The failure, if any
    """

    name: str
    built: bool
    error: Optional[BuildError] = None

    @property
    def status(self) -> TargetStatus:
        if self.error is not None:
            return TargetStatus.FAILED
        if self.built:
            return TargetStatus.BUILT
        return TargetStatus.UP_TO_DATE


@dataclass
class BuildReport:
    """Aggregated result of an orchestrator run.

    Attributes:
        results: Per-target results in discovery order
        manifest_path: Written install manifest (None if not reached)
    """

    results: list[BuildResult]
    manifest_path: Optional[Path] = None

    @property
    def success(self) -> bool:
        """True if no target failed."""
        return all(r.error is None for r in self.results)

    @property
    def built(self) -> list[str]:
        """Names of targets that were rebuilt."""
        return [r.name for r in self.results if r.status == TargetStatus.BUILT]

    @property
    def up_to_date(self) -> list[str]:
        """Names of targets that were skipped."""
        return [r.name for r in self.results if r.status == TargetStatus.UP_TO_DATE]

    @property
    def errors(self) -> list[BuildError]:
        """Build errors in report order."""
        return [r.error for r in self.results if r.error is not None]

    def status_of(self, name: str) -> TargetStatus:
        """Return the status of a target by name.

        Raises:
            KeyError: If the target was not part of the run
        """
        for result in self.results:
            if result.name == name:
                return result.status
        raise KeyError(f"Unknown target: {name}")
