"""
Error types for toolbuild.

Scan and staleness errors abort a run immediately. Build errors are collected
per target by the coordinator and raised together as an AggregateBuildError
once every dispatched build has finished.
"""

from pathlib import Path
from typing import Optional


class ToolbuildError(Exception):
    """Base class for all orchestrator failures."""

    pass


class ConfigError(ToolbuildError):
    """Raised when a declaration file is malformed or incomplete."""

    def __init__(self, message: str, path: Optional[Path] = None):
        self.path = path
        if path is not None:
            message = f"{message}: {path}"
        super().__init__(message)


class NoTargetsError(ToolbuildError):
    """Raised when no declaration enables a target for the current platform."""

    pass


class SourceError(ToolbuildError):
    """Raised when the source directory is unreadable or an entry file is missing."""

    pass


class StalenessError(ToolbuildError):
    """Raised when an input or output cannot be stat'ed during the staleness check."""

    pass


class BuildError(ToolbuildError):
    """Failure of a single target build.

    Attributes:
        target: Name of the target that failed
        phase: Build phase that failed ("workspace", "compile")
        stderr: Captured toolchain stderr, if any
    """

    def __init__(self, target: str, message: str, phase: str = "compile", stderr: Optional[str] = None):
        super().__init__(f"{target}: {message}")
        self.target = target
        self.phase = phase
        self.message = message
        self.stderr = stderr

    def format(self) -> str:
        """Format error as human-readable string.

        Returns:
            Formatted error message
        """
        lines = [f"[{self.phase}] {self.target}: {self.message}"]

        if self.stderr:
            stderr_preview = self.stderr.strip()[:2000]
            if len(self.stderr.strip()) > 2000:
                stderr_preview += "... (truncated)"
            for line in stderr_preview.splitlines():
                lines.append(f"  {line}")

        return "\n".join(lines)


class AggregateBuildError(ToolbuildError):
    """All per-target build failures of one run, joined into a single error."""

    def __init__(self, errors: list[BuildError]):
        self.errors = list(errors)
        super().__init__("\n".join(e.format() for e in self.errors))

    @property
    def targets(self) -> list[str]:
        """Names of the failed targets in report order."""
        return [e.target for e in self.errors]


class ManifestWriteError(ToolbuildError):
    """Raised when the install manifest cannot be written."""

    pass
