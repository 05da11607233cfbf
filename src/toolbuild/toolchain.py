"""External toolchain invocation.

Wraps `go build` with the fixed reproducibility flag set and platform-safe
subprocess defaults (no console window on Windows, stdin detached).
"""

import logging
import subprocess
import sys
from pathlib import Path
from typing import Any, Mapping, Optional, Protocol, Sequence, runtime_checkable

from .build_config import REPRODUCIBLE_FLAGS, ToolchainFlags
from .errors import BuildError

logger = logging.getLogger(__name__)


def get_subprocess_creation_flags() -> int:
    """Return CREATE_NO_WINDOW on Windows so `go build` opens no console, else 0."""
    if sys.platform == "win32":
        return subprocess.CREATE_NO_WINDOW
    return 0


def safe_run(cmd: list[str], **kwargs: Any) -> subprocess.CompletedProcess:
    """Run a toolchain command with stdin detached and no console window.

    Args:
        cmd: Command and arguments
        **kwargs: Passed through to subprocess.run

    Returns:
        CompletedProcess result from subprocess.run
    """
    # Parallel compiles must not compete for the terminal's input
    kwargs.setdefault("stdin", subprocess.DEVNULL)

    creationflags = get_subprocess_creation_flags()
    if creationflags:
        kwargs["creationflags"] = creationflags

    return subprocess.run(cmd, **kwargs)


@runtime_checkable
class Toolchain(Protocol):
    """Compiles a set of workspace files into one output binary."""

    def compile(self, target: str, output: Path, inputs: Sequence[Path]) -> None:
        """Compile inputs into output.

        Raises:
            BuildError: If compilation fails
        """
        ...


class GoToolchain:
    """The `go build` toolchain.

    Args:
        tool: Go executable
        flags: Fixed build flags
        cwd: Directory to run from (the module root holding go.mod)
        env: Environment for the toolchain, including GOOS
    """

    def __init__(
        self,
        tool: str = "go",
        flags: ToolchainFlags = REPRODUCIBLE_FLAGS,
        cwd: Optional[Path] = None,
        env: Optional[Mapping[str, str]] = None,
    ):
        self.tool = tool
        self.flags = flags
        self.cwd = cwd
        self.env = dict(env) if env is not None else None

    def command(self, output: Path, inputs: Sequence[Path]) -> list[str]:
        """Build the `go build` command line."""
        return [self.tool, "build", *self.flags.build_flags, "-o", str(output), *(str(p) for p in inputs)]

    def compile(self, target: str, output: Path, inputs: Sequence[Path]) -> None:
        cmd = self.command(output, inputs)
        logger.debug(f"{target}: {' '.join(cmd)}")

        try:
            result = safe_run(
                cmd,
                cwd=str(self.cwd) if self.cwd is not None else None,
                env=self.env,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except FileNotFoundError as e:
            raise BuildError(target, f"toolchain not found: {self.tool}") from e
        except OSError as e:
            raise BuildError(target, f"unable to run toolchain: {e}") from e

        if result.returncode != 0:
            raise BuildError(
                target,
                f"{self.tool} build exited with status {result.returncode}",
                stderr=result.stderr or result.stdout,
            )
