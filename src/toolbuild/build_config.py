"""Build Configuration - the single immutable settings value for a run.

This module defines:
- ToolchainFlags: The fixed reproducibility/hardening flags passed to `go build`
- BuildConfig: Everything a run needs, resolved once from the environment

Design:
    BuildConfig is assembled once at process start by the CLI and passed
    explicitly to every component. Nothing reads os.environ after that point.
"""

import os
import platform
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

# Environment variables consulted by from_environment()
ENV_DESTDIR = "DESTDIR"
ENV_PLATFORM = "OS"
ENV_BUILDDIR = "BUILDDIR"
ENV_CONFIG_DIR = "TOOLBUILD_CONFIG_DIR"
ENV_TOOLCHAIN = "GO"

# Kept as a make expression so the install step resolves $(HOME) itself
DEFAULT_DESTDIR = "$(HOME)/.local/bin"
DEFAULT_CONFIG_OFFSET = Path(".config") / "tooling"
SOURCE_DIR_NAME = "src"
BUILD_DIR_NAME = "build"
MODULE_DESCRIPTOR = "go.mod"


@dataclass(frozen=True)
class ToolchainFlags:
    """Fixed flags for every toolchain invocation.

    Attributes:
        name: Flag set identifier
        description: Human-readable description
        build_flags: Flags passed to `go build` before `-o`
    """

    name: str
    description: str
    build_flags: tuple[str, ...]


REPRODUCIBLE_FLAGS = ToolchainFlags(
    name="reproducible",
    description="Position-independent, path-trimmed, vendored build without VCS stamping",
    build_flags=(
        "-trimpath",
        "-buildmode=pie",
        "-mod=vendor",
        "-buildvcs=false",
    ),
)


def host_platform() -> str:
    """Return the platform identifier of the running interpreter (e.g. "linux")."""
    return platform.system().lower()


@dataclass(frozen=True)
class BuildConfig:
    """Immutable configuration for one orchestrator run.

    Attributes:
        project_dir: Project root containing go.mod and the source directory
        source_dir: Directory holding shared sources and `<target>.app.go` entries
        config_dir: Directory holding one `<target>.json` declaration per target
        output_dir: Directory receiving binaries, workspaces and the Makefile
        destination_root: Install destination written into the Makefile
        platform: Target platform identifier used for enablement and GOOS
        home_dir: Home directory used to render HOME-relative config paths
        toolchain: Toolchain executable
        toolchain_flags: Fixed flags for every toolchain invocation
        platform_gate: Whether generated entrypoints refuse to run on another OS
        verbose: Whether verbose output is enabled
        environ: Process environment captured at startup, the base for toolchain runs
    """

    project_dir: Path
    source_dir: Path
    config_dir: Path
    output_dir: Path
    destination_root: str
    platform: str
    home_dir: Optional[Path]
    toolchain: str = "go"
    toolchain_flags: ToolchainFlags = REPRODUCIBLE_FLAGS
    platform_gate: bool = True
    verbose: bool = False
    environ: Mapping[str, str] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_environment(
        cls,
        project_dir: Path,
        environ: Optional[Mapping[str, str]] = None,
        verbose: bool = False,
    ) -> "BuildConfig":
        """Create a BuildConfig from environment variables.

        Args:
            project_dir: Project root directory
            environ: Environment mapping (defaults to os.environ)
            verbose: Whether verbose output is enabled

        Returns:
            A fully resolved BuildConfig
        """
        env = os.environ if environ is None else environ
        project_dir = Path(project_dir).resolve()

        home = env.get("HOME")
        home_dir = Path(home) if home else None

        config_dir_value = env.get(ENV_CONFIG_DIR)
        if config_dir_value:
            config_dir = Path(config_dir_value)
        elif home_dir is not None:
            config_dir = home_dir / DEFAULT_CONFIG_OFFSET
        else:
            config_dir = Path.home() / DEFAULT_CONFIG_OFFSET

        build_dir_value = env.get(ENV_BUILDDIR)
        output_dir = Path(build_dir_value) if build_dir_value else project_dir / BUILD_DIR_NAME
        if not output_dir.is_absolute():
            output_dir = project_dir / output_dir

        return cls(
            project_dir=project_dir,
            source_dir=project_dir / SOURCE_DIR_NAME,
            config_dir=config_dir,
            output_dir=output_dir,
            destination_root=env.get(ENV_DESTDIR) or DEFAULT_DESTDIR,
            platform=env.get(ENV_PLATFORM) or host_platform(),
            home_dir=home_dir,
            toolchain=env.get(ENV_TOOLCHAIN) or "go",
            verbose=verbose,
            environ=dict(env),
        )

    @property
    def workspace_root(self) -> Path:
        """Parent directory of all per-target workspaces."""
        return self.output_dir / ".work"

    @property
    def manifest_path(self) -> Path:
        """Path of the generated install Makefile."""
        return self.output_dir / "Makefile"

    def output_path(self, target_name: str) -> Path:
        """Path of the compiled binary for a target."""
        return self.output_dir / target_name

    def config_file(self, target_name: str) -> Path:
        """Path of a target's declaration file."""
        return self.config_dir / f"{target_name}.json"

    def descriptor_files(self) -> list[Path]:
        """Build descriptors whose modification forces every target to rebuild."""
        from .entrypoint import TEMPLATE_PATH

        return [self.project_dir / MODULE_DESCRIPTOR, TEMPLATE_PATH]

    def toolchain_env(self, base: Optional[Mapping[str, str]] = None) -> dict[str, str]:
        """Return the environment for toolchain invocations with GOOS set.

        Starts from the environment captured by from_environment() unless a
        base mapping is given.
        """
        env = dict(self.environ if base is None else base)
        env["GOOS"] = self.platform
        return env
