"""
Command-line interface for toolbuild.

This module provides the `toolbuild` CLI tool for building every enabled
target of a project.
"""

import argparse
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from toolbuild import __version__
from toolbuild.build_config import BuildConfig
from toolbuild.display import StatusDisplay
from toolbuild.errors import ToolbuildError
from toolbuild.orchestrator import BuildOrchestrator

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(funcName)s:%(lineno)d] - %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


@dataclass
class BuildArgs:
    """Arguments for the build command."""

    project_dir: Path
    verbose: bool = False


def setup_logging(verbose: bool) -> None:
    """Configure the root logger for CLI use."""
    root = logging.getLogger()
    root.setLevel(logging.DEBUG if verbose else logging.WARNING)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT))
    root.addHandler(handler)


def build_command(args: BuildArgs, display: Optional[StatusDisplay] = None) -> int:
    """Build every enabled target.

    Examples:
        toolbuild                      # Build from the current directory
        toolbuild build                # Same
        toolbuild -C ~/src/tooling     # Build another project
        OS=darwin toolbuild            # Build for another platform

    Returns:
        Process exit code
    """
    display = display if display is not None else StatusDisplay()

    try:
        config = BuildConfig.from_environment(args.project_dir, verbose=args.verbose)
        orchestrator = BuildOrchestrator(config, callback=display)
        orchestrator.build()
        return 0

    except ToolbuildError as e:
        display.failed(e)
        return 1

    except KeyboardInterrupt:
        display.failed(ToolbuildError("interrupted"))
        return 130


def parse_args(argv: Optional[Sequence[str]] = None) -> BuildArgs:
    """Parse command-line arguments.

    Zero or one positional argument is accepted; anything else is a usage
    error (argparse exits with status 2).
    """
    parser = argparse.ArgumentParser(
        prog="toolbuild",
        description="Incremental, parallel multi-target build orchestrator",
    )
    parser.add_argument(
        "command",
        nargs="?",
        default="build",
        choices=["build"],
        help="Command to run (default: build)",
    )
    parser.add_argument(
        "-C",
        "--project-dir",
        type=Path,
        default=Path.cwd(),
        help="Project directory containing go.mod and src/ (default: current directory)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parsed = parser.parse_args(argv)
    return BuildArgs(project_dir=parsed.project_dir, verbose=parsed.verbose)


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Main entry point for the CLI."""
    args = parse_args(argv)
    setup_logging(args.verbose)
    sys.exit(build_command(args))


if __name__ == "__main__":
    main()
