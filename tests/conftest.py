"""Pytest configuration and fixtures for toolbuild tests.

Provides a throwaway project tree (go.mod, shared sources, entry files and a
declaration directory) and a recording fake toolchain, so no test ever runs a
real `go build`.
"""

import json
import os
import threading
import time
from pathlib import Path
from typing import Sequence

import pytest

from toolbuild.build_config import BuildConfig
from toolbuild.errors import BuildError

# Inputs are dated well in the past so freshly built binaries are always newer
PAST = time.time() - 3600


class FakeToolchain:
    """Toolchain double that records invocations and writes the output binary.

    Attributes:
        fail: Target names whose compilation fails
        delay: Per-target sleep, to shuffle completion order
        calls: (target, output, inputs) per invocation
    """

    def __init__(self) -> None:
        self.fail: set[str] = set()
        self.delay: dict[str, float] = {}
        self.calls: list[tuple[str, Path, list[Path]]] = []
        self.threads: set[str] = set()
        self._lock = threading.Lock()

    def compile(self, target: str, output: Path, inputs: Sequence[Path]) -> None:
        with self._lock:
            self.calls.append((target, output, list(inputs)))
            self.threads.add(threading.current_thread().name)
        if target in self.delay:
            time.sleep(self.delay[target])
        if target in self.fail:
            raise BuildError(target, "go build exited with status 1", stderr=f"./{target}.app.go:1: syntax error")
        output.write_bytes(b"\x7fELF" + target.encode())

    @property
    def compiled(self) -> list[str]:
        with self._lock:
            return sorted(call[0] for call in self.calls)

    def reset(self) -> None:
        with self._lock:
            self.calls.clear()
            self.threads.clear()


class ProjectTree:
    """A temporary toolbuild project.

    Layout:
        <root>/project/go.mod
        <root>/project/src/{args.go,util.go,<target>.app.go}
        <root>/home/.config/tooling/<target>.json
    """

    def __init__(self, root: Path) -> None:
        self.home = root / "home"
        self.project_dir = root / "project"
        self.source_dir = self.project_dir / "src"
        self.config_dir = self.home / ".config" / "tooling"
        self.output_dir = self.project_dir / "build"

        self.source_dir.mkdir(parents=True)
        self.config_dir.mkdir(parents=True)
        self.write(self.project_dir / "go.mod", "module tooling\n\ngo 1.22\n")
        self.write(
            self.source_dir / "args.go",
            "package main\n\ntype Args struct {\n\tName       string\n\tConfigFile string\n\tGOOS       string\n\tFlags      map[string][]string\n}\n",
        )
        self.write(self.source_dir / "util.go", "package main\n")

    @staticmethod
    def write(path: Path, content: str, mtime: float = PAST) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        os.utime(path, (mtime, mtime))
        return path

    def add_target(self, name: str, flags: list, entry: bool = True, **extra) -> None:
        """Declare a target and optionally create its entry file."""
        declaration = {"Flags": flags, **extra}
        self.write(self.config_dir / f"{name}.json", json.dumps(declaration))
        if entry:
            self.add_entry(name)

    def add_entry(self, name: str) -> Path:
        return self.write(self.source_dir / f"{name}.app.go", f"package main\n\n// entry for {name}\n")

    def touch(self, path: Path, offset: float = 3600) -> None:
        """Make a file newer than any binary built during the test."""
        stamp = time.time() + offset
        os.utime(path, (stamp, stamp))

    def config(self, platform: str = "linux", **overrides) -> BuildConfig:
        values = dict(
            project_dir=self.project_dir,
            source_dir=self.source_dir,
            config_dir=self.config_dir,
            output_dir=self.output_dir,
            destination_root="$(HOME)/.local/bin",
            platform=platform,
            home_dir=self.home,
        )
        values.update(overrides)
        return BuildConfig(**values)


@pytest.fixture
def project(tmp_path: Path) -> ProjectTree:
    """Empty project tree with shared sources but no targets."""
    return ProjectTree(tmp_path)


@pytest.fixture
def toolchain() -> FakeToolchain:
    """Recording toolchain that never runs a real compiler."""
    return FakeToolchain()
