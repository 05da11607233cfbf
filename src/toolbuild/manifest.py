"""Install manifest generation.

The manifest is a Makefile in the output directory with one install rule per
enabled target:

    DESTDIR := $(HOME)/.local/bin

    all:
    	install -m755 git-uncommitted $(DESTDIR)/git-uncommitted
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from .errors import ManifestWriteError

logger = logging.getLogger(__name__)

DESTDIR_VAR = "DESTDIR"


@dataclass(frozen=True)
class InstallRule:
    """Install one built binary.

    Attributes:
        binary_name: Target name, also the binary file name under $(DESTDIR)
    """

    binary_name: str

    def render(self) -> str:
        return f"\tinstall -m755 {self.binary_name} $({DESTDIR_VAR})/{self.binary_name}"


class InstallManifest:
    """Ordered install rules for one run.

    Args:
        destination_root: Install destination (a path or a make expression)
    """

    def __init__(self, destination_root: str):
        self.destination_root = destination_root
        self.rules: list[InstallRule] = []

    def add(self, binary_name: str) -> InstallRule:
        """Append the install rule for a binary."""
        rule = InstallRule(binary_name=binary_name)
        self.rules.append(rule)
        return rule

    @classmethod
    def for_targets(cls, destination_root: str, names: Iterable[str]) -> "InstallManifest":
        manifest = cls(destination_root)
        for name in names:
            manifest.add(name)
        return manifest

    def render(self) -> str:
        """Render the manifest as Makefile text."""
        lines = [f"{DESTDIR_VAR} := {self.destination_root}", "", "all:"]
        lines.extend(rule.render() for rule in self.rules)
        return "\n".join(lines) + "\n"

    def write(self, path: Path) -> Path:
        """Write the manifest.

        Raises:
            ManifestWriteError: If the file cannot be written
        """
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(self.render(), encoding="utf-8")
        except OSError as e:
            raise ManifestWriteError(f"unable to write install manifest {path}: {e.strerror or e}") from e

        logger.debug(f"Wrote {len(self.rules)} install rules to {path}")
        return path
