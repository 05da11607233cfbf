"""Source set partitioning.

A source directory holds two kinds of files:
- `<target>.app.go` entry files, one per target, holding the target's entry function
- every other regular file, compiled into every target
"""

import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Iterable

from .config_scanner import TargetDescriptor
from .entrypoint import ENTRYPOINT_FILENAME
from .errors import SourceError

logger = logging.getLogger(__name__)

ENTRY_SUFFIX = ".app.go"


@dataclass(frozen=True)
class SourceManifest:
    """Partitioned contents of a source directory.

    Attributes:
        shared_files: Files compiled into every target, sorted by name
        entries: Entry file per target name
    """

    shared_files: tuple[Path, ...]
    entries: dict[str, Path]


def scan_sources(source_dir: Path) -> SourceManifest:
    """Partition a source directory into shared files and entry files.

    Hidden files and subdirectories are ignored.

    Raises:
        SourceError: If the directory cannot be read
    """
    try:
        paths = sorted(source_dir.iterdir(), key=lambda p: p.name)
    except OSError as e:
        raise SourceError(f"unable to read source directory {source_dir}: {e.strerror}") from e

    shared: list[Path] = []
    entries: dict[str, Path] = {}
    for path in paths:
        if path.name.startswith(".") or not path.is_file():
            continue
        if path.name.endswith(ENTRY_SUFFIX):
            entries[path.name[: -len(ENTRY_SUFFIX)]] = path
        elif path.name == ENTRYPOINT_FILENAME:
            raise SourceError(f"{path} clashes with the generated entrypoint name")
        else:
            shared.append(path)

    logger.debug(f"Scanned {source_dir}: {len(shared)} shared files, {len(entries)} entries")
    return SourceManifest(shared_files=tuple(shared), entries=entries)


def resolve_entries(targets: Iterable[TargetDescriptor], manifest: SourceManifest) -> list[TargetDescriptor]:
    """Attach entry files to enabled targets.

    Args:
        targets: Declared targets (disabled ones are skipped)
        manifest: Scanned source directory

    Returns:
        Enabled targets with entry_path set, in the given order

    Raises:
        SourceError: If any enabled target has no entry file
    """
    resolved: list[TargetDescriptor] = []
    missing: list[str] = []
    for target in targets:
        if not target.enabled:
            continue
        entry = manifest.entries.get(target.name)
        if entry is None:
            missing.append(target.name)
            continue
        resolved.append(replace(target, entry_path=entry))

    if missing:
        names = ", ".join(f"{name}{ENTRY_SUFFIX}" for name in missing)
        raise SourceError(f"missing entry files for enabled targets: {names}")

    return resolved
