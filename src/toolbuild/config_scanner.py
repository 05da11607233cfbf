"""Declaration scanner.

Reads one `<target>.json` declaration per potential target and decides which
targets are enabled for the active platform. A target is enabled when its
flag list contains the always marker ("all") or the platform identifier
itself (e.g. "linux"). The full flag list of every declared target, enabled
or not, goes into the FlagMapping embedded in every generated entrypoint.
"""

import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .errors import ConfigError, NoTargetsError

logger = logging.getLogger(__name__)

DECLARATION_SUFFIX = ".json"
FLAGS_KEY = "Flags"
ALWAYS_MARKER = "all"

# Target names double as file names and as the source of Go symbols. Every
# part starts with a letter so capitalizing parts keeps distinct names distinct.
_TARGET_NAME_RE = re.compile(r"^[a-z][a-z0-9]*(-[a-z][a-z0-9]*)*$")

FlagMapping = dict[str, tuple[str, ...]]


@dataclass(frozen=True)
class TargetDescriptor:
    """A single declared target.

    Attributes:
        name: Target name (file stem of the declaration)
        enabled: Whether the target is built for the active platform
        flags: Complete, unfiltered flag list from the declaration
        entry_path: Entry source file, filled in once the source set is known
    """

    name: str
    enabled: bool
    flags: tuple[str, ...]
    entry_path: Optional[Path] = None


@dataclass(frozen=True)
class ScanResult:
    """Outcome of scanning a declaration directory.

    Attributes:
        targets: Every declared target in discovery (name) order
        flag_mapping: Full flag list per declared target
    """

    targets: tuple[TargetDescriptor, ...]
    flag_mapping: FlagMapping

    @property
    def enabled(self) -> list[TargetDescriptor]:
        """Enabled targets in discovery order."""
        return [t for t in self.targets if t.enabled]


def is_valid_target_name(name: str) -> bool:
    """Check that a target name is safe as a file name and a symbol source."""
    return _TARGET_NAME_RE.match(name) is not None


def is_enabled(flags: tuple[str, ...], platform: str) -> bool:
    """Enablement predicate: the always marker or the platform identifier."""
    return ALWAYS_MARKER in flags or platform in flags


def parse_declaration(path: Path) -> tuple[str, ...]:
    """Parse one declaration file and return its flag list.

    Args:
        path: Path to a `<target>.json` declaration

    Returns:
        The flags in declaration order

    Raises:
        ConfigError: If the file is unreadable, not UTF-8, not a JSON object,
            or lacks a list-of-strings Flags field
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"unable to read declaration ({e.strerror})", path) from e
    except UnicodeDecodeError as e:
        raise ConfigError(f"invalid declaration encoding ({e.reason} at byte {e.start})", path) from e

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid declaration json ({e.msg} at line {e.lineno})", path) from e

    if not isinstance(data, dict):
        raise ConfigError("invalid declaration json, expected an object", path)
    if FLAGS_KEY not in data:
        raise ConfigError("invalid declaration json, no flags", path)

    flags = data[FLAGS_KEY]
    if not isinstance(flags, list):
        raise ConfigError("invalid declaration json, flags array is invalid", path)

    for flag in flags:
        if not isinstance(flag, str):
            raise ConfigError(f"flag {flag!r} is not a string", path)
        try:
            flag.encode("utf-8")
        except UnicodeEncodeError as e:
            raise ConfigError(f"flag {flag!r} is not valid unicode", path) from e

    return tuple(flags)


def scan_declarations(config_dir: Path, platform: str) -> ScanResult:
    """Scan a declaration directory.

    Args:
        config_dir: Directory holding `<target>.json` files
        platform: Active platform identifier

    Returns:
        ScanResult with all targets and the full flag mapping

    Raises:
        ConfigError: If the directory cannot be read or a declaration is invalid
        NoTargetsError: If no target is enabled for the platform
    """
    try:
        entries = sorted(config_dir.iterdir(), key=lambda p: p.name)
    except OSError as e:
        raise ConfigError(f"unable to read declaration directory ({e.strerror})", config_dir) from e

    targets: list[TargetDescriptor] = []
    flag_mapping: FlagMapping = {}

    for path in entries:
        if path.suffix != DECLARATION_SUFFIX or not path.is_file():
            continue

        name = path.name[: -len(DECLARATION_SUFFIX)]
        if not is_valid_target_name(name):
            raise ConfigError(f"invalid target name {name!r}", path)

        flags = parse_declaration(path)
        enabled = is_enabled(flags, platform)
        logger.debug(f"Declaration {name}: flags={list(flags)} enabled={enabled}")

        targets.append(TargetDescriptor(name=name, enabled=enabled, flags=flags))
        flag_mapping[name] = flags

    result = ScanResult(targets=tuple(targets), flag_mapping=flag_mapping)
    if not result.enabled:
        raise NoTargetsError(f"no configs found for build targets on platform '{platform}' in {config_dir}")

    return result
