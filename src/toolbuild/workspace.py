"""Content-addressed build workspaces.

Each target compiles in `<output-dir>/.work/<id>`, where <id> is a truncated
SHA-256 of the target's entry symbol. Ids only need to be unique within one
run; allocate_workspace_ids() lengthens them if two targets ever collide.
"""

import hashlib
import logging
import shutil
from pathlib import Path
from typing import Iterable

from .entrypoint import ENTRYPOINT_FILENAME

logger = logging.getLogger(__name__)

WORKSPACE_ID_LENGTH = 7


def workspace_digest(symbol: str) -> str:
    """Return the full hex SHA-256 digest of a generated symbol name."""
    return hashlib.sha256(symbol.encode("utf-8")).hexdigest()


def workspace_id(symbol: str, length: int = WORKSPACE_ID_LENGTH) -> str:
    """Return the short workspace id for a generated symbol name."""
    return workspace_digest(symbol)[:length]


def allocate_workspace_ids(symbols: Iterable[str]) -> dict[str, str]:
    """Allocate distinct workspace ids for a set of symbols.

    Starts at WORKSPACE_ID_LENGTH hex characters and grows the length for all
    symbols until no two ids collide.

    Raises:
        ValueError: If the same symbol is given twice
    """
    symbols = list(symbols)
    if len(set(symbols)) != len(symbols):
        raise ValueError("duplicate symbols cannot have distinct workspaces")

    digests = {s: workspace_digest(s) for s in symbols}
    length = WORKSPACE_ID_LENGTH
    while True:
        ids = {s: d[:length] for s, d in digests.items()}
        if len(set(ids.values())) == len(ids):
            return ids
        logger.debug(f"Workspace id collision at length {length}, widening")
        length += 1


def materialize_workspace(workspace: Path, entrypoint_source: str, sources: Iterable[Path]) -> list[Path]:
    """Create a fresh workspace holding the generated entrypoint and copied sources.

    Args:
        workspace: Workspace directory (removed first if it exists)
        entrypoint_source: Generated `main.go` contents
        sources: Files to copy in (shared files and the target's entry file)

    Returns:
        Workspace files in compile order, entrypoint first

    Raises:
        OSError: If the workspace cannot be created or a file cannot be copied
    """
    if workspace.exists():
        shutil.rmtree(workspace)
    workspace.mkdir(parents=True)

    main_file = workspace / ENTRYPOINT_FILENAME
    main_file.write_text(entrypoint_source, encoding="utf-8")

    inputs = [main_file]
    for source in sources:
        dest = workspace / source.name
        shutil.copy2(source, dest)
        inputs.append(dest)

    logger.debug(f"Materialized workspace {workspace} with {len(inputs)} files")
    return inputs
