"""Modification-time staleness check.

Invalidation is coarse: a change to any shared file or build descriptor makes
every target stale, not just the ones that use it.
"""

import logging
import os
from pathlib import Path
from typing import Iterable

from .errors import StalenessError

logger = logging.getLogger(__name__)


def _mtime(path: Path) -> float:
    try:
        return os.stat(path).st_mtime
    except OSError as e:
        raise StalenessError(f"unable to stat {path}: {e.strerror}") from e


class StalenessChecker:
    """Decides whether a target binary must be rebuilt.

    Args:
        shared_inputs: Inputs common to every target (shared sources and build descriptors)
    """

    def __init__(self, shared_inputs: Iterable[Path]):
        self.shared_inputs = tuple(shared_inputs)

    def needs_rebuild(self, output: Path, entry: Path) -> bool:
        """Check whether output is missing or older than any of its inputs.

        Args:
            output: Existing or expected binary path
            entry: The target's entry file

        Returns:
            True if the target must be rebuilt

        Raises:
            StalenessError: If any input cannot be stat'ed while output exists
        """
        try:
            output_mtime = os.stat(output).st_mtime
        except FileNotFoundError:
            logger.debug(f"{output.name}: no existing binary")
            return True
        except OSError as e:
            raise StalenessError(f"unable to stat {output}: {e.strerror}") from e

        for path in (entry, *self.shared_inputs):
            if _mtime(path) > output_mtime:
                logger.debug(f"{output.name}: {path} is newer than binary")
                return True

        return False
