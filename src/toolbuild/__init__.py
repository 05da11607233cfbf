"""toolbuild - incremental, parallel multi-target build orchestrator.

Public API:
    BuildConfig: Immutable run configuration resolved from the environment
    BuildOrchestrator: Runs scan -> staleness -> parallel compile -> manifest
    BuildReport: Per-target results of a run
"""

__version__ = "0.1.0"

from .build_config import BuildConfig
from .errors import (
    AggregateBuildError,
    BuildError,
    ConfigError,
    ManifestWriteError,
    NoTargetsError,
    SourceError,
    StalenessError,
    ToolbuildError,
)
from .models import BuildReport, BuildResult, TargetStatus
from .orchestrator import BuildOrchestrator

__all__ = [
    "AggregateBuildError",
    "BuildConfig",
    "BuildError",
    "BuildOrchestrator",
    "BuildReport",
    "BuildResult",
    "ConfigError",
    "ManifestWriteError",
    "NoTargetsError",
    "SourceError",
    "StalenessError",
    "TargetStatus",
    "ToolbuildError",
]
