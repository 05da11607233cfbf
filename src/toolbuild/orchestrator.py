"""
Build orchestration for toolbuild projects.

Runs the phases of a build in order:

    [1/5] Scan declarations         (fail fast)
    [2/5] Partition sources          (fail fast, every enabled target needs an entry)
    [3/5] Check staleness            (fail fast)
    [4/5] Compile stale targets      (parallel, errors collected)
    [5/5] Write install manifest     (only if every target succeeded)
"""

import logging
import time
from typing import Optional

from .build_config import BuildConfig
from .callbacks import NullCallback, StatusCallback
from .config_scanner import ScanResult, scan_declarations
from .coordinator import BuildCoordinator
from .errors import AggregateBuildError, ManifestWriteError, SourceError
from .manifest import InstallManifest
from .models import BuildJob, BuildReport
from .source_set import SourceManifest, resolve_entries, scan_sources
from .staleness import StalenessChecker
from .toolchain import GoToolchain, Toolchain

logger = logging.getLogger(__name__)


class BuildOrchestrator:
    """
    Orchestrates a complete multi-target build.

    Args:
        config: Run configuration
        toolchain: Compiler; defaults to `go build` configured from config
        callback: Receives per-target results as they are collected
    """

    def __init__(
        self,
        config: BuildConfig,
        toolchain: Optional[Toolchain] = None,
        callback: Optional[StatusCallback] = None,
    ):
        self.config = config
        self.toolchain = toolchain if toolchain is not None else self._default_toolchain(config)
        self.callback = callback if callback is not None else NullCallback()

    @staticmethod
    def _default_toolchain(config: BuildConfig) -> GoToolchain:
        return GoToolchain(
            tool=config.toolchain,
            flags=config.toolchain_flags,
            cwd=config.project_dir,
            env=config.toolchain_env(),
        )

    def plan(self) -> tuple[ScanResult, SourceManifest, list[BuildJob]]:
        """Run the sequential phases and return the jobs to execute.

        Raises:
            ConfigError: If a declaration is invalid
            NoTargetsError: If nothing is enabled for the platform
            SourceError: If sources are unreadable or an entry file is missing
            StalenessError: If an input cannot be stat'ed
        """
        config = self.config

        logger.debug(f"[1/5] Scanning declarations in {config.config_dir} for {config.platform}")
        scan = scan_declarations(config.config_dir, config.platform)

        logger.debug(f"[2/5] Partitioning sources in {config.source_dir}")
        sources = scan_sources(config.source_dir)
        targets = resolve_entries(scan.targets, sources)

        logger.debug(f"[3/5] Checking staleness of {len(targets)} targets")
        checker = StalenessChecker([*sources.shared_files, *config.descriptor_files()])
        jobs = []
        for target in targets:
            if target.entry_path is None:
                raise SourceError(f"no entry file resolved for target {target.name}")
            output = config.output_path(target.name)
            jobs.append(
                BuildJob(
                    target=target,
                    outputs=frozenset({output}),
                    needs_build=checker.needs_rebuild(output, target.entry_path),
                )
            )

        return scan, sources, jobs

    def build(self) -> BuildReport:
        """Execute the full build.

        Returns:
            BuildReport with per-target results and the written manifest path

        Raises:
            AggregateBuildError: If any target failed to build
            ManifestWriteError: If the output directory or the install manifest
                cannot be written
            ToolbuildError: Any fail-fast error from the planning phases
        """
        start_time = time.time()
        config = self.config

        scan, sources, jobs = self.plan()
        try:
            config.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ManifestWriteError(f"unable to create output directory {config.output_dir}: {e.strerror or e}") from e

        stale = sum(1 for job in jobs if job.needs_build)
        logger.debug(f"[4/5] Compiling {stale} of {len(jobs)} targets")
        coordinator = BuildCoordinator(config, self.toolchain, scan.flag_mapping, sources.shared_files)
        results = coordinator.run(jobs, self.callback)

        report = BuildReport(results=results)
        if not report.success:
            raise AggregateBuildError(report.errors)

        self.callback.on_complete()

        logger.debug("[5/5] Writing install manifest")
        manifest = InstallManifest.for_targets(config.destination_root, (job.name for job in jobs))
        report.manifest_path = manifest.write(config.manifest_path)

        logger.debug(f"Build finished in {time.time() - start_time:.2f}s")
        return report
