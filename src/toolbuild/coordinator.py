"""Parallel build coordinator.

Dispatches one worker thread per stale target and collects the results in
dispatch order:

    jobs ──► synthesize main.go ──► materialize workspace ──► go build
             (one thread per stale job, no shared mutable state)

Each job owns a dedicated future. The coordinator reads the futures in the
order the jobs were created, so reporting is deterministic regardless of
completion order. A failed build never cancels its siblings.
"""

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Mapping, Optional, Sequence

from .build_config import BuildConfig
from .callbacks import NullCallback, StatusCallback
from .entrypoint import EntrypointParams, entry_symbol, render_entrypoint
from .errors import BuildError
from .models import BuildJob, BuildResult
from .toolchain import Toolchain
from .workspace import allocate_workspace_ids, materialize_workspace

logger = logging.getLogger(__name__)


class BuildCoordinator:
    """Runs build jobs in parallel and joins their results.

    Args:
        config: Run configuration
        toolchain: Compiler used for every job
        flag_mapping: Full flag mapping embedded in every entrypoint
        shared_files: Shared sources copied into every workspace
    """

    def __init__(
        self,
        config: BuildConfig,
        toolchain: Toolchain,
        flag_mapping: Mapping[str, tuple[str, ...]],
        shared_files: Sequence[Path],
    ) -> None:
        self.config = config
        self.toolchain = toolchain
        self.flag_mapping = dict(flag_mapping)
        self.shared_files = tuple(shared_files)

    def run(self, jobs: Sequence[BuildJob], callback: Optional[StatusCallback] = None) -> list[BuildResult]:
        """Build every stale job and return one result per job in input order.

        Args:
            jobs: Jobs in discovery order
            callback: Receives each result as it is collected

        Returns:
            Results in the same order as jobs
        """
        callback = callback if callback is not None else NullCallback()

        pending = [job for job in jobs if job.needs_build]
        workspace_ids = allocate_workspace_ids(entry_symbol(job.name) for job in pending)

        futures: dict[str, Future[BuildResult]] = {}
        results: list[BuildResult] = []

        # One worker per stale target; the target count is small
        executor = ThreadPoolExecutor(max_workers=max(len(pending), 1), thread_name_prefix="build")
        try:
            for job in pending:
                workspace = self.config.workspace_root / workspace_ids[entry_symbol(job.name)]
                futures[job.name] = executor.submit(self._build_job, job, workspace)
                logger.debug(f"Dispatched {job.name} -> {workspace}")

            for job in jobs:
                future = futures.get(job.name)
                result = future.result() if future is not None else BuildResult(name=job.name, built=False)
                results.append(result)
                callback.on_result(result)
        finally:
            executor.shutdown(wait=True)

        return results

    def _build_job(self, job: BuildJob, workspace: Path) -> BuildResult:
        """Worker body: never raises for expected build failures."""
        try:
            self._build_target(job, workspace)
        except BuildError as e:
            logger.debug(f"{job.name} failed: {e}")
            return BuildResult(name=job.name, built=False, error=e)
        except OSError as e:
            error = BuildError(job.name, f"workspace setup failed: {e}", phase="workspace")
            error.__cause__ = e
            logger.debug(f"{job.name} failed: {error}")
            return BuildResult(name=job.name, built=False, error=error)
        return BuildResult(name=job.name, built=True)

    def _build_target(self, job: BuildJob, workspace: Path) -> None:
        target = job.target
        if target.entry_path is None:
            raise BuildError(target.name, "no entry file resolved", phase="workspace")

        try:
            source = render_entrypoint(
                EntrypointParams(
                    target=target.name,
                    config_file=self.config.config_file(target.name),
                    platform=self.config.platform,
                    flag_mapping=self.flag_mapping,
                    home_dir=self.config.home_dir,
                    platform_gate=self.config.platform_gate,
                )
            )
        except ValueError as e:
            raise BuildError(target.name, f"unable to render entrypoint: {e}", phase="workspace") from e

        inputs = materialize_workspace(workspace, source, (*self.shared_files, target.entry_path))
        self.config.output_dir.mkdir(parents=True, exist_ok=True)
        self.toolchain.compile(target.name, self.config.output_path(target.name), inputs)
