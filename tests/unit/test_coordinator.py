"""Unit tests for the parallel BuildCoordinator.

Tests verify:
- Only stale jobs are dispatched, one worker thread each
- Results come back in dispatch order regardless of completion order
- A failed target never cancels its siblings
- Workspaces are distinct and hold the generated entrypoint
"""

import threading
from pathlib import Path

from toolbuild.callbacks import NullCallback, StatusCallback
from toolbuild.config_scanner import TargetDescriptor
from toolbuild.coordinator import BuildCoordinator
from toolbuild.entrypoint import parse_flag_mapping
from toolbuild.errors import BuildError
from toolbuild.models import BuildJob, BuildResult, TargetStatus

# ─── Helpers ──────────────────────────────────────────────────────────────────


class RecordingCallback:
    """Callback that records results in the order they are reported."""

    def __init__(self) -> None:
        self.results: list[BuildResult] = []
        self.completed = False
        self._lock = threading.Lock()

    def on_result(self, result: BuildResult) -> None:
        with self._lock:
            self.results.append(result)

    def on_complete(self) -> None:
        self.completed = True


def make_jobs(project, names: list[str], stale: set[str] | None = None) -> list[BuildJob]:
    jobs = []
    for name in names:
        entry = project.add_entry(name)
        target = TargetDescriptor(name=name, enabled=True, flags=("all",), entry_path=entry)
        output = project.output_dir / name
        jobs.append(BuildJob(target=target, outputs=frozenset({output}), needs_build=stale is None or name in stale))
    return jobs


def make_coordinator(project, toolchain, names: list[str]) -> BuildCoordinator:
    flag_mapping = {name: ("all",) for name in names}
    shared = [project.source_dir / "args.go", project.source_dir / "util.go"]
    return BuildCoordinator(project.config(), toolchain, flag_mapping, shared)


# ─── Tests ────────────────────────────────────────────────────────────────────


class TestCallbacks:
    def test_null_callback_implements_protocol(self):
        assert isinstance(NullCallback(), StatusCallback)

    def test_recording_callback_implements_protocol(self):
        assert isinstance(RecordingCallback(), StatusCallback)


class TestBuildCoordinator:
    def test_all_stale_jobs_built(self, project, toolchain):
        names = ["alpha", "beta", "gamma"]
        results = make_coordinator(project, toolchain, names).run(make_jobs(project, names))

        assert [r.name for r in results] == names
        assert all(r.status == TargetStatus.BUILT for r in results)
        assert toolchain.compiled == names
        for name in names:
            assert (project.output_dir / name).exists()

    def test_up_to_date_jobs_not_dispatched(self, project, toolchain):
        names = ["alpha", "beta"]
        results = make_coordinator(project, toolchain, names).run(make_jobs(project, names, stale={"beta"}))

        assert [r.status for r in results] == [TargetStatus.UP_TO_DATE, TargetStatus.BUILT]
        assert toolchain.compiled == ["beta"]

    def test_no_stale_jobs(self, project, toolchain):
        names = ["alpha"]
        results = make_coordinator(project, toolchain, names).run(make_jobs(project, names, stale=set()))
        assert [r.status for r in results] == [TargetStatus.UP_TO_DATE]
        assert toolchain.calls == []

    def test_results_in_dispatch_order_not_completion_order(self, project, toolchain):
        names = ["slow", "medium", "fast"]
        toolchain.delay = {"slow": 0.3, "medium": 0.15}
        callback = RecordingCallback()

        results = make_coordinator(project, toolchain, names).run(make_jobs(project, names), callback)

        assert [r.name for r in results] == names
        assert [r.name for r in callback.results] == names

    def test_jobs_run_in_parallel_threads(self, project, toolchain):
        names = ["alpha", "beta", "gamma", "delta"]
        toolchain.delay = {name: 0.1 for name in names}

        make_coordinator(project, toolchain, names).run(make_jobs(project, names))

        assert len(toolchain.threads) == len(names)
        assert all(t.startswith("build") for t in toolchain.threads)

    def test_failure_does_not_cancel_siblings(self, project, toolchain):
        names = ["broken", "healthy"]
        toolchain.fail = {"broken"}
        toolchain.delay = {"healthy": 0.1}

        results = make_coordinator(project, toolchain, names).run(make_jobs(project, names))

        assert [r.status for r in results] == [TargetStatus.FAILED, TargetStatus.BUILT]
        assert isinstance(results[0].error, BuildError)
        assert results[0].error.target == "broken"
        assert "syntax error" in results[0].error.format()
        assert (project.output_dir / "healthy").exists()

    def test_workspace_error_is_collected(self, project, toolchain):
        names = ["alpha", "beta"]
        jobs = make_jobs(project, names)
        (project.source_dir / "alpha.app.go").unlink()

        results = make_coordinator(project, toolchain, names).run(jobs)

        assert results[0].status == TargetStatus.FAILED
        assert results[0].error.phase == "workspace"
        assert results[1].status == TargetStatus.BUILT
        assert toolchain.compiled == ["beta"]

    def test_distinct_workspaces_with_generated_entrypoint(self, project, toolchain):
        names = ["git", "git-state", "git-uncommitted", "git-current-state"]
        make_coordinator(project, toolchain, names).run(make_jobs(project, names))

        workspaces = {target: inputs[0].parent for target, _, inputs in toolchain.calls}
        assert len(set(workspaces.values())) == len(names)
        for target, workspace in workspaces.items():
            assert workspace.parent == project.output_dir / ".work"
            main = (workspace / "main.go").read_text()
            assert parse_flag_mapping(main) == {name: ("all",) for name in names}
            assert f"args.Name = \"{target}\"" in main

    def test_workspace_contents(self, project, toolchain):
        make_coordinator(project, toolchain, ["alpha"]).run(make_jobs(project, ["alpha"]))

        target, output, inputs = toolchain.calls[0]
        assert output == project.output_dir / "alpha"
        assert sorted(p.name for p in inputs) == ["alpha.app.go", "args.go", "main.go", "util.go"]
        assert inputs[0].name == "main.go"
        assert all(isinstance(p, Path) and p.exists() for p in inputs)
