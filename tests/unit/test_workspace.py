"""Tests for content-addressed workspaces."""

import hashlib
from unittest.mock import patch

import pytest

from toolbuild.entrypoint import entry_symbol
from toolbuild.workspace import (
    WORKSPACE_ID_LENGTH,
    allocate_workspace_ids,
    materialize_workspace,
    workspace_id,
)


class TestWorkspaceId:
    def test_truncated_sha256(self):
        expected = hashlib.sha256(b"RemotesApp").hexdigest()[:7]
        assert workspace_id("RemotesApp") == expected
        assert len(workspace_id("RemotesApp")) == WORKSPACE_ID_LENGTH

    def test_deterministic(self):
        assert workspace_id("GitUncommittedApp") == workspace_id("GitUncommittedApp")

    def test_similar_prefixes_are_distinct(self):
        names = ["git", "git-state", "git-uncommitted", "git-current-state", "git-hooks", "git-a", "git-b", "git-c"]
        symbols = [entry_symbol(n) for n in names]
        ids = allocate_workspace_ids(symbols)
        assert len(set(ids.values())) == len(names)

    def test_stable_across_runs(self):
        symbols = [entry_symbol(f"tool-{i}") for i in range(50)]
        assert allocate_workspace_ids(symbols) == allocate_workspace_ids(symbols)

    def test_collision_widens_ids(self):
        digests = {"AApp": "abcdef0" + "1" * 57, "BApp": "abcdef0" + "2" * 57}
        with patch("toolbuild.workspace.workspace_digest", side_effect=lambda s: digests[s]):
            ids = allocate_workspace_ids(["AApp", "BApp"])
        assert ids == {"AApp": "abcdef01", "BApp": "abcdef02"}

    def test_duplicate_symbols_rejected(self):
        with pytest.raises(ValueError):
            allocate_workspace_ids(["AApp", "AApp"])


class TestMaterializeWorkspace:
    def test_creates_entrypoint_and_copies(self, tmp_path):
        src = tmp_path / "src"
        src.mkdir()
        shared = src / "args.go"
        shared.write_text("package main\n")
        entry = src / "remotes.app.go"
        entry.write_text("package main\n// remotes\n")

        workspace = tmp_path / "build" / ".work" / "abc1234"
        inputs = materialize_workspace(workspace, "package main\n// generated\n", [shared, entry])

        assert [p.name for p in inputs] == ["main.go", "args.go", "remotes.app.go"]
        assert all(p.parent == workspace for p in inputs)
        assert (workspace / "main.go").read_text() == "package main\n// generated\n"
        assert (workspace / "remotes.app.go").read_text() == entry.read_text()
        # Sources are copied, never moved
        assert entry.exists()

    def test_stale_workspace_is_replaced(self, tmp_path):
        workspace = tmp_path / "ws"
        workspace.mkdir()
        (workspace / "leftover.go").write_text("old")

        materialize_workspace(workspace, "package main\n", [])

        assert sorted(p.name for p in workspace.iterdir()) == ["main.go"]

    def test_missing_source_raises_oserror(self, tmp_path):
        with pytest.raises(OSError):
            materialize_workspace(tmp_path / "ws", "package main\n", [tmp_path / "missing.go"])
