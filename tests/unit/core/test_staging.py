"""Unit tests for StagingIndex."""

import hashlib
import json
import sys
from pathlib import Path

import pytest

from groot.core.repository import Repository
from groot.core.staging import (
    SourceNotFoundError,
    StagingEntry,
    StagingError,
    StagingIndex,
)
from groot.storage import ObjectStore


class TestStagingIndexInit:
    """Test StagingIndex initialization."""

    def test_init_valid_repository(self, repository: Repository, object_store: ObjectStore) -> None:
        staging = StagingIndex(repository, object_store)
        assert staging.index_path == repository.workspace_root / ".groot" / "index"

    def test_init_uninitialized(self, tmp_path: Path, object_store: ObjectStore) -> None:
        """Test initialization fails without .groot directory."""
        with pytest.raises(StagingError, match="Not a Groot repository"):
            StagingIndex(Repository(tmp_path), object_store)


class TestStage:
    """Test staging files."""

    def test_stage_returns_content_hash(self, staging: StagingIndex, workspace: Path) -> None:
        (workspace / "a.txt").write_text("x")

        object_hash = staging.stage(workspace / "a.txt")

        assert object_hash == hashlib.sha256(b"x").hexdigest()
        assert staging.object_store.read(object_hash) == b"x"

    def test_stage_appends_in_order(self, staging: StagingIndex, workspace: Path) -> None:
        (workspace / "a.txt").write_text("x")
        (workspace / "b.txt").write_text("y")

        staging.stage(workspace / "a.txt")
        staging.stage(workspace / "b.txt")

        assert [e.path for e in staging.current_entries()] == ["a.txt", "b.txt"]

    def test_stage_relative_path(self, staging: StagingIndex, workspace: Path) -> None:
        """Test that relative paths resolve against the workspace root."""
        (workspace / "sub").mkdir()
        (workspace / "sub" / "c.txt").write_text("z")

        staging.stage("sub/c.txt")

        assert staging.current_entries() == [
            StagingEntry("sub/c.txt", hashlib.sha256(b"z").hexdigest())
        ]

    def test_stage_duplicate_path_keeps_both(self, staging: StagingIndex, workspace: Path) -> None:
        """Test that re-staging a path appends rather than replaces."""
        target = workspace / "a.txt"
        target.write_text("first")
        staging.stage(target)
        target.write_text("second")
        staging.stage(target)

        entries = staging.current_entries()
        assert [e.path for e in entries] == ["a.txt", "a.txt"]
        assert entries[0].hash != entries[1].hash

    def test_stage_missing_file(self, staging: StagingIndex, workspace: Path) -> None:
        with pytest.raises(SourceNotFoundError):
            staging.stage(workspace / "missing.txt")
        assert staging.is_empty()

    def test_stage_directory(self, staging: StagingIndex, workspace: Path) -> None:
        (workspace / "dir").mkdir()
        with pytest.raises(SourceNotFoundError):
            staging.stage(workspace / "dir")

    def test_stage_path_through_a_file(self, staging: StagingIndex, workspace: Path) -> None:
        """Test that a path using a file as a directory is reported as unreadable."""
        (workspace / "a.txt").write_text("x")
        with pytest.raises(SourceNotFoundError):
            staging.stage(workspace / "a.txt" / "b")
        assert staging.is_empty()

    @pytest.mark.skipif(sys.platform == "win32", reason="needs POSIX symlinks")
    def test_stage_symlink_loop(self, staging: StagingIndex, workspace: Path) -> None:
        (workspace / "loop").symlink_to(workspace / "loop")
        with pytest.raises(SourceNotFoundError):
            staging.stage(workspace / "loop")

    def test_stage_outside_workspace(self, staging: StagingIndex, tmp_path: Path) -> None:
        outside = tmp_path / "outside.txt"
        outside.write_text("nope")
        with pytest.raises(StagingError, match="outside workspace"):
            staging.stage(outside)

    def test_stage_inside_groot_dir(self, staging: StagingIndex, repository: Repository) -> None:
        with pytest.raises(StagingError, match=".groot"):
            staging.stage(repository.head_path)


class TestPersistence:
    """Test the on-disk index format."""

    def test_index_is_canonical_json(self, staging: StagingIndex, workspace: Path) -> None:
        (workspace / "a.txt").write_text("x")
        object_hash = staging.stage(workspace / "a.txt")

        raw = staging.index_path.read_text(encoding="utf-8")
        assert raw == f'[{{"hash":"{object_hash}","path":"a.txt"}}]'

    def test_index_survives_new_instance(
        self, staging: StagingIndex, repository: Repository, object_store: ObjectStore, workspace: Path
    ) -> None:
        """Test that a fresh StagingIndex sees previously staged entries."""
        (workspace / "a.txt").write_text("x")
        staging.stage(workspace / "a.txt")

        reopened = StagingIndex(repository, object_store)
        assert len(reopened.current_entries()) == 1

    def test_external_edit_is_seen(self, staging: StagingIndex) -> None:
        """Test that the index is re-read on every call."""
        staging.index_path.write_text(json.dumps([{"path": "p", "hash": "h"}]), encoding="utf-8")
        assert staging.current_entries() == [StagingEntry("p", "h")]

    def test_clear(self, staging: StagingIndex, workspace: Path) -> None:
        (workspace / "a.txt").write_text("x")
        staging.stage(workspace / "a.txt")

        staging.clear()

        assert staging.is_empty()
        assert staging.index_path.read_text(encoding="utf-8") == "[]"

    def test_corrupted_index(self, staging: StagingIndex) -> None:
        staging.index_path.write_text("{not json", encoding="utf-8")
        with pytest.raises(StagingError, match="Corrupted index"):
            staging.current_entries()

    def test_index_with_bad_entry(self, staging: StagingIndex) -> None:
        staging.index_path.write_text('[{"path": 1}]', encoding="utf-8")
        with pytest.raises(StagingError, match="Corrupted index"):
            staging.current_entries()

    def test_missing_index_is_empty(self, staging: StagingIndex) -> None:
        staging.index_path.unlink()
        assert staging.current_entries() == []
