"""Pytest configuration and shared fixtures."""

from pathlib import Path

import pytest

from groot.core import CommitChain, HistoryWalker, Repository, StagingIndex
from groot.diff import DiffEngine
from groot.storage import ObjectStore


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Create an empty workspace directory."""
    root = tmp_path / "workspace"
    root.mkdir()
    return root


@pytest.fixture
def repository(workspace: Path) -> Repository:
    """Create an initialized repository."""
    repo = Repository(workspace)
    repo.initialize()
    return repo


@pytest.fixture
def object_store(repository: Repository) -> ObjectStore:
    """Create ObjectStore instance."""
    return ObjectStore(repository.groot_dir)


@pytest.fixture
def staging(repository: Repository, object_store: ObjectStore) -> StagingIndex:
    """Create StagingIndex instance."""
    return StagingIndex(repository, object_store)


@pytest.fixture
def chain(
    repository: Repository, object_store: ObjectStore, staging: StagingIndex
) -> CommitChain:
    """Create CommitChain instance."""
    return CommitChain(repository, object_store, staging)


@pytest.fixture
def walker(chain: CommitChain, object_store: ObjectStore) -> HistoryWalker:
    """Create HistoryWalker instance."""
    return HistoryWalker(chain, object_store, DiffEngine())


@pytest.fixture
def in_workspace(workspace: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run the test with the workspace as current directory."""
    monkeypatch.chdir(workspace)
    monkeypatch.delenv("GROOT_REPO", raising=False)
    return workspace
