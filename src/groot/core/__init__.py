"""Core engine layer for Groot.

This module provides the repository handle, the staging index, the commit
chain and history traversal.
"""

from groot.core.repository import Repository, RepositoryNotFoundError
from groot.core.staging import (
    SourceNotFoundError,
    StagingEntry,
    StagingError,
    StagingIndex,
)
from groot.core.commit_chain import (
    Commit,
    CommitChain,
    CommitChainError,
    CorruptCommitError,
    NothingToCommitError,
)
from groot.core.history import CommitDiff, FileDiff, HistoryWalker

__all__ = [
    "Repository",
    "RepositoryNotFoundError",
    "StagingIndex",
    "StagingEntry",
    "StagingError",
    "SourceNotFoundError",
    "Commit",
    "CommitChain",
    "CommitChainError",
    "CorruptCommitError",
    "NothingToCommitError",
    "HistoryWalker",
    "CommitDiff",
    "FileDiff",
]
