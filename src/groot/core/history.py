"""History traversal and per-commit diffs."""

import logging
from typing import Dict, Iterator, List, Optional

from groot.core.commit_chain import Commit, CommitChain, CorruptCommitError
from groot.diff import DiffEngine, DiffSegment
from groot.storage import ObjectStore, is_valid_hash

logger = logging.getLogger(__name__)

NEW_FILE = "new"
MODIFIED = "modified"


class FileDiff:
    """Diff of one file entry against the parent commit.

    Attributes:
        path: Workspace-relative path
        status: "new" if the parent has no entry at this path, else "modified"
        segments: Line diff segments (empty for new files)
    """

    def __init__(self, path: str, status: str, segments: Optional[List[DiffSegment]] = None):
        self.path = path
        self.status = status
        self.segments = segments or []

    def __repr__(self) -> str:
        return f"FileDiff({self.path!r}, {self.status}, {len(self.segments)} segment(s))"

    @property
    def is_new(self) -> bool:
        return self.status == NEW_FILE


class CommitDiff:
    """Per-file diffs of a commit against its parent.

    Attributes:
        commit: The commit being shown
        first_commit: True for the root commit, in which case files is empty
        files: One FileDiff per entry in commit.files, in order
    """

    def __init__(self, commit: Commit, first_commit: bool, files: Optional[List[FileDiff]] = None):
        self.commit = commit
        self.first_commit = first_commit
        self.files = files or []


class HistoryWalker:
    """Replays the commit chain from HEAD back to the root."""

    def __init__(
        self,
        commit_chain: CommitChain,
        object_store: ObjectStore,
        diff_engine: Optional[DiffEngine] = None,
    ):
        self.commit_chain = commit_chain
        self.object_store = object_store
        self.diff_engine = diff_engine or DiffEngine()

    def walk(self, start: Optional[str] = None) -> Iterator[Commit]:
        """Yield commits newest first, following parent links.

        Args:
            start: Commit hash to start from (default: HEAD)

        Raises:
            ObjectNotFoundError: If a referenced commit is missing
            CorruptCommitError: If a referenced object is not a commit, or the
                starting hash is not a well-formed digest
        """
        commit_hash = start if start is not None else self.commit_chain.current_head()
        if commit_hash and not is_valid_hash(commit_hash):
            source = "HEAD" if start is None else "Start"
            raise CorruptCommitError(f"{source} does not name a commit: {commit_hash!r}")
        while commit_hash:
            commit = self.commit_chain.get_commit(commit_hash)
            yield commit
            commit_hash = commit.parent

    def diff_against_parent(self, commit: Commit) -> CommitDiff:
        """Diff every file of ``commit`` against the same path in its parent.

        Files the parent doesn't have are reported as new without diffing.
        A root commit is reported as a first commit with no per-file diffs.
        """
        if commit.parent is None:
            return CommitDiff(commit, first_commit=True)

        parent = self.commit_chain.get_commit(commit.parent)
        # Later entries for a path win.
        parent_files: Dict[str, str] = {entry.path: entry.hash for entry in parent.files}

        file_diffs = []
        for entry in commit.files:
            parent_hash = parent_files.get(entry.path)
            if parent_hash is None:
                file_diffs.append(FileDiff(entry.path, NEW_FILE))
                continue

            old_text = self._read_text(parent_hash)
            new_text = self._read_text(entry.hash)
            segments = self.diff_engine.diff_lines(old_text, new_text)
            file_diffs.append(FileDiff(entry.path, MODIFIED, segments))

        logger.debug("Diffed %s against %s: %d file(s)", commit.hash, parent.hash, len(file_diffs))
        return CommitDiff(commit, first_commit=False, files=file_diffs)

    def _read_text(self, object_hash: str) -> str:
        return self.object_store.read(object_hash).decode("utf-8", errors="replace")
