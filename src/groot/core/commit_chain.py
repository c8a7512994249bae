"""Commit objects and the HEAD pointer.

Commits are serialized to canonical JSON and stored in the object store
like any other object, so a commit's identity is the digest of its
serialization. Each commit names at most one parent, which makes history
a singly-linked list ending at the root commit.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from groot.core.repository import Repository
from groot.core.staging import StagingEntry, StagingIndex
from groot.storage.atomic import atomic_write
from groot.storage.object_store import ObjectStore, is_valid_hash

logger = logging.getLogger(__name__)

COMMIT_FIELDS = ("files", "message", "parent", "timestamp")


class CommitChainError(Exception):
    """Exception raised by commit chain operations."""


class CorruptCommitError(CommitChainError):
    """Raised when an object is not a well-formed commit record."""


class NothingToCommitError(CommitChainError):
    """Raised when committing with an empty staging index."""


class Commit:
    """An immutable snapshot record.

    Attributes:
        timestamp: ISO-8601 creation time
        message: Commit message
        files: Staged entries captured by this commit, in staging order
        parent: Hash of the parent commit, or None for the root commit
        hash: Object hash of this commit (None until stored or parsed)
    """

    def __init__(
        self,
        timestamp: str,
        message: str,
        files: List[StagingEntry],
        parent: Optional[str] = None,
        hash: Optional[str] = None,  # noqa: A002
    ):
        self.timestamp = timestamp
        self.message = message
        self.files = list(files)
        self.parent = parent
        self.hash = hash

    def __repr__(self) -> str:
        short = self.hash[:7] if self.hash else "unsaved"
        return f"Commit({short}, {self.message!r}, {len(self.files)} file(s))"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Commit):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation (without the hash)."""
        return {
            "timestamp": self.timestamp,
            "message": self.message,
            "files": [entry.to_dict() for entry in self.files],
            "parent": self.parent,
        }

    def serialize(self) -> bytes:
        """Canonical JSON bytes: sorted keys, no whitespace, UTF-8.

        The same logical commit always serializes to the same bytes, so its
        hash is reproducible.
        """
        return json.dumps(
            self.to_dict(),
            sort_keys=True,
            separators=(",", ":"),
            ensure_ascii=False,
        ).encode("utf-8")

    @classmethod
    def parse(cls, data: bytes, object_hash: Optional[str] = None) -> "Commit":
        """Parse serialized commit bytes.

        Args:
            data: Raw object content
            object_hash: Hash the content was read under

        Raises:
            CorruptCommitError: If data is not a well-formed commit record
        """
        label = object_hash or "<unsaved>"
        try:
            obj = json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise CorruptCommitError(f"Object {label} is not a commit: {e}") from e

        if not isinstance(obj, dict) or set(obj) != set(COMMIT_FIELDS):
            raise CorruptCommitError(f"Object {label} is not a commit record")

        timestamp = obj["timestamp"]
        message = obj["message"]
        parent = obj["parent"]
        files = obj["files"]

        if not isinstance(timestamp, str) or not isinstance(message, str):
            raise CorruptCommitError(f"Commit {label} has invalid timestamp or message")
        if parent is not None and not is_valid_hash(parent):
            raise CorruptCommitError(f"Commit {label} has invalid parent")
        if not isinstance(files, list):
            raise CorruptCommitError(f"Commit {label} has invalid file list")

        try:
            entries = [StagingEntry.from_dict(item) for item in files]
        except ValueError as e:
            raise CorruptCommitError(f"Commit {label} has invalid file entry: {e}") from e

        for entry in entries:
            if not is_valid_hash(entry.hash):
                raise CorruptCommitError(
                    f"Commit {label} has invalid hash for {entry.path}: {entry.hash!r}"
                )

        return cls(timestamp, message, entries, parent, hash=object_hash)


class CommitChain:
    """Creates commits and tracks the HEAD pointer.

    HEAD is re-read from disk on every call; the chain only ever moves it
    forward to the newest commit.

    Attributes:
        repository: Repository handle
        object_store: ObjectStore holding commit objects
        staging: StagingIndex consumed by commit()
    """

    def __init__(
        self,
        repository: Repository,
        object_store: ObjectStore,
        staging: StagingIndex,
    ):
        self.repository = repository
        self.head_path = repository.head_path
        self.object_store = object_store
        self.staging = staging

    def commit(self, message: str, allow_empty: bool = False) -> str:
        """Snapshot the staging index into a new commit.

        The commit object is written first, then HEAD is advanced, then the
        index is cleared. Each step is an atomic file write; a crash between
        steps leaves at worst a stale HEAD or a stale index.

        Args:
            message: Commit message
            allow_empty: Create a commit even if nothing is staged

        Returns:
            Hash of the new commit

        Raises:
            NothingToCommitError: If nothing is staged and allow_empty is False
            CorruptCommitError: If HEAD holds something other than a commit hash
        """
        entries = self.staging.current_entries()
        if not entries and not allow_empty:
            raise NothingToCommitError("Nothing to commit (staging index is empty)")

        parent = self.current_head()
        if parent is not None and not is_valid_hash(parent):
            raise CorruptCommitError(f"HEAD does not name a commit: {parent!r}")

        commit = Commit(
            timestamp=datetime.now(timezone.utc).isoformat(),
            message=message,
            files=entries,
            parent=parent,
        )

        commit_hash = self.object_store.write(commit.serialize())
        commit.hash = commit_hash

        self._set_head(commit_hash)
        self.staging.clear()

        logger.info(
            "Committed %s (%d file(s), parent %s)",
            commit_hash,
            len(entries),
            commit.parent or "none",
        )
        return commit_hash

    def current_head(self) -> Optional[str]:
        """Return the head commit hash, or None if there is no history yet."""
        try:
            value = self.head_path.read_text(encoding="utf-8").strip()
        except (OSError, UnicodeDecodeError) as e:
            logger.debug("HEAD unreadable (%s), treating as empty", e)
            return None

        return value or None

    def get_commit(self, commit_hash: str) -> Commit:
        """Load and parse a commit object.

        Raises:
            ObjectNotFoundError: If no object exists for commit_hash
            CorruptCommitError: If the object is not a commit record
        """
        data = self.object_store.read(commit_hash)
        return Commit.parse(data, commit_hash)

    def _set_head(self, commit_hash: str) -> None:
        atomic_write(self.head_path, commit_hash.encode("utf-8"), prefix=".tmp_head_")
        logger.debug("HEAD -> %s", commit_hash)
