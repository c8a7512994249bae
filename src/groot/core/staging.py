"""Staging index management for Groot.

The staging index tracks which file snapshots go into the next commit.
It is an ordered JSON list of {"path", "hash"} entries that is re-read from
disk on every operation and written back after every mutation.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Union

from groot.core.repository import Repository
from groot.storage.atomic import atomic_write
from groot.storage.object_store import ObjectStore

logger = logging.getLogger(__name__)


class StagingError(Exception):
    """Exception raised during staging operations."""


class SourceNotFoundError(StagingError):
    """Raised when a path to stage cannot be read from the file system."""


class StagingEntry:
    """A single staged file: workspace-relative path and object hash."""

    def __init__(self, path: str, hash: str):  # noqa: A002
        self.path = path
        self.hash = hash

    def __repr__(self) -> str:
        return f"StagingEntry({self.path!r}, {self.hash[:8]})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StagingEntry):
            return NotImplemented
        return self.path == other.path and self.hash == other.hash

    def __hash__(self) -> int:
        return hash((self.path, self.hash))

    def to_dict(self) -> Dict[str, str]:
        """Convert to dictionary representation."""
        return {"path": self.path, "hash": self.hash}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StagingEntry":
        """Build an entry from its dictionary form.

        Raises:
            ValueError: If keys are missing or not strings
        """
        if not isinstance(data, dict):
            raise ValueError(f"Entry must be an object, got {type(data).__name__}")
        path = data.get("path")
        object_hash = data.get("hash")
        if not isinstance(path, str) or not isinstance(object_hash, str):
            raise ValueError(f"Entry needs string 'path' and 'hash': {data!r}")
        return cls(path, object_hash)


def serialize_entries(entries: List[StagingEntry]) -> bytes:
    """Canonical serialization of an entry list (sorted keys, no whitespace)."""
    return json.dumps(
        [entry.to_dict() for entry in entries],
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    ).encode("utf-8")


class StagingIndex:
    """Manager for the staging index.

    Entries are appended in staging order. Staging the same path twice
    keeps both entries; the index does not deduplicate.

    Attributes:
        repository: Repository handle
        index_path: Path to the index file (.groot/index)
        object_store: ObjectStore instance for blob storage
    """

    def __init__(self, repository: Repository, object_store: ObjectStore):
        """Initialize StagingIndex.

        Args:
            repository: Repository handle
            object_store: ObjectStore for blob management

        Raises:
            StagingError: If the repository has no .groot/ directory
        """
        self.repository = repository
        self.index_path = repository.index_path
        self.object_store = object_store

        if not repository.is_initialized():
            raise StagingError(
                f"Not a Groot repository (no .groot/ found in {repository.workspace_root})"
            )

    def stage(self, path: Union[str, Path]) -> str:
        """Snapshot a file into the object store and append it to the index.

        Args:
            path: File path, absolute or relative to the workspace root

        Returns:
            Hash of the stored content

        Raises:
            SourceNotFoundError: If the path cannot be read
            StagingError: If the path is outside the workspace or the index
                is unreadable
        """
        abs_path = self._resolve_path(Path(path))
        rel_path_str = abs_path.relative_to(self.repository.workspace_root).as_posix()

        try:
            content = abs_path.read_bytes()
        except OSError as e:
            raise SourceNotFoundError(f"Cannot read {path}: {e.strerror or e}") from e

        object_hash = self.object_store.write(content)

        entries = self.current_entries()
        entries.append(StagingEntry(rel_path_str, object_hash))
        self._save(entries)
        logger.debug("Staged %s as %s", rel_path_str, object_hash)

        return object_hash

    def current_entries(self) -> List[StagingEntry]:
        """Return the staged entries, freshly read from disk."""
        if not self.index_path.exists():
            return []

        try:
            raw = self.index_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise StagingError(f"Cannot read index file: {e}") from e

        if not raw.strip():
            return []

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StagingError(f"Corrupted index file: {e}") from e

        if not isinstance(data, list):
            raise StagingError("Corrupted index file: expected a list of entries")

        try:
            return [StagingEntry.from_dict(item) for item in data]
        except ValueError as e:
            raise StagingError(f"Corrupted index file: {e}") from e

    def clear(self) -> None:
        """Reset the index to an empty list."""
        self._save([])
        logger.debug("Cleared staging index")

    def is_empty(self) -> bool:
        return len(self.current_entries()) == 0

    def _save(self, entries: List[StagingEntry]) -> None:
        atomic_write(self.index_path, serialize_entries(entries), prefix=".tmp_index_")

    def _resolve_path(self, path: Path) -> Path:
        """Resolve path to absolute path within workspace."""
        workspace_root = self.repository.workspace_root
        if not path.is_absolute():
            path = workspace_root / path
        try:
            abs_path = path.resolve()
        except (OSError, RuntimeError) as e:
            # Symlink loops raise RuntimeError here on Python < 3.13.
            raise SourceNotFoundError(f"Cannot read {path}: {e}") from e

        try:
            abs_path.relative_to(workspace_root)
        except ValueError:
            raise StagingError(
                f"Path {path} is outside workspace root {workspace_root}"
            )

        try:
            abs_path.relative_to(self.repository.groot_dir)
        except ValueError:
            return abs_path
        raise StagingError(f"Cannot stage files inside .groot/: {path}")
