"""Repository handle and initialization.

A Repository is the explicit handle every storage operation receives. It
only knows where things live on disk; it never caches their contents.
"""

import logging
from pathlib import Path
from typing import Optional

from groot.constants import GROOT_DIR, HEAD_FILE, INDEX_FILE, OBJECTS_DIR
from groot.storage.atomic import atomic_create

logger = logging.getLogger(__name__)


class RepositoryNotFoundError(Exception):
    """Raised when an operation needs a .groot/ directory that doesn't exist."""


class Repository:
    """Paths of a Groot repository rooted at a workspace directory.

    Layout:
        <workspace>/.groot/HEAD        # current head commit hash (or empty)
        <workspace>/.groot/index       # JSON list of staged entries
        <workspace>/.groot/objects/    # content-addressed objects

    Attributes:
        workspace_root: Directory whose files are tracked
        groot_dir: Path to .groot directory
        head_path: Path to HEAD file
        index_path: Path to index file
        objects_dir: Path to objects directory
    """

    def __init__(self, workspace_root: Path) -> None:
        self.workspace_root = Path(workspace_root).resolve()
        self.groot_dir = self.workspace_root / GROOT_DIR
        self.head_path = self.groot_dir / HEAD_FILE
        self.index_path = self.groot_dir / INDEX_FILE
        self.objects_dir = self.groot_dir / OBJECTS_DIR

    def __repr__(self) -> str:
        return f"Repository({str(self.workspace_root)!r})"

    @classmethod
    def discover(cls, start: Optional[Path] = None) -> "Repository":
        """Find the nearest enclosing repository.

        Walks from ``start`` (default: cwd) up to the filesystem root looking
        for a .groot/ directory.

        Raises:
            RepositoryNotFoundError: If no repository encloses ``start``
        """
        start = Path(start or Path.cwd()).resolve()
        for candidate in [start, *start.parents]:
            if (candidate / GROOT_DIR).is_dir():
                return cls(candidate)

        raise RepositoryNotFoundError(
            f"Not a Groot repository (or any parent up to /): {start}"
        )

    def is_initialized(self) -> bool:
        return self.groot_dir.is_dir()

    def require(self) -> None:
        """Raise RepositoryNotFoundError unless .groot/ exists."""
        if not self.is_initialized():
            raise RepositoryNotFoundError(
                f"Not a Groot repository (no {GROOT_DIR}/ found in {self.workspace_root})"
            )

    def initialize(self) -> bool:
        """Create the repository layout without touching existing state.

        HEAD is created empty and the index as an empty list, each only if
        missing. Both go through atomic_create, so a file is either absent or
        complete and an existing one is never overwritten.

        Returns:
            True if anything was created, False if the repository was
            already initialized.
        """
        self.objects_dir.mkdir(parents=True, exist_ok=True)

        created = False
        for path, initial in ((self.head_path, b""), (self.index_path, b"[]")):
            if atomic_create(path, initial, prefix=f".tmp_{path.name}_"):
                created = True
            else:
                logger.debug("%s already exists, leaving it untouched", path)

        if created:
            logger.info("Initialized repository in %s", self.groot_dir)
        else:
            logger.info("Repository already initialized in %s", self.groot_dir)
        return created
