"""Content-addressable object storage for Groot.

Objects are stored flat in .groot/objects/<hash>, where the hash is the
SHA-256 digest of the raw bytes. File blobs and serialized commits share
the same namespace; no type tag is stored alongside the content.
"""

import hashlib
import logging
from pathlib import Path

from groot.constants import (
    HASH_ALGORITHM,
    HASH_LENGTH,
    MIN_PREFIX_LENGTH,
    OBJECTS_DIR,
)
from groot.storage.atomic import atomic_write

logger = logging.getLogger(__name__)

HEX_DIGITS = "0123456789abcdef"


class ObjectNotFoundError(Exception):
    """Raised when no object exists for a requested hash."""

    pass


class ObjectCorruptedError(Exception):
    """Raised when an object's hash doesn't match its content."""

    pass


class AmbiguousHashError(Exception):
    """Raised when an abbreviated hash matches more than one object."""

    pass


def is_valid_hash(value: object) -> bool:
    """Return True if value is a full-length lowercase hex digest."""
    return (
        isinstance(value, str)
        and len(value) == HASH_LENGTH
        and all(c in HEX_DIGITS for c in value)
    )


class ObjectStore:
    """Append-only, content-addressable storage.

    Writing the same content twice is a no-op that returns the same hash.
    Nothing is cached in memory: every call goes to disk.

    Storage layout:
        .groot/objects/<hash>

    Attributes:
        groot_dir: Path to the .groot directory
        objects_dir: Path to the objects directory

    Example:
        >>> store = ObjectStore(Path(".groot"))
        >>> object_hash = store.write(b"hello\\n")
        >>> assert store.read(object_hash) == b"hello\\n"
    """

    def __init__(self, groot_dir: Path) -> None:
        """Initialize the object store.

        Args:
            groot_dir: Path to .groot directory

        Raises:
            ValueError: If groot_dir doesn't exist
        """
        self.groot_dir = Path(groot_dir)
        self.objects_dir = self.groot_dir / OBJECTS_DIR

        if not self.groot_dir.exists():
            raise ValueError(f"Groot directory not found: {groot_dir}")

    def write(self, content: bytes) -> str:
        """Write content to the store and return its hash.

        If an object with the same hash already exists, returns the hash
        without writing (deduplication).

        Args:
            content: Binary content to store

        Returns:
            SHA-256 hash of the content (64 hex characters)

        Raises:
            OSError: If write fails (permissions, disk full, etc.)
        """
        object_hash = self.hash_content(content)
        object_path = self._get_object_path(object_hash)

        if object_path.exists():
            logger.debug("Object %s already stored", object_hash)
            return object_hash

        self.objects_dir.mkdir(parents=True, exist_ok=True)
        atomic_write(object_path, content, prefix=".tmp_object_")
        logger.debug("Stored object %s (%d bytes)", object_hash, len(content))

        return object_hash

    def read(self, object_hash: str, verify_hash: bool = False) -> bytes:
        """Read an object from the store.

        Args:
            object_hash: SHA-256 hash of the object (64 hex characters)
            verify_hash: Whether to recompute and verify the hash

        Returns:
            Binary content of the object

        Raises:
            ObjectNotFoundError: If the object doesn't exist
            ObjectCorruptedError: If hash verification fails
            ValueError: If object_hash is invalid format
        """
        self._validate_hash(object_hash)
        object_path = self._get_object_path(object_hash)

        try:
            content = object_path.read_bytes()
        except FileNotFoundError as e:
            raise ObjectNotFoundError(f"Object not found: {object_hash}") from e

        if verify_hash:
            actual_hash = self.hash_content(content)
            if actual_hash != object_hash:
                raise ObjectCorruptedError(
                    f"Object corrupted: expected {object_hash}, got {actual_hash}"
                )

        return content

    def exists(self, object_hash: str) -> bool:
        """Check if an object exists in the store."""
        try:
            self._validate_hash(object_hash)
        except ValueError:
            return False

        return self._get_object_path(object_hash).is_file()

    def resolve_prefix(self, prefix: str) -> str:
        """Expand an abbreviated hash to the full hash of a stored object.

        Args:
            prefix: Leading hex characters of a hash (at least 4)

        Returns:
            The unique full hash starting with ``prefix``

        Raises:
            ValueError: If prefix is too short or not hexadecimal
            ObjectNotFoundError: If no object matches
            AmbiguousHashError: If several objects match
        """
        prefix = prefix.strip().lower()
        if len(prefix) == HASH_LENGTH:
            self._validate_hash(prefix)
            if not self.exists(prefix):
                raise ObjectNotFoundError(f"Object not found: {prefix}")
            return prefix

        if len(prefix) < MIN_PREFIX_LENGTH:
            raise ValueError(
                f"Hash prefix must be at least {MIN_PREFIX_LENGTH} characters"
            )
        if any(c not in HEX_DIGITS for c in prefix):
            raise ValueError(f"Hash must be hexadecimal: {prefix}")

        matches = []
        if self.objects_dir.exists():
            matches = sorted(
                p.name
                for p in self.objects_dir.iterdir()
                if p.is_file() and p.name.startswith(prefix)
            )

        if not matches:
            raise ObjectNotFoundError(f"Object not found: {prefix}")
        if len(matches) > 1:
            raise AmbiguousHashError(
                f"Hash prefix {prefix} is ambiguous ({len(matches)} objects match)"
            )
        return matches[0]

    @staticmethod
    def hash_content(content: bytes) -> str:
        """Compute the hex digest of content without storing it."""
        hasher = hashlib.new(HASH_ALGORITHM)
        hasher.update(content)
        return hasher.hexdigest()

    def _get_object_path(self, object_hash: str) -> Path:
        return self.objects_dir / object_hash

    def _validate_hash(self, object_hash: str) -> None:
        """Validate that a hash string is properly formatted.

        Raises:
            ValueError: If hash is invalid format
        """
        if not isinstance(object_hash, str):
            raise ValueError(f"Hash must be string, got {type(object_hash)}")

        if len(object_hash) != HASH_LENGTH:
            raise ValueError(
                f"Hash must be {HASH_LENGTH} characters, got {len(object_hash)}"
            )

        try:
            int(object_hash, 16)
        except ValueError as e:
            raise ValueError(f"Hash must be hexadecimal: {e}") from e
