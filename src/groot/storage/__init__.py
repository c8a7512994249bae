"""Storage layer for Groot.

This module provides the content-addressable object store and the atomic
write primitive used for every durable file.
"""

from groot.storage.atomic import atomic_create, atomic_write
from groot.storage.object_store import (
    AmbiguousHashError,
    ObjectCorruptedError,
    ObjectNotFoundError,
    ObjectStore,
    is_valid_hash,
)

__all__ = [
    "ObjectStore",
    "ObjectNotFoundError",
    "ObjectCorruptedError",
    "AmbiguousHashError",
    "atomic_write",
    "atomic_create",
    "is_valid_hash",
]
