"""Atomic file replacement helpers.

Every durable record Groot keeps (objects, HEAD, index) is written through
this module so that a crash leaves either the old file or the new one on
disk, never a torn write.
"""

import logging
import os
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)


def _write_temp(path: Path, data: bytes, prefix: str) -> str:
    """Write data to a synced temp file next to path and return its name."""
    fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=prefix)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
    except Exception:
        _discard(tmp_path)
        raise
    return tmp_path


def _discard(tmp_path: str) -> None:
    try:
        os.unlink(tmp_path)
    except OSError:
        pass


def atomic_write(path: Path, data: bytes, prefix: str = ".tmp_") -> None:
    """Write ``data`` to ``path`` via a temp file and an atomic rename.

    The temp file is created in the target's directory so that
    ``os.replace`` never crosses a filesystem boundary.

    Args:
        path: Destination file
        data: Bytes to write
        prefix: Prefix for the temporary file name

    Raises:
        OSError: If the write or rename fails
    """
    path = Path(path)
    tmp_path = _write_temp(path, data, prefix)
    try:
        os.replace(tmp_path, path)
    except Exception:
        _discard(tmp_path)
        raise

    logger.debug("Wrote %d bytes to %s", len(data), path)


def atomic_create(path: Path, data: bytes, prefix: str = ".tmp_") -> bool:
    """Create ``path`` with ``data`` only if it doesn't exist yet.

    The content is synced to a temp file first and then hard-linked into
    place, so the file appears complete or not at all and an existing file
    is never replaced.

    Returns:
        True if the file was created, False if it already existed

    Raises:
        OSError: If the write or link fails for another reason
    """
    path = Path(path)
    tmp_path = _write_temp(path, data, prefix)
    try:
        os.link(tmp_path, path)
    except FileExistsError:
        return False
    finally:
        _discard(tmp_path)

    logger.debug("Created %s (%d bytes)", path, len(data))
    return True
