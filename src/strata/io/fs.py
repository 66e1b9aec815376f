"""
Filesystem helpers behind FileStore.

Responsibilities
- Map a hex digest onto its sharded blob path (<root>/<aa>/<rest>).
- Write blobs atomically: unique tmp file in the destination directory -> (fsync)
  -> os.replace onto the final path.
- Read blobs back, mapping a missing file to None rather than an exception.

Notes
- The tmp file lives beside its destination, so os.replace never crosses a
  filesystem boundary.
- Writers racing on the same digest each rename a complete file onto the same path;
  the bytes are identical, so the last rename wins harmlessly.
- Stdlib-only and synchronous.
"""

from __future__ import annotations

import os
import tempfile
from typing import BinaryIO

__all__ = [
    "shard_path",
    "fsync_file",
    "write_atomic",
    "read_file",
]


def shard_path(root: str, digest: str) -> str:
    """
    Path of the blob for ``digest`` under ``root``.

    Examples:
        >>> shard_path("blobs", "abcdef")
        'blobs/ab/cdef'
    """
    return os.path.join(root, digest[:2], digest[2:])


def fsync_file(fh: BinaryIO) -> None:
    """Flush and fsync an open file handle."""
    fh.flush()
    os.fsync(fh.fileno())


def write_atomic(path: str, data: bytes, *, fsync: bool = True) -> None:
    """
    Write ``data`` to ``path`` atomically, creating parent directories as needed.

    Args:
        path (str): Final destination path.
        data (bytes): Contents to write.
        fsync (bool): fsync the tmp file before renaming.

    Raises:
        OSError: If any step fails. The tmp file is removed before re-raising.
    """
    directory = os.path.dirname(path) or "."
    os.makedirs(directory, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".tmp-")
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)
            if fsync:
                fsync_file(fh)
        os.replace(tmp_path, path)
    except OSError:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise


def read_file(path: str) -> bytes | None:
    """Return the contents of ``path``, or None if it does not exist."""
    try:
        with open(path, "rb") as fh:
            return fh.read()
    except FileNotFoundError:
        return None
