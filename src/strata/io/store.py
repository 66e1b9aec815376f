"""
Content-addressed blob stores.

The store is an external collaborator of persistence: anything exposing
``put(bytes) -> key`` and ``get(key) -> bytes`` works. This module defines that
protocol and two reference implementations keyed by the SHA-256 digest of the
stored bytes.

- MapStore — in-memory dict, keys ``/map/<sha256>``; for tests and short-lived use.
- FileStore — one file per blob under ``<store_root>/blobs/<aa>/<rest>``, keys
  ``/file/<sha256>``; writes are tmp -> fsync -> atomic rename.

Notes
- put is idempotent: identical bytes map to the same key, and storing them again is
  a no-op. Concurrent puts of identical bytes are therefore safe without locking.
- get raises NotFound for an absent key.
"""

from __future__ import annotations

import os
from typing import Protocol, runtime_checkable

from strata.core.hashing import sha256_hexdigest
from strata.core.logging_config import get_logger
from strata.core.typing import ContentKey

from .config import IoSettings
from .errors import NotFound
from .fs import read_file, shard_path, write_atomic

__all__ = [
    "ContentStore",
    "MapStore",
    "FileStore",
]

_LOGGER = get_logger(__name__)


@runtime_checkable
class ContentStore(Protocol):
    """Minimal content-addressed store interface consumed by strata.io.dsfs."""

    def put(self, data: bytes) -> ContentKey: ...

    def get(self, key: ContentKey) -> bytes: ...

    def has(self, key: ContentKey) -> bool: ...


class MapStore:
    """
    In-memory content store.

    Examples:
        >>> store = MapStore()
        >>> key = store.put(b"hello")
        >>> store.get(key)
        b'hello'
        >>> store.put(b"hello") == key and len(store) == 1
        True
    """

    _PREFIX = "/map/"

    def __init__(self) -> None:
        self._blobs: dict[ContentKey, bytes] = {}

    def __len__(self) -> int:
        return len(self._blobs)

    def put(self, data: bytes) -> ContentKey:
        key = ContentKey(self._PREFIX + sha256_hexdigest(data))
        if key not in self._blobs:
            self._blobs[key] = bytes(data)
            _LOGGER.debug("blob_stored", key=key, bytes=len(data))
        return key

    def get(self, key: ContentKey) -> bytes:
        try:
            return self._blobs[key]
        except KeyError:
            raise NotFound(key) from None

    def has(self, key: ContentKey) -> bool:
        return key in self._blobs

    def keys(self) -> list[ContentKey]:
        """Stored keys in insertion order."""
        return list(self._blobs)


class FileStore:
    """
    File-backed content store rooted at ``settings.store_root``.

    Notes:
        - Blob path: <store_root>/blobs/<first two hex chars>/<remaining hex chars>.
        - The store never deletes blobs; garbage collection is the owner's concern.
    """

    _PREFIX = "/file/"

    def __init__(self, settings: IoSettings | None = None) -> None:
        self.settings = settings or IoSettings()
        self.root = os.path.join(self.settings.store_root, "blobs")

    def _path(self, key: ContentKey) -> str:
        if not key.startswith(self._PREFIX):
            raise NotFound(key)
        digest = key[len(self._PREFIX) :]
        if len(digest) != 64 or not all(c in "0123456789abcdef" for c in digest):
            raise NotFound(key)
        return shard_path(self.root, digest)

    def put(self, data: bytes) -> ContentKey:
        key = ContentKey(self._PREFIX + sha256_hexdigest(data))
        path = self._path(key)
        if not os.path.exists(path):
            write_atomic(path, bytes(data), fsync=self.settings.fsync)
            _LOGGER.debug("blob_stored", key=key, bytes=len(data))
        return key

    def get(self, key: ContentKey) -> bytes:
        data = read_file(self._path(key))
        if data is None:
            raise NotFound(key)
        return data

    def has(self, key: ContentKey) -> bool:
        try:
            return os.path.exists(self._path(key))
        except NotFound:
            return False
