"""
Canonical JSON serialization and hashing helpers for the data model.

Provides a single canonical JSON policy and SHA-256 helpers so that equal values
always produce identical bytes and therefore identical content keys. This module is
zero-IO and uses only the Python standard library.

Notes:
    - Canonical JSON:
        - sort_keys=True
        - separators=(",", ":")
        - ensure_ascii=False
    - Hashing is performed over the UTF-8 encoded canonical JSON string.
    - strata.core.structure renders models to plain dicts before calling into here.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any

__all__ = [
    "json_dumps_canonical",
    "canonical_bytes",
    "sha256_hexdigest",
]


def json_dumps_canonical(obj: Any) -> str:
    """
    Serialize an object to a canonical JSON string.

    Args:
        obj (Any): JSON-serializable object.

    Returns:
        str: Canonical JSON string with sort_keys=True, compact separators,
        and ensure_ascii=False.

    Notes:
        This function assumes the input is JSON-serializable and does not perform
        coercion of unsupported types.
    """
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def canonical_bytes(obj: Any) -> bytes:
    """UTF-8 bytes of the canonical JSON serialization of ``obj``."""
    return json_dumps_canonical(obj).encode("utf-8")


def sha256_hexdigest(data: bytes | str) -> str:
    """
    Compute the SHA-256 hex digest of bytes (or of a string's UTF-8 encoding).

    Examples:
        >>> sha256_hexdigest(b"") == sha256_hexdigest("")
        True
    """
    if isinstance(data, str):
        data = data.encode("utf-8")
    return hashlib.sha256(data).hexdigest()
