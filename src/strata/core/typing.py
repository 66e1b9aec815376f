"""
Lightweight typing aliases used across the data model, row streams, and stores.

Provides minimal NewTypes and aliases to improve readability and static checks.
This module contains no runtime logic and is zero-IO.

Examples:
    >>> from strata.core.typing import ContentKey, Row
    >>> key = ContentKey("/map/abc")
    >>> row: Row = [b"a", b"b"]
"""

from __future__ import annotations

from typing import Any, NewType

__all__ = [
    "ContentKey",
    "Row",
    "JsonDict",
]

# Opaque store key derived from a SHA-256 digest of canonical bytes.
ContentKey = NewType("ContentKey", str)

# One record: raw cell bytes positionally aligned to Schema.fields.
Row = list[bytes]

JsonDict = dict[str, Any]
