"""
Core exception types raised by format parsing, canonical decoding, and validation.

Provides typed exceptions for core-domain failures:
- ParseError for malformed literals (format names, canonical encodings).
- InvalidFormat for format strings outside the known set.
- DecodeError for canonical bytes that cannot be rebuilt into the data model.
- ValidationError for wrong-typed options and mismatched row widths.

Notes:
    - This module uses only the Python standard library and has no side effects.
    - Pydantic models in strata.core.structure raise pydantic.ValidationError when a
      model invariant fails at construction; the decoders in strata.core.serde wrap
      those failures in DecodeError.
    - IO-layer failures (read/write/missing keys) live in strata.io.errors.

Examples:
    Catch an unknown format name.

    >>> from strata.core.errors import InvalidFormat
    >>> from strata.core.formats import parse_format
    >>> try:
    ...     parse_format("parquet")
    ... except InvalidFormat as e:
    ...     msg = str(e)
    >>> "parquet" in msg
    True
"""

from __future__ import annotations

__all__ = [
    "ParseError",
    "InvalidFormat",
    "DecodeError",
    "ValidationError",
]


class ParseError(ValueError):
    """Malformed literal (unknown format string, malformed canonical encoding)."""


class InvalidFormat(ParseError):
    """Format name outside the known set of DataFormat values."""


class DecodeError(ParseError):
    """Canonical bytes could not be parsed back into a data model value."""


class ValidationError(ValueError):
    """Wrong-typed option value or a row whose width does not match its schema."""
