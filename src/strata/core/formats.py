"""
Serialization formats and compression codecs known to strata.

Defines the DataFormat and Compression enums and the pure string conversions
between tags and their lowercase names. Tables are immutable module constants;
nothing here holds process-wide mutable state.

Rules
- DataFormat.UNKNOWN renders as the empty string and is omitted from canonical
  encodings; parsing "" yields UNKNOWN rather than an error.
- Any other name outside the known set raises InvalidFormat.
- Compression.NONE likewise renders as "" and is omitted from canonical encodings.

Examples:
    >>> from strata.core.formats import DataFormat, parse_format, format_value
    >>> parse_format("csv") is DataFormat.CSV
    True
    >>> format_value(DataFormat.UNKNOWN)
    ''
"""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Final

from .errors import InvalidFormat

__all__ = [
    "DataFormat",
    "Compression",
    "format_value",
    "parse_format",
    "parse_compression",
    "known_formats",
]


class DataFormat(Enum):
    """
    Serialization format of a dataset's raw bytes.

    Serialized values are lowercase names; UNKNOWN is the empty string.
    """

    UNKNOWN = ""
    CSV = "csv"
    JSON = "json"
    XML = "xml"
    XLS = "xls"


class Compression(Enum):
    """Compression applied to a dataset's raw bytes (NONE renders as empty)."""

    NONE = ""
    GZIP = "gzip"
    ZSTD = "zstd"


_FORMAT_BY_NAME: Final = MappingProxyType({f.value: f for f in DataFormat})
_COMPRESSION_BY_NAME: Final = MappingProxyType({c.value: c for c in Compression})


def format_value(fmt: DataFormat) -> str:
    """
    Get the canonical lowercase name of a DataFormat.

    Args:
        fmt (DataFormat): Format tag.

    Returns:
        str: Lowercase name, or "" for DataFormat.UNKNOWN.
    """
    return fmt.value


def parse_format(s: str) -> DataFormat:
    """
    Parse a format name into a DataFormat.

    Args:
        s (str): Lowercase format name; "" maps to DataFormat.UNKNOWN.

    Returns:
        DataFormat: Parsed format tag.

    Raises:
        InvalidFormat: If s is not a known format name.

    Examples:
        >>> parse_format("") is DataFormat.UNKNOWN
        True
    """
    try:
        return _FORMAT_BY_NAME[s]
    except (KeyError, TypeError):
        raise InvalidFormat(f"invalid DataFormat {s!r}") from None


def parse_compression(s: str) -> Compression:
    """
    Parse a compression name into a Compression tag.

    Raises:
        InvalidFormat: If s is not a known compression name.
    """
    try:
        return _COMPRESSION_BY_NAME[s]
    except (KeyError, TypeError):
        raise InvalidFormat(f"invalid Compression {s!r}") from None


def known_formats() -> tuple[DataFormat, ...]:
    """Return every named (non-UNKNOWN) format in declaration order."""
    return tuple(f for f in DataFormat if f is not DataFormat.UNKNOWN)
