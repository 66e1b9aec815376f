"""
Field datatypes and the literal parsers used to classify raw cells.

The datatype domain is an enum of lower_snake names. Classification of a single
cell walks an ordered cascade of parsers and returns the first (most specific)
type that accepts the value; a cell nothing else accepts is a string.

Cascade order
    integer -> float -> boolean -> date -> object -> array -> string

Notes:
    - Empty cells (after trimming whitespace) classify as ``any``. During inference
      they are tallied like any other cell, so a column that is mostly blank infers
      as ``any``. On an equal tally any typed value outranks ``any``.
    - TYPE_PREFERENCE fixes how equal tallies are resolved during inference. It
      prefers the more general type, so a column split evenly between integers and
      free text reads back as text.
    - Zero-IO, stdlib-only.

Examples:
    >>> from strata.core.datatypes import DataType, parse_datatype
    >>> parse_datatype(b"42") is DataType.INTEGER
    True
    >>> parse_datatype("4.2") is DataType.FLOAT
    True
    >>> parse_datatype("hello") is DataType.STRING
    True
"""

from __future__ import annotations

import json
import re
from datetime import date
from enum import Enum
from typing import Final

__all__ = [
    "DataType",
    "TYPE_PREFERENCE",
    "parse_integer",
    "parse_float",
    "parse_boolean",
    "parse_date",
    "parse_datatype",
]


class DataType(Enum):
    """Datatype of a schema field (serialized lower_snake)."""

    ANY = "any"
    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    DATE = "date"
    OBJECT = "object"
    ARRAY = "array"


# Tie-break order for equal tallies; earlier wins.
TYPE_PREFERENCE: Final[tuple[DataType, ...]] = (
    DataType.STRING,
    DataType.FLOAT,
    DataType.INTEGER,
    DataType.BOOLEAN,
    DataType.DATE,
    DataType.OBJECT,
    DataType.ARRAY,
    DataType.ANY,
)

_INTEGER_RE: Final[re.Pattern[str]] = re.compile(r"^[+-]?\d+$")
_FLOAT_RE: Final[re.Pattern[str]] = re.compile(r"^[+-]?(?:\d+\.\d*|\.\d+|\d+)(?:[eE][+-]?\d+)?$")
_DATE_RE: Final[re.Pattern[str]] = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def _text(value: bytes | str) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value


def parse_integer(value: bytes | str) -> int:
    """
    Parse a base-10 integer literal.

    Raises:
        ValueError: If value is not an integer literal.
    """
    s = _text(value)
    if not _INTEGER_RE.match(s):
        raise ValueError(f"not an integer literal: {s!r}")
    return int(s)


def parse_float(value: bytes | str) -> float:
    """
    Parse a decimal floating-point literal (optionally with an exponent).

    Raises:
        ValueError: If value is not a floating-point literal.
    """
    s = _text(value)
    if not _FLOAT_RE.match(s):
        raise ValueError(f"not a float literal: {s!r}")
    return float(s)


def parse_boolean(value: bytes | str) -> bool:
    """
    Parse "true"/"false" in any letter case.

    Raises:
        ValueError: If value is not a boolean keyword.
    """
    s = _text(value).lower()
    if s == "true":
        return True
    if s == "false":
        return False
    raise ValueError(f"not a boolean literal: {s!r}")


def parse_date(value: bytes | str) -> date:
    """
    Parse an ISO YYYY-MM-DD calendar date.

    Raises:
        ValueError: If value is not a valid ISO date.
    """
    s = _text(value)
    if not _DATE_RE.match(s):
        raise ValueError(f"not an ISO date: {s!r}")
    return date.fromisoformat(s)


def _parse_json_container(s: str, opener: str, kind: type) -> bool:
    if not s.startswith(opener):
        return False
    try:
        return isinstance(json.loads(s), kind)
    except ValueError:
        return False


def parse_datatype(value: bytes | str) -> DataType:
    """
    Classify a raw cell as the most specific DataType that accepts it.

    Args:
        value (bytes | str): Raw cell contents.

    Returns:
        DataType: ANY for empty cells, otherwise the first match of the cascade.
    """
    s = _text(value).strip()
    if s == "":
        return DataType.ANY
    for parser, dtype in (
        (parse_integer, DataType.INTEGER),
        (parse_float, DataType.FLOAT),
        (parse_boolean, DataType.BOOLEAN),
        (parse_date, DataType.DATE),
    ):
        try:
            parser(s)
        except ValueError:
            continue
        return dtype
    if _parse_json_container(s, "{", dict):
        return DataType.OBJECT
    if _parse_json_container(s, "[", list):
        return DataType.ARRAY
    return DataType.STRING
