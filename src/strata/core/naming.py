"""
Field naming helpers: header normalization and synthetic names.

Notes:
    - camelize turns a free-text header cell into a field name ("First Name" ->
      "firstName"). Names that would start with a digit get a leading underscore.
    - positional_name is 1-based (field_1, field_2, ...) and names the columns of
      header-less data; abstract_name is 0-based (col_0, col_1, ...) and names the
      columns of an abstract Structure.
    - Zero-IO, stdlib-only.

Examples:
    >>> camelize("First Name")
    'firstName'
    >>> camelize("col_a")
    'colA'
    >>> positional_name(0)
    'field_1'
"""

from __future__ import annotations

import re
from typing import Final

from .constants import ABSTRACT_PREFIX, POSITIONAL_PREFIX

__all__ = [
    "camelize",
    "positional_name",
    "abstract_name",
    "is_variable_name",
]

_WORD_SPLIT_RE: Final[re.Pattern[str]] = re.compile(r"[^0-9A-Za-z]+")
_VARIABLE_NAME_RE: Final[re.Pattern[str]] = re.compile(r"^[A-Za-z_][A-Za-z0-9_\-]*$")


def camelize(s: str) -> str:
    """
    Normalize a header cell into a camelCase field name.

    Args:
        s (str): Raw header text.

    Returns:
        str: camelCase name, "" if s has no letters or digits.
    """
    words = [w for w in _WORD_SPLIT_RE.split(s.strip()) if w]
    if not words:
        return ""
    name = words[0].lower() + "".join(w[:1].upper() + w[1:].lower() for w in words[1:])
    if name[0].isdigit():
        name = "_" + name
    return name


def positional_name(index: int) -> str:
    """Synthetic name for the column at 0-based ``index`` of header-less data."""
    return f"{POSITIONAL_PREFIX}{index + 1}"


def abstract_name(index: int) -> str:
    """Synthetic name for the column at 0-based ``index`` of an abstract Structure."""
    return f"{ABSTRACT_PREFIX}{index}"


def is_variable_name(value: str) -> bool:
    """
    Check whether a string is a valid field name.

    Field names start with a letter or underscore and contain only letters, digits,
    '_' or '-'.
    """
    return bool(_VARIABLE_NAME_RE.match(value or ""))
