"""
Canonical encoding and decoding of data model values.

encode/hash_entity render any CanonicalModel through the single canonical JSON
policy in strata.core.hashing. The decoders are the exact inverse: parse the JSON,
rebuild the format config variant from its option map keyed by the parsed format,
and validate the model. This module is zero-IO.

Notes:
    - Decoding fails with DecodeError on malformed JSON, an unrecognized format tag,
      a format config map that cannot be resolved to a variant, or any option or
      model validation failure.
    - Re-exports json_dumps_canonical to keep a single canonicalization policy.
"""

from __future__ import annotations

import json
from typing import Any, TypeVar

from pydantic import ValidationError as PydanticValidationError

from .errors import DecodeError, ValidationError
from .hashing import json_dumps_canonical  # noqa: F401
from .structure import CanonicalModel, Dataset, Schema, Structure

__all__ = [
    "json_loads",
    "json_dumps_canonical",
    "encode",
    "hash_entity",
    "decode",
    "decode_structure",
    "decode_schema",
    "decode_dataset",
]

_M = TypeVar("_M", bound=CanonicalModel)


def json_loads(s: str | bytes) -> Any:
    """
    Deserialize JSON text or UTF-8 bytes using the stdlib json module.

    Raises:
        DecodeError: If the input is not valid UTF-8 JSON.
    """
    try:
        return json.loads(s)
    except (ValueError, UnicodeDecodeError) as exc:
        raise DecodeError(f"malformed canonical encoding: {exc}") from exc


def encode(entity: CanonicalModel) -> bytes:
    """Canonical UTF-8 JSON bytes of a data model value."""
    return entity.encode()


def hash_entity(entity: CanonicalModel) -> str:
    """
    SHA-256 hex digest of a data model value's canonical encoding.

    Examples:
        >>> from strata.core.structure import Structure
        >>> hash_entity(Structure()) == hash_entity(Structure(encoding="utf-8"))
        True
    """
    return entity.hash()


def decode(model: type[_M], data: str | bytes | dict[str, Any]) -> _M:
    """
    Decode canonical JSON (or an already parsed mapping) into ``model``.

    Raises:
        DecodeError: If the data cannot be parsed or validated.
    """
    obj = json_loads(data) if isinstance(data, (str, bytes)) else data
    try:
        return model.model_validate(obj)
    except (PydanticValidationError, ValidationError) as exc:
        raise DecodeError(f"cannot decode {model.__name__}: {exc}") from exc


def decode_structure(data: str | bytes | dict[str, Any]) -> Structure:
    """Decode canonical bytes into a Structure."""
    return decode(Structure, data)


def decode_schema(data: str | bytes | dict[str, Any]) -> Schema:
    """Decode canonical bytes into a Schema."""
    return decode(Schema, data)


def decode_dataset(data: str | bytes | dict[str, Any]) -> Dataset:
    """Decode canonical bytes of a fully inlined Dataset."""
    return decode(Dataset, data)
