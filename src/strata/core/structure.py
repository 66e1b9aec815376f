"""
Pydantic v2 models for dataset descriptions: Field, Schema, Structure, License,
Citation, and Dataset. Every model is frozen; a change produces a new instance, so
a value can never drift after it has been hashed.

Responsibilities
- Describe a dataset's physical encoding (format, format config, encoding,
  compression) separately from its logical schema (ordered typed fields).
- Render each model to its canonical form: camelCase keys, empty values omitted,
  the format config flattened to its option map. strata.core.hashing turns that
  form into bytes and content hashes.
- Rebuild the format config variant from its option map when validating a mapping,
  keyed by the parsed format.
- Provide the abstract projection of a Structure and structural comparison helpers.

Style
- Zero-IO (stdlib + pydantic only).
- Model invariants raise ValueError inside validators, surfacing as
  pydantic.ValidationError; strata.core.serde wraps those in DecodeError when
  decoding canonical bytes.

Examples:
    >>> from strata.core.structure import Field, Schema, Structure
    >>> from strata.core.format_config import CsvConfig
    >>> from strata.core.formats import DataFormat
    >>> st = Structure(
    ...     format=DataFormat.CSV,
    ...     format_config=CsvConfig(header_row=True),
    ...     schema_=Schema(fields=(Field(name="a", type="integer"),)),
    ... )
    >>> st.encode()
    b'{"encoding":"utf-8","format":"csv","formatConfig":{"header_row":true},"schema":{"fields":[{"name":"a","type":"integer"}]}}'
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any, Final

import pydantic
from pydantic import (
    BaseModel,
    ConfigDict,
    SerializerFunctionWrapHandler,
    field_serializer,
    field_validator,
    model_serializer,
    model_validator,
)

from .constants import DEFAULT_ENCODING
from .datatypes import DataType
from .errors import ValidationError
from .format_config import FormatConfig, build_format_config
from .formats import Compression, DataFormat, parse_format
from .hashing import canonical_bytes, sha256_hexdigest
from .naming import abstract_name, is_variable_name
from .typing import ContentKey, JsonDict

__all__ = [
    "CanonicalModel",
    "Field",
    "Schema",
    "Structure",
    "License",
    "Citation",
    "Dataset",
    "compare_fields",
    "compare_schemas",
    "compare_structures",
]

_VERSION_RE: Final[re.Pattern[str]] = re.compile(r"^\d+\.\d+\.\d+$")


def _drop_empty(data: JsonDict) -> JsonDict:
    # None and empty containers never reach the canonical form.
    return {
        k: v
        for k, v in data.items()
        if v is not None and not (isinstance(v, (list, dict)) and not v)
    }


class CanonicalModel(BaseModel):
    """
    Frozen base model with a canonical rendering.

    Notes:
        - to_canonical() is the JSON-mode dump with aliases and empty values dropped.
        - encode() is the canonical JSON bytes; hash() is their SHA-256 hex digest.
        - Two models with equal canonical forms always encode and hash identically.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    @model_serializer(mode="wrap")
    def _serialize(self, handler: SerializerFunctionWrapHandler) -> Any:
        return _drop_empty(handler(self))

    def to_canonical(self) -> Any:
        """Render this model to its canonical JSON-compatible form."""
        return self.model_dump(mode="json", by_alias=True)

    def encode(self) -> bytes:
        """Canonical UTF-8 JSON bytes of this model."""
        return canonical_bytes(self.to_canonical())

    def hash(self) -> str:
        """SHA-256 hex digest of encode()."""
        return sha256_hexdigest(self.encode())

    def replace(self, **changes: Any) -> Any:
        """
        Return a validated copy with ``changes`` applied (field names, not aliases).

        Notes:
            Unlike model_copy(update=...), this re-runs every validator.
        """
        values = {name: getattr(self, name) for name in type(self).model_fields}
        values.update(changes)
        return type(self)(**values)


class Field(CanonicalModel):
    """
    A single named, typed column of a schema.

    Attributes:
        name (str): Variable-style identifier (letter or '_' first; letters, digits,
            '_' and '-' after).
        type (DataType): Column datatype (default ``any``).
        title (str | None): Human-facing label; cosmetic.
        description (str | None): Human-facing description; cosmetic.
        missing_value (Any): Sentinel standing for a missing cell (``missingValue``).
        format (str | None): Sub-format hint (e.g. a date pattern).
        constraints (dict[str, Any] | None): Free-form value constraints.

    Raises:
        pydantic.ValidationError: If name is not a valid variable name.
    """

    name: str
    type: DataType = DataType.ANY
    title: str | None = None
    description: str | None = None
    missing_value: Any = pydantic.Field(default=None, alias="missingValue")
    format: str | None = None
    constraints: dict[str, Any] | None = None

    @field_validator("constraints", "missing_value")
    @classmethod
    def _empty_as_none(cls, v: Any) -> Any:
        # Empty containers are dropped from the encoding, so they decode as None.
        if isinstance(v, (list, tuple, dict)) and not v:
            return None
        return v

    @field_validator("name")
    @classmethod
    def _check_name(cls, v: str) -> str:
        if not is_variable_name(v):
            raise ValueError(
                f"field name must start with a letter or '_' and contain only letters, "
                f"numbers, '_' or '-' (got: {v!r})"
            )
        return v


class Schema(CanonicalModel):
    """
    Ordered column definitions.

    Attributes:
        fields (tuple[Field, ...]): Columns in row order; order is significant.
        primary_key (tuple[str, ...] | None): Names of the key fields (``primaryKey``).

    Raises:
        pydantic.ValidationError: If a primary key entry names no field.
    """

    fields: tuple[Field, ...] = ()
    primary_key: tuple[str, ...] | None = pydantic.Field(default=None, alias="primaryKey")

    @field_validator("primary_key")
    @classmethod
    def _empty_key_as_none(cls, v: tuple[str, ...] | None) -> tuple[str, ...] | None:
        return v or None

    @model_validator(mode="after")
    def _check_primary_key(self) -> Schema:
        if self.primary_key:
            names = {f.name for f in self.fields}
            missing = [k for k in self.primary_key if k not in names]
            if missing:
                raise ValueError(f"primary key references unknown fields: {missing!r}")
        return self

    def field_names(self) -> list[str]:
        """Field names in row order."""
        return [f.name for f in self.fields]


class Structure(CanonicalModel):
    """
    Deterministic definition of how to interpret a dataset's raw bytes.

    Attributes:
        format (DataFormat): Serialization format; omitted from the canonical form
            when UNKNOWN.
        format_config (FormatConfig | None): Variant matching ``format``
            (``formatConfig``); rendered as its flat option map.
        encoding (str): Character encoding (default "utf-8").
        compression (Compression): Compression codec; omitted when NONE.
        schema_ (Schema | None): Column definitions (``schema``).

    Raises:
        pydantic.ValidationError: If the format config belongs to a different format,
            or a formatConfig option map cannot be rebuilt for ``format``.

    Notes:
        Canonical key order: compression, encoding, format, formatConfig, schema.
    """

    format: DataFormat = DataFormat.UNKNOWN
    format_config: FormatConfig | None = pydantic.Field(default=None, alias="formatConfig")
    encoding: str = DEFAULT_ENCODING
    compression: Compression = Compression.NONE
    schema_: Schema | None = pydantic.Field(default=None, alias="schema")

    @model_validator(mode="before")
    @classmethod
    def _build_format_config(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data
        key = "formatConfig" if "formatConfig" in data else "format_config"
        options = data.get(key)
        if options is None or isinstance(options, FormatConfig):
            return data
        if not isinstance(options, Mapping):
            raise ValueError(f"formatConfig must be an option map, got {type(options).__name__}")
        raw_format = data.get("format", DataFormat.UNKNOWN)
        fmt = raw_format if isinstance(raw_format, DataFormat) else parse_format(raw_format)
        out = dict(data)
        out[key] = build_format_config(fmt, options)
        return out

    @model_validator(mode="after")
    def _check_format_config(self) -> Structure:
        cfg = self.format_config
        if cfg is not None and cfg.data_format is not self.format:
            raise ValueError(
                f"format config {type(cfg).__name__} is for {cfg.data_format.value!r}, "
                f"structure format is {self.format.value or 'unknown'!r}"
            )
        return self

    @field_serializer("format_config")
    def _serialize_format_config(self, cfg: FormatConfig | None) -> JsonDict | None:
        return cfg.to_map() if cfg is not None else None

    @model_serializer(mode="wrap")
    def _serialize(self, handler: SerializerFunctionWrapHandler) -> Any:
        data = _drop_empty(handler(self))
        for key in ("format", "compression"):
            if data.get(key) == "":
                del data[key]
        return data

    @property
    def fields(self) -> tuple[Field, ...]:
        """Schema fields, or () when no schema is set."""
        return self.schema_.fields if self.schema_ is not None else ()

    def abstract(self) -> Structure:
        """
        Return the abstract projection of this structure.

        Titles and descriptions are stripped and every field is renamed to its
        positional name (col_0, col_1, ...), so structures that differ only in
        human-facing labels project to equal values. Primary key references follow
        the renaming. The receiver is never modified.
        """
        schema = None
        if self.schema_ is not None:
            renamed = {f.name: abstract_name(i) for i, f in enumerate(self.schema_.fields)}
            pk = self.schema_.primary_key
            schema = Schema(
                fields=tuple(
                    Field(
                        name=abstract_name(i),
                        type=f.type,
                        missing_value=f.missing_value,
                        format=f.format,
                        constraints=f.constraints,
                    )
                    for i, f in enumerate(self.schema_.fields)
                ),
                primary_key=tuple(renamed[k] for k in pk) if pk else None,
            )
        return Structure(
            format=self.format,
            format_config=self.format_config,
            encoding=self.encoding,
            compression=self.compression,
            schema_=schema,
        )


class License(CanonicalModel):
    """
    Legal licensing terms.

    Attributes:
        type (str): License identifier (e.g. "CC-BY-4.0").
        url (str | None): Link to the license text.

    Notes:
        Renders as a bare string when only ``type`` is set, otherwise as
        ``{"type": ..., "url": ...}``; both shapes validate.
    """

    type: str = ""
    url: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _from_string(cls, data: Any) -> Any:
        if isinstance(data, str):
            return {"type": data}
        return data

    @model_serializer(mode="wrap")
    def _serialize(self, handler: SerializerFunctionWrapHandler) -> Any:
        if self.type and not self.url:
            return self.type
        return _drop_empty(handler(self))


class Citation(CanonicalModel):
    """A source this dataset drew its information from."""

    name: str | None = None
    url: str | None = None
    email: str | None = None


class Dataset(CanonicalModel):
    """
    A described dataset: structure, data locator, and descriptive metadata.

    Attributes:
        title (str | None): Human-readable title.
        description (str | None): Longer description.
        keywords (tuple[str, ...]): Search keywords.
        citations (tuple[Citation, ...]): Sources.
        license (License | None): Licensing terms.
        version (str | None): Semantic ``major.minor.patch`` version.
        structure (Structure | None): How to interpret the raw data.
        data (ContentKey | None): Store key of the raw data blob.

    Notes:
        strata.io.dsfs persists the structure and raw data as separate blobs and
        stores this model with ``structure`` replaced by its content key.
    """

    title: str | None = None
    description: str | None = None
    keywords: tuple[str, ...] = ()
    citations: tuple[Citation, ...] = ()
    license: License | None = None
    version: str | None = None
    structure: Structure | None = None
    data: ContentKey | None = None

    @field_validator("version")
    @classmethod
    def _check_version(cls, v: str | None) -> str | None:
        if v is not None and not _VERSION_RE.match(v):
            raise ValueError(f"version must be major.minor.patch (got: {v!r})")
        return v


# -----------------------------------------------------------------------------
# Structural comparison
# -----------------------------------------------------------------------------


def compare_fields(a: Field | None, b: Field | None) -> None:
    """
    Compare two fields by name, type, title, and description.

    Raises:
        ValidationError: Describing the first mismatch.
    """
    if a is None and b is None:
        return
    if a is None or b is None:
        raise ValidationError(f"nil mismatch: {a!r} != {b!r}")
    for attr in ("name", "type", "title", "description"):
        av, bv = getattr(a, attr), getattr(b, attr)
        if av != bv:
            raise ValidationError(f"{attr} mismatch: {av!r} != {bv!r}")


def compare_schemas(a: Schema | None, b: Schema | None) -> None:
    """
    Compare two schemas field by field.

    Raises:
        ValidationError: Describing the first mismatch.
    """
    if a is None and b is None:
        return
    if a is None or b is None:
        raise ValidationError(f"nil mismatch: {a!r} != {b!r}")
    if len(a.fields) != len(b.fields):
        raise ValidationError(f"field length mismatch: {len(a.fields)} != {len(b.fields)}")
    for i, (af, bf) in enumerate(zip(a.fields, b.fields)):
        try:
            compare_fields(af, bf)
        except ValidationError as exc:
            raise ValidationError(f"field {i} mismatch: {exc}") from exc


def compare_structures(a: Structure | None, b: Structure | None) -> None:
    """
    Compare two structures: format, format config, encoding, compression, schema.

    Raises:
        ValidationError: Describing the first mismatch.
    """
    if a is None and b is None:
        return
    if a is None or b is None:
        raise ValidationError(f"nil mismatch: {a!r} != {b!r}")
    if a.format is not b.format:
        raise ValidationError(f"format mismatch: {a.format.value!r} != {b.format.value!r}")
    a_cfg = a.format_config.to_map() if a.format_config else None
    b_cfg = b.format_config.to_map() if b.format_config else None
    if a_cfg != b_cfg:
        raise ValidationError(f"format config mismatch: {a_cfg!r} != {b_cfg!r}")
    if a.encoding != b.encoding:
        raise ValidationError(f"encoding mismatch: {a.encoding!r} != {b.encoding!r}")
    if a.compression is not b.compression:
        raise ValidationError(
            f"compression mismatch: {a.compression.value!r} != {b.compression.value!r}"
        )
    try:
        compare_schemas(a.schema_, b.schema_)
    except ValidationError as exc:
        raise ValidationError(f"schema mismatch: {exc}") from exc
