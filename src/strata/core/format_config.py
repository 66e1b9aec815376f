"""
Per-format configuration variants built from untyped option maps.

Each variant is a frozen Pydantic model that reports the DataFormat it belongs to,
renders itself as a flat lower_snake option map, and can be rebuilt from one.
Variants are registered against their format; build_format_config dispatches
through that registry, so adding a format means registering a new model and never
editing existing dispatch code.

Rules
- ``options is None`` yields an all-default variant.
- Known keys are type-checked strictly (``header_row`` must be a bool, not 1/"yes");
  a mismatch raises strata.core.errors.ValidationError.
- Unknown keys and keys explicitly set to None are ignored.
- A format without a registered variant returns None when no options are given
  and raises ValidationError when options are given.

Examples:
    >>> from strata.core.format_config import build_format_config, CsvConfig
    >>> from strata.core.formats import DataFormat
    >>> build_format_config(DataFormat.CSV, {"header_row": True})
    CsvConfig(header_row=True)
    >>> build_format_config(DataFormat.CSV, None).to_map()
    {'header_row': False}
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, ClassVar, TypeVar

from pydantic import BaseModel, ConfigDict, StrictBool
from pydantic import ValidationError as PydanticValidationError

from .errors import ValidationError
from .formats import DataFormat

__all__ = [
    "FormatConfig",
    "CsvConfig",
    "JsonConfig",
    "register_format_config",
    "build_format_config",
    "registered_formats",
]

_C = TypeVar("_C", bound="type[FormatConfig]")

_REGISTRY: dict[DataFormat, type[FormatConfig]] = {}


class FormatConfig(BaseModel):
    """
    Base class for per-format configuration variants.

    Attributes:
        data_format (ClassVar[DataFormat]): Format this variant configures.

    Notes:
        Subclasses declare their options as typed fields and are registered with
        register_format_config.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    data_format: ClassVar[DataFormat] = DataFormat.UNKNOWN

    def to_map(self) -> dict[str, Any]:
        """Render this config as a flat option map."""
        return self.model_dump(mode="json")

    @classmethod
    def from_map(cls, options: Mapping[str, Any]) -> FormatConfig:
        """
        Rebuild a config from an option map.

        Raises:
            ValidationError: If a known key holds a value of the wrong type.
        """
        cleaned = {k: v for k, v in options.items() if v is not None}
        try:
            return cls.model_validate(cleaned)
        except PydanticValidationError as exc:
            details = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
            )
            raise ValidationError(
                f"invalid {cls.data_format.value} format config: {details}"
            ) from exc


def register_format_config(cls: _C) -> _C:
    """
    Register a FormatConfig subclass for its ``data_format``.

    Raises:
        ValueError: If the class configures DataFormat.UNKNOWN.
    """
    if cls.data_format is DataFormat.UNKNOWN:
        raise ValueError(f"{cls.__name__} must declare a data_format")
    _REGISTRY[cls.data_format] = cls
    return cls


@register_format_config
class CsvConfig(FormatConfig):
    """
    CSV options.

    Attributes:
        header_row (bool): Whether the first record names the columns.
    """

    data_format: ClassVar[DataFormat] = DataFormat.CSV

    header_row: StrictBool = False


@register_format_config
class JsonConfig(FormatConfig):
    """
    JSON options.

    Attributes:
        object_entries (bool): Whether top-level entries are objects keyed by name
            rather than positional arrays.
    """

    data_format: ClassVar[DataFormat] = DataFormat.JSON

    object_entries: StrictBool = False


def build_format_config(
    fmt: DataFormat, options: Mapping[str, Any] | None
) -> FormatConfig | None:
    """
    Build the registered config variant for a format from an option map.

    Args:
        fmt (DataFormat): Format whose variant should be built.
        options (Mapping[str, Any] | None): Untyped options; None means defaults.

    Returns:
        FormatConfig | None: The built variant, or None when the format has no
        registered variant and no options were given.

    Raises:
        ValidationError: If an option has the wrong type, or options were given for a
            format without a registered variant.
    """
    cls = _REGISTRY.get(fmt)
    if cls is None:
        if options:
            raise ValidationError(
                f"no format config registered for {fmt.value or 'unknown'!r}; "
                f"cannot apply options {sorted(options)!r}"
            )
        return None
    if options is None:
        return cls()
    return cls.from_map(options)


def registered_formats() -> tuple[DataFormat, ...]:
    """Return formats that have a registered config variant."""
    return tuple(_REGISTRY)
