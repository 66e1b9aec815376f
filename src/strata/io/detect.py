"""
Schema inference: derive field names and types from raw sample data.

Overview
- detect_fields(structure, data) dispatches on structure.format to a registered
  detector and returns the ordered Field list.
- detect_structure(structure, data) returns a new Structure carrying the inferred
  Schema (and, for a detected CSV header, CsvConfig(header_row=True)). The input
  Structure is never modified.
- possible_header_row(cells) is the header heuristic, exposed on its own.

CSV algorithm
1) Read the first record as the header candidate (ReadError if it cannot be read,
   including empty input).
2) If possible_header_row() accepts it, field names are the camelized cells and
   header_row is detected. Otherwise names are positional (field_1, ...) and the
   record's cells are tallied as ordinary data.
3) Up to IoSettings.sample_cap further records are classified cell by cell with
   strata.core.datatypes.parse_datatype and tallied per column.
4) Each column takes its most frequent type; ties resolve through
   strata.core.datatypes.TYPE_PREFERENCE. A column with no tallies stays ``any``.

Failure policy
- A malformed record aborts the scan. The raised ReadError carries the failing data
  row number and, in ``fields``, the Field list computed from the records tallied so
  far, for callers that accept a best-effort schema.
- Cells beyond the header candidate's width are ignored.

Notes
- The header heuristic cannot be decided from content alone: a record of plain
  words looks like a header whether or not it is one. Callers holding a previously
  known schema should cross-check (strata.core.structure.compare_schemas).
- JSON and XML detection are registered extension points that raise Undetermined.
"""

from __future__ import annotations

import codecs
import csv
from collections import Counter
from collections.abc import Callable, Sequence
from typing import NamedTuple

from strata.core.datatypes import (
    TYPE_PREFERENCE,
    DataType,
    parse_datatype,
    parse_float,
    parse_integer,
)
from strata.core.format_config import CsvConfig, FormatConfig
from strata.core.formats import DataFormat
from strata.core.logging_config import get_logger
from strata.core.naming import camelize, positional_name
from strata.core.structure import Field, Schema, Structure

from .config import IoSettings
from .errors import ReadError, Undetermined
from .rows import Source, as_stream

__all__ = [
    "Detection",
    "possible_header_row",
    "register_detector",
    "detect_fields",
    "detect_structure",
    "csv_fields",
    "json_fields",
    "xml_fields",
]

_LOGGER = get_logger(__name__)


class Detection(NamedTuple):
    """Result of a detector: inferred fields and an optional detected config."""

    fields: list[Field]
    format_config: FormatConfig | None


Detector = Callable[[Structure, Source, IoSettings], Detection]

_DETECTORS: dict[DataFormat, Detector] = {}


def register_detector(fmt: DataFormat) -> Callable[[Detector], Detector]:
    """Decorator registering a detector for ``fmt``."""

    def _register(fn: Detector) -> Detector:
        _DETECTORS[fmt] = fn
        return fn

    return _register


def possible_header_row(header: Sequence[str]) -> bool:
    """
    Guess whether a record is a header row.

    A record is not a header if any cell, trimmed of surrounding whitespace, is an
    integer literal, a float literal, empty, or the keyword "true"/"false".

    Examples:
        >>> possible_header_row(["Name", "Age"])
        True
        >>> possible_header_row(["1", "b", "c"])
        False
    """
    for raw in header:
        cell = raw.strip()
        if cell == "" or cell in ("true", "false"):
            return False
        for parser in (parse_integer, parse_float):
            try:
                parser(cell)
            except ValueError:
                continue
            return False
    return True


def _choose_type(tally: Counter[DataType]) -> DataType:
    if not tally:
        return DataType.ANY
    return max(TYPE_PREFERENCE, key=lambda t: (tally[t], -TYPE_PREFERENCE.index(t)))


def _fields(names: list[str], tallies: list[Counter[DataType]]) -> list[Field]:
    return [Field(name=n, type=_choose_type(t)) for n, t in zip(names, tallies)]


def _tally(tallies: list[Counter[DataType]], record: Sequence[str]) -> None:
    for tally, cell in zip(tallies, record):
        tally[parse_datatype(cell)] += 1


@register_detector(DataFormat.CSV)
def _detect_csv(structure: Structure, data: Source, settings: IoSettings) -> Detection:
    encoding = structure.encoding or settings.encoding
    records = csv.reader(
        codecs.iterdecode(as_stream(data), encoding), skipinitialspace=True, strict=True
    )
    try:
        header = next(records)
    except StopIteration:
        raise ReadError("cannot read header record: no data") from None
    except (csv.Error, UnicodeDecodeError) as exc:
        raise ReadError(f"cannot read header record: {exc}") from exc

    tallies: list[Counter[DataType]] = [Counter() for _ in header]
    is_header = possible_header_row(header)
    if is_header:
        names = [camelize(cell) or positional_name(i) for i, cell in enumerate(header)]
        first_row = 1
    else:
        names = [positional_name(i) for i in range(len(header))]
        _tally(tallies, header)
        first_row = 2

    sampled = 0
    while sampled < settings.sample_cap:
        try:
            rec = next(records)
        except StopIteration:
            break
        except (csv.Error, UnicodeDecodeError) as exc:
            row_number = first_row + sampled
            partial = _fields(names, tallies)
            _LOGGER.warning("schema_inference_aborted", format="csv", row=row_number)
            raise ReadError(
                f"error reading row {row_number}: {exc}", row_number=row_number, fields=partial
            ) from exc
        _tally(tallies, rec)
        sampled += 1

    fields = _fields(names, tallies)
    _LOGGER.info(
        "schema_inferred",
        format="csv",
        columns=len(fields),
        sampled=sampled,
        header_row=is_header,
    )
    return Detection(fields, CsvConfig(header_row=True) if is_header else None)


@register_detector(DataFormat.JSON)
def _detect_json(structure: Structure, data: Source, settings: IoSettings) -> Detection:
    raise Undetermined("json field detection not yet implemented")


@register_detector(DataFormat.XML)
def _detect_xml(structure: Structure, data: Source, settings: IoSettings) -> Detection:
    raise Undetermined("xml field detection not yet implemented")


def _detect(structure: Structure, data: Source, settings: IoSettings | None) -> Detection:
    if structure.format is DataFormat.UNKNOWN:
        raise Undetermined("dataset format must be specified to determine fields")
    detector = _DETECTORS.get(structure.format)
    if detector is None:
        raise Undetermined(f"{structure.format.value!r} is not supported for field detection")
    return detector(structure, data, settings or IoSettings())


def detect_fields(
    structure: Structure, data: Source, settings: IoSettings | None = None
) -> list[Field]:
    """
    Infer the ordered Field list of ``data`` interpreted per ``structure.format``.

    Args:
        structure (Structure): Partially specified structure; format must be set.
        data (BinaryIO | bytes): Raw sample data.
        settings (IoSettings | None): Sample cap and fallback encoding.

    Returns:
        list[Field]: Inferred fields in column order.

    Raises:
        Undetermined: If the format is unknown or has no detector.
        ReadError: If the header cannot be read, or a later record is malformed
            (with the partial fields in ``ReadError.fields``).
    """
    return _detect(structure, data, settings).fields


def csv_fields(
    structure: Structure, data: Source, settings: IoSettings | None = None
) -> list[Field]:
    """Infer fields of CSV ``data`` regardless of ``structure.format``."""
    return _detect_csv(structure, data, settings or IoSettings()).fields


def json_fields(
    structure: Structure, data: Source, settings: IoSettings | None = None
) -> list[Field]:
    """JSON field detection (extension point; raises Undetermined)."""
    return _detect_json(structure, data, settings or IoSettings()).fields


def xml_fields(
    structure: Structure, data: Source, settings: IoSettings | None = None
) -> list[Field]:
    """XML field detection (extension point; raises Undetermined)."""
    return _detect_xml(structure, data, settings or IoSettings()).fields


def detect_structure(
    structure: Structure, data: Source, settings: IoSettings | None = None
) -> Structure:
    """
    Return a copy of ``structure`` with its inferred Schema.

    A detected CSV header also sets ``format_config`` to CsvConfig(header_row=True);
    otherwise the existing config is kept.

    Raises:
        Undetermined: If the format is unknown or has no detector.
        ReadError: As for detect_fields.
    """
    detection = _detect(structure, data, settings)
    changes: dict[str, object] = {"schema_": Schema(fields=tuple(detection.fields))}
    if detection.format_config is not None:
        changes["format_config"] = detection.format_config
    return structure.replace(**changes)
