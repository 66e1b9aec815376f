"""
Polars/Arrow views of row streams.

Overview
- polars_schema()/arrow_schema() map a Structure's fields onto Polars and Arrow dtypes.
- read_frame() drains a RowReader into a Polars DataFrame with typed columns.
- write_frame() writes a DataFrame's rows through a RowWriter.

Dtype mapping (strata.core.datatypes.DataType -> Polars / Arrow)
- integer -> Int64 / int64
- float   -> Float64 / float64
- boolean -> Boolean / bool_
- date    -> Date / date32
- any, string, object, array -> String / string

Casting
- Cells equal to the field's missing_value, and empty cells, become null.
- Scalar columns are cast non-strictly: a cell that does not parse becomes null
  rather than failing the read.

Notes
- Both directions require a Structure with a schema (ValidationError otherwise).
- Depends on stdlib, polars/pyarrow, and strata.core/strata.io.rows.
"""

from __future__ import annotations

from typing import Any, BinaryIO

import polars as pl
import pyarrow as pa

from strata.core.datatypes import DataType
from strata.core.errors import ValidationError
from strata.core.structure import Field, Structure

from .config import IoSettings
from .rows import Source, open_reader, open_writer

__all__ = [
    "polars_schema",
    "arrow_schema",
    "read_frame",
    "write_frame",
]

# Note: Polars dtypes are singleton-like objects; keep the mapping loosely typed.
_POLARS_DTYPES: dict[DataType, Any] = {
    DataType.INTEGER: pl.Int64,
    DataType.FLOAT: pl.Float64,
    DataType.BOOLEAN: pl.Boolean,
    DataType.DATE: pl.Date,
}

_ARROW_DTYPES: dict[DataType, pa.DataType] = {
    DataType.INTEGER: pa.int64(),
    DataType.FLOAT: pa.float64(),
    DataType.BOOLEAN: pa.bool_(),
    DataType.DATE: pa.date32(),
}


def _require_fields(structure: Structure) -> tuple[Field, ...]:
    if not structure.fields:
        raise ValidationError("structure has no schema fields to map onto frame columns")
    return structure.fields


def polars_schema(structure: Structure) -> dict[str, Any]:
    """
    Map the structure's fields onto an ordered Polars schema.

    Returns:
        dict[str, polars.DataType]: Column name -> dtype, in field order.
    """
    return {f.name: _POLARS_DTYPES.get(f.type, pl.String) for f in _require_fields(structure)}


def arrow_schema(structure: Structure) -> pa.Schema:
    """
    Map the structure's fields onto a nullable Arrow schema.

    Field titles and descriptions, when present, are kept as Arrow field metadata.
    """
    out = []
    for f in _require_fields(structure):
        meta = {k: v for k, v in (("title", f.title), ("description", f.description)) if v}
        out.append(
            pa.field(f.name, _ARROW_DTYPES.get(f.type, pa.string()), nullable=True, metadata=meta or None)
        )
    return pa.schema(out)


def _cast_expr(f: Field) -> pl.Expr:
    col = pl.col(f.name)
    if f.type is DataType.INTEGER:
        return col.cast(pl.Int64, strict=False)
    if f.type is DataType.FLOAT:
        return col.cast(pl.Float64, strict=False)
    if f.type is DataType.BOOLEAN:
        lowered = col.str.strip_chars().str.to_lowercase()
        return (
            pl.when(lowered == "true")
            .then(pl.lit(True))
            .when(lowered == "false")
            .then(pl.lit(False))
            .otherwise(pl.lit(None, dtype=pl.Boolean))
            .alias(f.name)
        )
    if f.type is DataType.DATE:
        return col.str.strip_chars().str.to_date("%Y-%m-%d", strict=False)
    return col


def read_frame(
    structure: Structure, source: Source, settings: IoSettings | None = None
) -> pl.DataFrame:
    """
    Read every row of ``source`` into a typed Polars DataFrame.

    Args:
        structure (Structure): Structure with a schema; columns follow its fields.
        source (BinaryIO | bytes): Raw data.
        settings (IoSettings | None): Optional IO settings.

    Returns:
        pl.DataFrame: One column per field, typed per the dtype mapping.

    Raises:
        ValidationError: If the structure has no schema fields.
        ReadError: If a record is malformed.
        Undetermined: If the format has no registered reader.
    """
    fields = _require_fields(structure)
    columns: list[list[str | None]] = [[] for _ in fields]
    with open_reader(structure, source, settings) as reader:
        encoding = getattr(reader, "encoding", structure.encoding)
        for row in reader:
            for i, (f, cell) in enumerate(zip(fields, row)):
                text = cell.decode(encoding)
                missing = text == "" or (f.missing_value is not None and text == str(f.missing_value))
                columns[i].append(None if missing else text)
    df = pl.DataFrame(
        {f.name: pl.Series(f.name, col, dtype=pl.String) for f, col in zip(fields, columns)}
    )
    return df.with_columns([_cast_expr(f) for f in fields])


def _render(value: Any, f: Field) -> str:
    if value is None:
        return "" if f.missing_value is None else str(f.missing_value)
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def write_frame(
    structure: Structure,
    df: pl.DataFrame,
    sink: BinaryIO,
    settings: IoSettings | None = None,
) -> int:
    """
    Write a DataFrame's rows through a RowWriter for ``structure``.

    Columns are selected by field name, in field order. Nulls render as the field's
    missing_value (or empty); booleans as "true"/"false"; dates in ISO format.

    Returns:
        int: Number of rows written.

    Raises:
        ValidationError: If the structure has no schema fields or the frame lacks a
            field's column.
        WriteError: If a row cannot be encoded.
    """
    fields = _require_fields(structure)
    missing = [f.name for f in fields if f.name not in df.columns]
    if missing:
        raise ValidationError(f"frame is missing columns for fields: {missing!r}")
    selected = df.select([f.name for f in fields])
    with open_writer(structure, sink, settings) as writer:
        return writer.write_rows(
            [_render(v, f) for v, f in zip(row, fields)] for row in selected.iter_rows()
        )
