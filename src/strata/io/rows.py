"""
Row-oriented readers and writers dispatched on a Structure's format.

Overview
- open_reader(structure, source) returns a RowReader: a lazy, finite, forward-only
  iterator of rows. Each row is a list of raw cell bytes positionally aligned to
  structure.schema_.fields. Exhaustion is ordinary StopIteration.
- open_writer(structure, sink) returns a RowWriter accepting rows of the same shape.
  Writers are context managers; close() flushes buffered output and releases the
  sink on every exit path.
- Readers and writers are registered per DataFormat (register_row_stream); CSV is
  built in. Formats without a registration raise Undetermined.

CSV rules
- A header record is consumed (reader) or emitted (writer) when the structure's
  CsvConfig has header_row=True. The writer emits it before the first data row, or
  on close when no rows were written.
- A malformed record, an undecodable byte sequence, or a record whose width differs
  from the schema raises ReadError carrying the 1-based data row number.
- A row whose width differs from the schema raises ValidationError and produces
  no bytes.

Notes
- Each reader/writer owns its source/sink for its lifetime; do not share one stream
  between handles. Nothing here locks.
- Sources may be binary file objects or raw bytes.
"""

from __future__ import annotations

import codecs
import csv
import io
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Iterator, Sequence
from types import TracebackType
from typing import BinaryIO

from strata.core.errors import ValidationError
from strata.core.format_config import CsvConfig
from strata.core.formats import DataFormat
from strata.core.structure import Structure
from strata.core.typing import Row

from .config import IoSettings
from .errors import ReadError, Undetermined, WriteError

__all__ = [
    "RowReader",
    "RowWriter",
    "CsvRowReader",
    "CsvRowWriter",
    "register_row_stream",
    "open_reader",
    "open_writer",
    "header_row",
    "as_stream",
    "each_row",
]

# Buffered writer output is pushed to the sink once it grows past this size.
_FLUSH_THRESHOLD = 64 * 1024

Source = BinaryIO | bytes | bytearray


def header_row(structure: Structure) -> bool:
    """True when ``structure`` is CSV and its config requests a header record."""
    cfg = structure.format_config
    return (
        structure.format is DataFormat.CSV
        and isinstance(cfg, CsvConfig)
        and cfg.header_row
    )


def as_stream(source: Source) -> BinaryIO:
    """Wrap raw bytes in a BytesIO; pass binary streams through."""
    if isinstance(source, (bytes, bytearray)):
        return io.BytesIO(bytes(source))
    return source


class RowReader(ABC):
    """
    Forward-only iterator of rows conforming to a Structure.

    Notes:
        Iterate with ``for row in reader`` or call read_row(), which returns None at
        the end of the source.
    """

    def __init__(self, structure: Structure) -> None:
        self.structure = structure

    def __iter__(self) -> Iterator[Row]:
        return self

    @abstractmethod
    def __next__(self) -> Row: ...

    def read_row(self) -> Row | None:
        """Return the next row, or None once the source is exhausted."""
        return next(self, None)

    def close(self) -> None:
        """Release the source. Further reads end the sequence."""

    def __enter__(self) -> RowReader:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


class RowWriter(ABC):
    """Sink of rows conforming to a Structure; use as a context manager."""

    def __init__(self, structure: Structure) -> None:
        self.structure = structure

    @abstractmethod
    def write_row(self, row: Sequence[bytes | str]) -> None: ...

    @abstractmethod
    def close(self) -> None: ...

    def write_rows(self, rows: Iterable[Sequence[bytes | str]]) -> int:
        """Write every row in ``rows``; return the number written."""
        n = 0
        for row in rows:
            self.write_row(row)
            n += 1
        return n

    def __enter__(self) -> RowWriter:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


class CsvRowReader(RowReader):
    """Schema-aware adapter over the stdlib csv reader."""

    def __init__(
        self, structure: Structure, source: Source, settings: IoSettings | None = None
    ) -> None:
        super().__init__(structure)
        settings = settings or IoSettings()
        self.encoding = structure.encoding or settings.encoding
        self._source: BinaryIO | None = as_stream(source)
        self._records = csv.reader(codecs.iterdecode(self._source, self.encoding), strict=True)
        self._width = len(structure.fields)
        self._skip_header = header_row(structure)
        self._num = 0

    def _next_record(self, row_number: int | None) -> list[str]:
        try:
            return next(self._records)
        except StopIteration:
            self.close()
            raise
        except (csv.Error, UnicodeDecodeError) as exc:
            where = f"row {row_number}" if row_number is not None else "header"
            raise ReadError(f"error reading {where}: {exc}", row_number=row_number) from exc

    def __next__(self) -> Row:
        if self._source is None:
            raise StopIteration
        if self._skip_header:
            self._skip_header = False
            self._next_record(None)
        num = self._num + 1
        rec = self._next_record(num)
        self._num = num
        if self._width and len(rec) != self._width:
            raise ReadError(
                f"row {num}: expected {self._width} fields, got {len(rec)}", row_number=num
            )
        return [cell.encode(self.encoding) for cell in rec]

    @property
    def row_number(self) -> int:
        """Number of data rows produced so far."""
        return self._num

    def close(self) -> None:
        self._source = None


class CsvRowWriter(RowWriter):
    """Schema-aware adapter over the stdlib csv writer."""

    def __init__(
        self, structure: Structure, sink: BinaryIO, settings: IoSettings | None = None
    ) -> None:
        super().__init__(structure)
        settings = settings or IoSettings()
        self.encoding = structure.encoding or settings.encoding
        self._sink: BinaryIO | None = sink
        self._pending = bytearray()
        self._width = len(structure.fields)
        self._header_pending = header_row(structure) and self._width > 0
        self.rows_written = 0

    def _encode(self, cells: Sequence[str]) -> bytes:
        buf = io.StringIO()
        csv.writer(buf, lineterminator="\n").writerow(cells)
        return buf.getvalue().encode(self.encoding)

    def _header(self) -> bytes:
        return self._encode([f.name for f in self.structure.fields])

    def write_row(self, row: Sequence[bytes | str]) -> None:
        """
        Encode and buffer one row.

        Raises:
            ValidationError: If the row width differs from the schema.
            WriteError: If the writer is closed or a cell cannot be encoded.
        """
        if self._sink is None:
            raise WriteError("write to closed row writer")
        if self._width and len(row) != self._width:
            raise ValidationError(
                f"row has {len(row)} fields, schema has {self._width}"
            )
        try:
            cells = [c.decode(self.encoding) if isinstance(c, (bytes, bytearray)) else c for c in row]
            data = self._encode(cells)
            if self._header_pending:
                data = self._header() + data
        except (UnicodeError, csv.Error) as exc:
            raise WriteError(f"cannot encode row {self.rows_written + 1}: {exc}") from exc
        self._header_pending = False
        self._pending += data
        self.rows_written += 1
        if len(self._pending) >= _FLUSH_THRESHOLD:
            self._flush()

    def _flush(self) -> None:
        if self._sink is not None and self._pending:
            self._sink.write(bytes(self._pending))
            self._pending.clear()

    def close(self) -> None:
        """Emit a pending header, flush buffered rows, and release the sink."""
        if self._sink is None:
            return
        try:
            if self._header_pending:
                self._pending[:0] = self._header()
                self._header_pending = False
            self._flush()
            self._sink.flush()
        finally:
            self._sink = None


ReaderFactory = Callable[[Structure, Source, IoSettings | None], RowReader]
WriterFactory = Callable[[Structure, BinaryIO, IoSettings | None], RowWriter]

_READERS: dict[DataFormat, ReaderFactory] = {}
_WRITERS: dict[DataFormat, WriterFactory] = {}


def register_row_stream(fmt: DataFormat, reader: ReaderFactory, writer: WriterFactory) -> None:
    """Register the reader and writer factories for a format."""
    _READERS[fmt] = reader
    _WRITERS[fmt] = writer


register_row_stream(DataFormat.CSV, CsvRowReader, CsvRowWriter)


def open_reader(
    structure: Structure, source: Source, settings: IoSettings | None = None
) -> RowReader:
    """
    Open a row reader for ``structure`` over a binary source.

    Raises:
        Undetermined: If no reader is registered for structure.format.
    """
    factory = _READERS.get(structure.format)
    if factory is None:
        raise Undetermined(
            f"no row reader registered for format {structure.format.value or 'unknown'!r}"
        )
    return factory(structure, source, settings)


def open_writer(
    structure: Structure, sink: BinaryIO, settings: IoSettings | None = None
) -> RowWriter:
    """
    Open a row writer for ``structure`` over a binary sink.

    Raises:
        Undetermined: If no writer is registered for structure.format.
    """
    factory = _WRITERS.get(structure.format)
    if factory is None:
        raise Undetermined(
            f"no row writer registered for format {structure.format.value or 'unknown'!r}"
        )
    return factory(structure, sink, settings)


def each_row(
    structure: Structure,
    data: Source,
    fn: Callable[[int, Row], bool | None],
    settings: IoSettings | None = None,
) -> int:
    """
    Call ``fn(row_number, row)`` for every row of ``data``.

    Args:
        structure (Structure): How to interpret ``data``.
        data (BinaryIO | bytes): Raw data.
        fn: Callback; returning False stops the iteration early.
        settings (IoSettings | None): Optional IO settings.

    Returns:
        int: Number of rows passed to ``fn``.

    Raises:
        ReadError: If a record is malformed.
        Undetermined: If the format has no registered reader.
    """
    n = 0
    with open_reader(structure, data, settings) as reader:
        for row in reader:
            n += 1
            if fn(n, row) is False:
                break
    return n
