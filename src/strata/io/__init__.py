"""
strata.io — IO layer: schema inference, row streams, frames, and persistence.

## Responsibilities
- Infer a Schema from raw sample data (detect).
- Read and write rows conforming to a Structure, dispatched on its format (rows).
- Materialize rows as typed Polars frames and Arrow schemas (frames).
- Persist datasets into a content-addressed store with structural deduplication
  (store, dsfs).

## Public API
- IoSettings: sample cap, fallback encoding, store root, fsync policy.
- detect_fields, detect_structure, possible_header_row
- open_reader, open_writer, each_row
- read_frame, write_frame
- MapStore, FileStore
- save_dataset, load_dataset, load_data, all_rows, raw_data_rows

## Source of truth and dependencies
- strata.core defines the data model, canonical encoding, and parse/validation errors.
- strata.io raises Io* errors (strata.io.errors) for reader/writer/store failures.

## Import DAG discipline
- Depends only on stdlib, polars/pyarrow, structlog (via strata.core.logging_config),
  and strata.core.*.

## Examples
```python
from strata.core.formats import DataFormat
from strata.core.structure import Dataset, Structure
from strata.io import MapStore, detect_structure, save_dataset, load_dataset, all_rows

raw = b"city,pop\\ntoronto,2800000\\nnyc,8500000\\n"
st = detect_structure(Structure(format=DataFormat.CSV), raw)
store = MapStore()
key = save_dataset(store, Dataset(title="cities", structure=st), raw)
rows = all_rows(store, load_dataset(store, key))  # [[b"toronto", b"2800000"], ...]
```
"""

from __future__ import annotations

from .config import IoSettings
from .detect import detect_fields, detect_structure, possible_header_row
from .dsfs import all_rows, load_data, load_dataset, raw_data_rows, save_dataset
from .frames import read_frame, write_frame
from .rows import each_row, open_reader, open_writer
from .store import FileStore, MapStore

__all__ = [
    "IoSettings",
    "detect_fields",
    "detect_structure",
    "possible_header_row",
    "open_reader",
    "open_writer",
    "each_row",
    "read_frame",
    "write_frame",
    "MapStore",
    "FileStore",
    "save_dataset",
    "load_dataset",
    "load_data",
    "all_rows",
    "raw_data_rows",
]
