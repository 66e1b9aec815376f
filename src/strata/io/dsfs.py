"""
Content-addressed persistence of datasets.

Layout
- A Dataset is saved as up to three independent blobs:
  - the Structure node: Structure.encode() (canonical JSON, schema inlined),
  - the raw data node: the data bytes, stored as-is,
  - the Dataset node: the Dataset's canonical JSON with ``structure`` replaced by the
    Structure node's key and ``data`` set to the raw data node's key.
- Child blobs are put before the parent, so a Dataset node never references a key the
  store does not hold (for stores that are not garbage collected concurrently).

Deduplication
- Byte-identical structures saved from different datasets resolve to the same key.
  This is a property of the canonical encoding; nothing here compares structures.

Failure modes
- NotFound when a node or a referenced child key is absent from the store.
- DecodeError when stored bytes cannot be decoded back into the data model.
- Store I/O failures (OSError) propagate unchanged.
"""

from __future__ import annotations

import io
from typing import Any

from strata.core.formats import DataFormat
from strata.core.logging_config import get_logger
from strata.core.serde import decode_dataset, decode_structure, json_dumps_canonical, json_loads
from strata.core.structure import Dataset, Structure
from strata.core.typing import ContentKey, Row

from .config import IoSettings
from .errors import NotFound, Undetermined
from .rows import each_row, open_reader, open_writer
from .store import ContentStore

__all__ = [
    "save_structure",
    "load_structure",
    "save_dataset",
    "load_dataset",
    "load_data",
    "all_rows",
    "raw_data_rows",
]

_LOGGER = get_logger(__name__)


def save_structure(store: ContentStore, structure: Structure) -> ContentKey:
    """Store a Structure's canonical encoding; return its key."""
    return store.put(structure.encode())


def load_structure(store: ContentStore, key: ContentKey) -> Structure:
    """
    Load and decode a Structure node.

    Raises:
        NotFound: If ``key`` is absent.
        DecodeError: If the blob is not a canonical Structure.
    """
    return decode_structure(store.get(key))


def save_dataset(store: ContentStore, dataset: Dataset, data: bytes | None = None) -> ContentKey:
    """
    Persist ``dataset`` and return the key of its Dataset node.

    Args:
        store (ContentStore): Destination store.
        dataset (Dataset): Dataset to save; not modified.
        data (bytes | None): Raw data to store alongside. When None, the dataset's
            existing ``data`` key (if any) is referenced as-is.

    Returns:
        ContentKey: Key of the Dataset node.

    Examples:
        >>> from strata.io.store import MapStore
        >>> from strata.core.formats import DataFormat
        >>> store = MapStore()
        >>> st = Structure(format=DataFormat.CSV)
        >>> k1 = save_dataset(store, Dataset(title="a", structure=st), b"1,2\\n")
        >>> k2 = save_dataset(store, Dataset(title="b", structure=st), b"1,2\\n")
        >>> k1 != k2 and len(store) == 4
        True
    """
    node: dict[str, Any] = dataset.to_canonical()
    structure_key = None
    if dataset.structure is not None:
        structure_key = save_structure(store, dataset.structure)
        node["structure"] = structure_key
    if data is not None:
        node["data"] = store.put(data)
    key = store.put(json_dumps_canonical(node).encode("utf-8"))
    _LOGGER.info("dataset_saved", key=key, structure=structure_key, data=node.get("data"))
    return key


def load_dataset(store: ContentStore, key: ContentKey) -> Dataset:
    """
    Load a Dataset node and resolve its Structure node.

    The raw data is not loaded; ``Dataset.data`` holds its key (see load_data).

    Raises:
        NotFound: If the node or a referenced child key (structure or data) is absent.
        DecodeError: If either blob cannot be decoded.
    """
    node = json_loads(store.get(key))
    if isinstance(node, dict) and isinstance(node.get("structure"), str):
        node = {**node, "structure": load_structure(store, ContentKey(node["structure"]))}
    ds = decode_dataset(node)
    if ds.data is not None and not store.has(ds.data):
        raise NotFound(ds.data)
    _LOGGER.info("dataset_loaded", key=key)
    return ds


def load_data(store: ContentStore, dataset: Dataset) -> bytes:
    """
    Fetch the raw data blob referenced by ``dataset.data``.

    Raises:
        Undetermined: If the dataset carries no data key.
        NotFound: If the key is absent from the store.
    """
    if dataset.data is None:
        raise Undetermined("dataset has no data key")
    return store.get(dataset.data)


def _structure_of(dataset: Dataset) -> Structure:
    if dataset.structure is None:
        raise Undetermined("dataset has no structure to interpret its data")
    return dataset.structure


def all_rows(
    store: ContentStore, dataset: Dataset, settings: IoSettings | None = None
) -> list[Row]:
    """Load the dataset's raw data and return every row."""
    structure = _structure_of(dataset)
    with open_reader(structure, load_data(store, dataset), settings) as reader:
        return list(reader)


def raw_data_rows(
    store: ContentStore,
    dataset: Dataset,
    limit: int,
    offset: int = 0,
    settings: IoSettings | None = None,
) -> bytes:
    """
    Return CSV bytes of the data rows numbered ``offset < n <= offset + limit``.

    A negative ``limit`` means no upper bound. The header record, if the structure has
    one, is not included.

    Raises:
        Undetermined: If the dataset's format is not CSV.
        NotFound: If the data key is absent.
        ReadError: If a record in range (or before it) is malformed.
    """
    structure = _structure_of(dataset)
    if structure.format is not DataFormat.CSV:
        raise Undetermined("raw data rows only supports the csv data format")
    # Output carries no header: the selection is a slice of the body.
    out_structure = structure.replace(format_config=None)
    buf = io.BytesIO()
    with open_writer(out_structure, buf, settings) as writer:

        def _collect(n: int, row: Row) -> bool:
            if n <= offset:
                return True
            if limit >= 0 and n > offset + limit:
                return False
            writer.write_row(row)
            return True

        each_row(structure, load_data(store, dataset), _collect, settings)
    return buf.getvalue()
