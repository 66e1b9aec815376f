"""Tests for content stores and dataset persistence."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from strata.core.datatypes import DataType
from strata.core.errors import DecodeError
from strata.core.format_config import CsvConfig
from strata.core.formats import DataFormat
from strata.core.serde import json_loads
from strata.core.structure import Dataset, Field, Schema, Structure
from strata.io.config import IoSettings
from strata.io.detect import detect_structure
from strata.io.dsfs import (
    all_rows,
    load_data,
    load_dataset,
    load_structure,
    raw_data_rows,
    save_dataset,
    save_structure,
)
from strata.io.errors import NotFound, Undetermined
from strata.io.rows import open_reader
from strata.io.store import ContentStore, FileStore, MapStore

CITIES = b"city,pop\ntoronto,2800000\nnyc,8500000\nchicago,2700000\n"


def _structure() -> Structure:
    return Structure(
        format=DataFormat.CSV,
        format_config=CsvConfig(header_row=True),
        schema_=Schema(
            fields=(
                Field(name="city", type=DataType.STRING),
                Field(name="pop", type=DataType.INTEGER),
            )
        ),
    )


@pytest.fixture
def file_store(tmp_path: Path) -> FileStore:
    return FileStore(IoSettings(store_root=str(tmp_path / "store"), fsync=False))


def test_map_store_is_content_addressed() -> None:
    store = MapStore()
    k1 = store.put(b"hello")
    k2 = store.put(b"hello")
    assert k1 == k2
    assert k1.startswith("/map/") and len(k1) == len("/map/") + 64
    assert len(store) == 1
    assert store.get(k1) == b"hello"
    assert store.has(k1)
    assert isinstance(store, ContentStore)


def test_map_store_missing_key() -> None:
    store = MapStore()
    with pytest.raises(NotFound) as excinfo:
        store.get("/map/" + "0" * 64)
    assert excinfo.value.key == "/map/" + "0" * 64
    assert isinstance(excinfo.value, LookupError)


def test_file_store_layout_and_idempotence(file_store: FileStore) -> None:
    key = file_store.put(b"payload")
    digest = key[len("/file/") :]
    path = os.path.join(file_store.root, digest[:2], digest[2:])
    assert os.path.isfile(path)
    assert file_store.put(b"payload") == key
    assert file_store.get(key) == b"payload"
    assert file_store.has(key)
    # no stray temporary files
    assert os.listdir(os.path.dirname(path)) == [digest[2:]]


@pytest.mark.parametrize("key", ["/file/" + "a" * 64, "/file/../../etc/passwd", "/map/abc"])
def test_file_store_missing_or_malformed_keys(file_store: FileStore, key: str) -> None:
    assert not file_store.has(key)
    with pytest.raises(NotFound):
        file_store.get(key)


def test_structure_node_roundtrip() -> None:
    store = MapStore()
    st = _structure()
    key = save_structure(store, st)
    assert store.get(key) == st.encode()
    assert load_structure(store, key) == st


def test_save_and_load_dataset() -> None:
    store = MapStore()
    ds = Dataset(title="cities", license="CC0-1.0", structure=_structure())
    key = save_dataset(store, ds, CITIES)

    assert len(store) == 3
    loaded = load_dataset(store, key)
    assert loaded.title == "cities"
    assert loaded.structure == ds.structure
    assert loaded.data is not None
    assert load_data(store, loaded) == CITIES
    # the in-memory value is not modified by saving
    assert ds.data is None


def test_dataset_node_references_children_by_key() -> None:
    store = MapStore()
    key = save_dataset(store, Dataset(title="cities", structure=_structure()), CITIES)
    node = json_loads(store.get(key))
    assert node["structure"] == save_structure(store, _structure())
    assert node["data"] == store.put(CITIES)
    assert node["title"] == "cities"


def test_identical_structures_share_a_node() -> None:
    store = MapStore()
    k1 = save_dataset(store, Dataset(title="a", structure=_structure()), CITIES)
    k2 = save_dataset(store, Dataset(title="b", structure=_structure()), b"city,pop\nx,1\n")
    assert k1 != k2
    n1 = json_loads(store.get(k1))
    n2 = json_loads(store.get(k2))
    assert n1["structure"] == n2["structure"]
    assert n1["data"] != n2["data"]
    # one structure node, two data nodes, two dataset nodes
    assert len(store) == 5


def test_save_is_deterministic() -> None:
    ds = Dataset(title="cities", keywords=("a", "b"), structure=_structure())
    assert save_dataset(MapStore(), ds, CITIES) == save_dataset(MapStore(), ds, CITIES)


def test_save_without_data_keeps_existing_locator() -> None:
    store = MapStore()
    data_key = store.put(CITIES)
    key = save_dataset(store, Dataset(structure=_structure(), data=data_key))
    assert load_dataset(store, key).data == data_key


def test_load_missing_dataset() -> None:
    with pytest.raises(NotFound):
        load_dataset(MapStore(), "/map/" + "f" * 64)


def test_load_missing_structure_child() -> None:
    store = MapStore()
    key = store.put(b'{"structure":"/map/' + b"e" * 64 + b'","title":"orphan"}')
    with pytest.raises(NotFound):
        load_dataset(store, key)


def test_load_missing_data_child() -> None:
    store = MapStore()
    missing = "/map/" + "e" * 64
    key = save_dataset(store, Dataset(structure=_structure(), data=missing))
    with pytest.raises(NotFound) as excinfo:
        load_dataset(store, key)
    assert excinfo.value.key == missing


def test_detect_read_save_load_end_to_end() -> None:
    data = b"col_a,col_b,col_c,col_d\n" + b"a,b,c,d\n" * 5
    st = detect_structure(Structure(format=DataFormat.CSV), data)
    assert st.schema_ is not None
    assert st.schema_.field_names() == ["colA", "colB", "colC", "colD"]

    with open_reader(st, data) as reader:
        rows = list(reader)
    assert len(rows) == 5
    assert all(len(r) == 4 for r in rows)

    store = MapStore()
    ds = Dataset(title="letters", structure=st)
    loaded = load_dataset(store, save_dataset(store, ds, data))
    assert loaded.structure == ds.structure
    assert loaded.structure.schema_ == ds.structure.schema_
    assert all_rows(store, loaded) == rows


def test_load_undecodable_nodes() -> None:
    store = MapStore()
    with pytest.raises(DecodeError):
        load_dataset(store, store.put(b"not json"))
    bad_structure = store.put(b'{"format":"parquet"}')
    node = b'{"structure":"' + bad_structure.encode() + b'"}'
    with pytest.raises(DecodeError):
        load_dataset(store, store.put(node))


def test_file_store_persistence_roundtrip(file_store: FileStore) -> None:
    key = save_dataset(file_store, Dataset(title="cities", structure=_structure()), CITIES)
    assert key.startswith("/file/")
    reopened = FileStore(file_store.settings)
    loaded = load_dataset(reopened, key)
    assert all_rows(reopened, loaded)[-1] == [b"chicago", b"2700000"]


def test_all_rows() -> None:
    store = MapStore()
    ds = load_dataset(store, save_dataset(store, Dataset(structure=_structure()), CITIES))
    assert all_rows(store, ds) == [
        [b"toronto", b"2800000"],
        [b"nyc", b"8500000"],
        [b"chicago", b"2700000"],
    ]


@pytest.mark.parametrize(
    "limit,offset,expected",
    [
        (1, 0, b"toronto,2800000\n"),
        (1, 1, b"nyc,8500000\n"),
        (5, 1, b"nyc,8500000\nchicago,2700000\n"),
        (-1, 2, b"chicago,2700000\n"),
        (0, 0, b""),
        (2, 10, b""),
    ],
)
def test_raw_data_rows_window(limit: int, offset: int, expected: bytes) -> None:
    store = MapStore()
    ds = load_dataset(store, save_dataset(store, Dataset(structure=_structure()), CITIES))
    assert raw_data_rows(store, ds, limit, offset) == expected


def test_raw_data_rows_requires_csv() -> None:
    store = MapStore()
    ds = Dataset(structure=Structure(format=DataFormat.JSON), data=store.put(b"[]"))
    with pytest.raises(Undetermined, match="csv"):
        raw_data_rows(store, ds, 10, 0)


def test_rows_need_structure_and_data() -> None:
    store = MapStore()
    with pytest.raises(Undetermined):
        all_rows(store, Dataset(data=store.put(CITIES)))
    with pytest.raises(Undetermined):
        load_data(store, Dataset(structure=_structure()))
