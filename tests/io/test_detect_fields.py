"""Tests for schema inference over CSV samples."""

import pytest

from strata.core.datatypes import DataType
from strata.core.format_config import CsvConfig
from strata.core.formats import DataFormat
from strata.core.structure import Structure
from strata.io.config import IoSettings
from strata.io.detect import (
    csv_fields,
    detect_fields,
    detect_structure,
    json_fields,
    possible_header_row,
    xml_fields,
)
from strata.io.errors import ReadError, Undetermined

CSV = Structure(format=DataFormat.CSV)


def _types(fields) -> list[DataType]:
    return [f.type for f in fields]


@pytest.mark.parametrize(
    "cells,expected",
    [
        (["1", "b", "c"], False),
        (["true", "b"], False),
        (["", "b"], False),
        (["Name", "Age"], True),
        ([" 2.5 ", "x"], False),
        (["  false", "x"], False),
        (["TRUE", "x"], True),
        (["id", "2024-01-01"], True),
    ],
)
def test_possible_header_row(cells: list[str], expected: bool) -> None:
    assert possible_header_row(cells) is expected


def test_header_row_names_and_types() -> None:
    data = b"City Name,Population,Area\ntoronto,2800000,630.2\nnyc,8500000,783.8\n"
    fields = detect_fields(CSV, data)
    assert [f.name for f in fields] == ["cityName", "population", "area"]
    assert _types(fields) == [DataType.STRING, DataType.INTEGER, DataType.FLOAT]


def test_headerless_data_uses_positional_names_and_counts_first_record() -> None:
    data = b"1,foo,true\n2,bar,false\n"
    fields = detect_fields(CSV, data)
    assert [f.name for f in fields] == ["field_1", "field_2", "field_3"]
    assert _types(fields) == [DataType.INTEGER, DataType.STRING, DataType.BOOLEAN]


def test_majority_type_wins() -> None:
    rows = ["8"] * 8 + ["n/a", "unknown"]
    data = ("id,label\n" + "".join(f"{v},x\n" for v in rows)).encode()
    fields = detect_fields(CSV, data)
    assert fields[0].type is DataType.INTEGER


def test_ties_prefer_the_more_general_type() -> None:
    fields = detect_fields(CSV, b"a,b\n1,2\nx,2.5\n")
    assert _types(fields) == [DataType.STRING, DataType.FLOAT]


def test_empty_column_stays_any() -> None:
    fields = detect_fields(CSV, b"a,b\n,1\n,2\n")
    assert _types(fields) == [DataType.ANY, DataType.INTEGER]


def test_header_only_input_yields_any_fields() -> None:
    fields = detect_fields(CSV, b"a,b\n")
    assert [f.name for f in fields] == ["a", "b"]
    assert _types(fields) == [DataType.ANY, DataType.ANY]


def test_sample_cap_bounds_the_scan() -> None:
    # 2000 integer rows then 3000 text rows: only the first 2000 are sampled.
    data = ("n\n" + "1\n" * 2000 + "x\n" * 3000).encode()
    fields = detect_fields(CSV, data)
    assert len(fields) == 1
    assert fields[0].type is DataType.INTEGER


def test_records_past_the_cap_are_never_read() -> None:
    # The malformed record sits after the cap, so it never aborts inference.
    data = b'n\n1\n2\n3\n4,"x"y\n'
    fields = detect_fields(CSV, data, IoSettings(sample_cap=3))
    assert fields[0].type is DataType.INTEGER
    with pytest.raises(ReadError):
        detect_fields(CSV, data, IoSettings(sample_cap=4))


def test_malformed_record_aborts_with_partial_fields() -> None:
    data = b'a,b\n1,2\n3,4\n5,"x"y\n6,7\n'
    with pytest.raises(ReadError) as excinfo:
        detect_fields(CSV, data)
    err = excinfo.value
    assert err.row_number == 3
    assert err.fields is not None
    assert [f.name for f in err.fields] == ["a", "b"]
    assert _types(err.fields) == [DataType.INTEGER, DataType.INTEGER]


def test_empty_input_fails_reading_the_header() -> None:
    with pytest.raises(ReadError, match="header") as excinfo:
        detect_fields(CSV, b"")
    assert excinfo.value.row_number is None


def test_wider_records_ignore_extra_cells() -> None:
    fields = detect_fields(CSV, b"a,b\n1,2,3,4\n5\n")
    assert [f.name for f in fields] == ["a", "b"]
    assert _types(fields) == [DataType.INTEGER, DataType.INTEGER]


def test_blank_header_cell_falls_back_to_positional_name() -> None:
    fields = detect_fields(CSV, b"name,#\nx,y\n")
    assert [f.name for f in fields] == ["name", "field_2"]


def test_structure_encoding_is_honored() -> None:
    st = Structure(format=DataFormat.CSV, encoding="latin-1")
    fields = detect_fields(st, "Café,Prix\nx,1\n".encode("latin-1"))
    assert [f.name for f in fields] == ["caf", "prix"]


def test_undecodable_header_raises_read_error() -> None:
    with pytest.raises(ReadError):
        detect_fields(CSV, b"\xff\xfe\xfa,b\n1,2\n")


def test_detect_structure_returns_new_structure() -> None:
    data = b"name,age\nada,36\n"
    st = detect_structure(CSV, data)
    assert st.format_config == CsvConfig(header_row=True)
    assert st.schema_ is not None
    assert st.schema_.field_names() == ["name", "age"]
    # input untouched
    assert CSV.schema_ is None and CSV.format_config is None


def test_detect_structure_without_header_keeps_config() -> None:
    st = detect_structure(CSV, b"1,2\n3,4\n")
    assert st.format_config is None
    assert [f.type for f in st.fields] == [DataType.INTEGER, DataType.INTEGER]


def test_csv_fields_ignores_structure_format() -> None:
    fields = csv_fields(Structure(), b"a\n1\n")
    assert fields[0].type is DataType.INTEGER


@pytest.mark.parametrize("fmt", [DataFormat.UNKNOWN, DataFormat.JSON, DataFormat.XML, DataFormat.XLS])
def test_unsupported_formats_are_undetermined(fmt: DataFormat) -> None:
    with pytest.raises(Undetermined):
        detect_fields(Structure(format=fmt), b"[]")


def test_json_and_xml_extension_points() -> None:
    with pytest.raises(Undetermined, match="json"):
        json_fields(Structure(format=DataFormat.JSON), b"[]")
    with pytest.raises(Undetermined, match="xml"):
        xml_fields(Structure(format=DataFormat.XML), b"<rows/>")


@pytest.mark.parametrize(
    "data,expected",
    [
        (b"a,b\n1,x\n,y\n", DataType.INTEGER),
        (b"a,b\n1,x\n,y\n ,z\n", DataType.ANY),
    ],
)
def test_empty_cells_tally_as_any(data: bytes, expected: DataType) -> None:
    assert csv_fields(CSV, data)[0].type is expected
