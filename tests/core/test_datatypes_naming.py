import pytest

from strata.core.datatypes import TYPE_PREFERENCE, DataType, parse_boolean, parse_datatype
from strata.core.naming import abstract_name, camelize, is_variable_name, positional_name


@pytest.mark.parametrize(
    "cell,expected",
    [
        ("42", DataType.INTEGER),
        ("-7", DataType.INTEGER),
        (b"+3", DataType.INTEGER),
        ("4.2", DataType.FLOAT),
        (".5", DataType.FLOAT),
        ("1e5", DataType.FLOAT),
        ("TRUE", DataType.BOOLEAN),
        ("false", DataType.BOOLEAN),
        ("2024-01-31", DataType.DATE),
        ("2024-13-01", DataType.STRING),
        ('{"a": 1}', DataType.OBJECT),
        ("[1, 2]", DataType.ARRAY),
        ("{not json", DataType.STRING),
        ("hello", DataType.STRING),
        ("", DataType.ANY),
        ("   ", DataType.ANY),
    ],
)
def test_parse_datatype_cascade(cell, expected: DataType) -> None:
    assert parse_datatype(cell) is expected


def test_parse_boolean_rejects_other_words() -> None:
    with pytest.raises(ValueError):
        parse_boolean("yes")


def test_type_preference_covers_every_datatype_once() -> None:
    assert sorted(t.value for t in TYPE_PREFERENCE) == sorted(t.value for t in DataType)
    # general before specific
    assert TYPE_PREFERENCE.index(DataType.STRING) < TYPE_PREFERENCE.index(DataType.INTEGER)
    assert TYPE_PREFERENCE.index(DataType.FLOAT) < TYPE_PREFERENCE.index(DataType.INTEGER)
    assert TYPE_PREFERENCE[-1] is DataType.ANY


@pytest.mark.parametrize(
    "raw,name",
    [
        ("Name", "name"),
        ("First Name", "firstName"),
        ("ZIP code", "zipCode"),
        ("  total_amount  ", "totalAmount"),
        ("2nd place", "_2ndPlace"),
        ("!!!", ""),
    ],
)
def test_camelize(raw: str, name: str) -> None:
    assert camelize(raw) == name


def test_synthetic_names() -> None:
    assert [positional_name(i) for i in range(3)] == ["field_1", "field_2", "field_3"]
    assert [abstract_name(i) for i in range(2)] == ["col_0", "col_1"]


@pytest.mark.parametrize("name", ["a", "_x", "col-1", "A_b-9"])
def test_valid_variable_names(name: str) -> None:
    assert is_variable_name(name)


@pytest.mark.parametrize("name", ["", "1a", "a b", "-a", "a.b"])
def test_invalid_variable_names(name: str) -> None:
    assert not is_variable_name(name)
