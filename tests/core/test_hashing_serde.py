import pytest

from strata.core.errors import DecodeError
from strata.core.hashing import json_dumps_canonical, sha256_hexdigest
from strata.core.serde import decode_dataset, decode_structure, hash_entity, json_loads
from strata.core.serde import json_dumps_canonical as serde_dumps
from strata.core.structure import Structure


def test_json_dumps_canonical_sorted_and_ascii_policy() -> None:
    obj1 = {"b": 2, "a": 1, "nested": {"y": 2, "x": 1}, "emoji": "🙂"}
    obj2 = {"nested": {"x": 1, "y": 2}, "a": 1, "emoji": "🙂", "b": 2}
    s1 = json_dumps_canonical(obj1)
    s2 = json_dumps_canonical(obj2)
    assert s1 == s2  # order-insensitive; keys sorted canonically
    # ensure_ascii=False keeps unicode as-is (no escape sequences)
    assert "🙂" in s1
    # no insignificant whitespace
    assert " " not in s1


def test_sha256_hexdigest_accepts_str_and_bytes() -> None:
    assert sha256_hexdigest("abc") == sha256_hexdigest(b"abc")
    assert len(sha256_hexdigest(b"")) == 64


def test_hash_entity_is_digest_of_encoding() -> None:
    st = Structure(encoding="latin-1")
    assert hash_entity(st) == sha256_hexdigest(st.encode())


def test_serde_roundtrip_and_reexport() -> None:
    obj = {"k": [1, 2, 3], "m": {"n": 4}}
    s = serde_dumps(obj)
    back = json_loads(s)
    assert back == obj


@pytest.mark.parametrize("bad", [b"{", b"not json", b"\xff\xfe"])
def test_json_loads_malformed_raises_decode_error(bad: bytes) -> None:
    with pytest.raises(DecodeError):
        json_loads(bad)


def test_decoders_wrap_model_failures() -> None:
    with pytest.raises(DecodeError):
        decode_structure(b'{"format":"parquet"}')
    with pytest.raises(DecodeError):
        decode_dataset(b'{"version":"one"}')
    # DecodeError is a ValueError like every core parse failure
    with pytest.raises(ValueError):
        decode_structure(b"[]")
