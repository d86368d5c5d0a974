from __future__ import annotations

import math

import pytest

from basketledger.errors import InvalidRecord
from basketledger.store import address_of, canonical_json, decode_value, encode_value, is_address


def test_address_is_deterministic_and_key_order_independent() -> None:
    a = address_of("product", {"name": "A", "price": 10.5, "description": "x"})
    b = address_of("product", {"description": "x", "price": 10.5, "name": "A"})
    assert a == b
    assert is_address(a)


def test_integral_floats_address_like_ints() -> None:
    assert address_of("product", {"price": 5.0}) == address_of("product", {"price": 5})
    assert address_of("product", {"price": 5.5}) != address_of("product", {"price": 5})


def test_type_tag_is_part_of_the_address() -> None:
    payload = {"name": "cart", "sum": 0}
    assert address_of("basket", payload) != address_of("product", payload)


def test_bool_is_not_confused_with_int() -> None:
    assert address_of("t", {"v": True}) != address_of("t", {"v": 1})


def test_bytes_payload_addresses() -> None:
    assert address_of("blob", b"abc") == address_of("blob", bytearray(b"abc"))
    assert address_of("blob", b"abc") != address_of("blob", "abc")


def test_canonical_json_is_compact_and_sorted() -> None:
    assert canonical_json("t", {"b": 1, "a": [1.0, 2.5]}) == '{"payload":{"a":[1,2.5],"b":1},"type_tag":"t"}'


def test_non_finite_numbers_are_rejected() -> None:
    with pytest.raises(InvalidRecord):
        address_of("product", {"price": math.nan})


def test_non_string_keys_are_rejected() -> None:
    with pytest.raises(InvalidRecord):
        address_of("product", {1: "x"})


@pytest.mark.parametrize("value", ["", "xyz", "a" * 63, "g" * 64, None, 42])
def test_is_address_rejects_malformed_values(value: object) -> None:
    assert not is_address(value)


def test_bytes_do_not_collide_with_marker_lookalike_dicts() -> None:
    lookalike = {"_type": "binary", "_encoding": "base64", "data": "aGk="}
    assert address_of("x", b"hi") != address_of("x", lookalike)
    assert address_of("x", {"v": b"hi"}) != address_of("x", {"v": lookalike})


def test_dicts_using_the_marker_key_are_escaped() -> None:
    assert canonical_json("t", {"_type": "x"}) == '{"payload":{"_type":"mapping","data":{"_type":"x"}},"type_tag":"t"}'


def test_encode_decode_restores_nested_bytes() -> None:
    value = {"a": [b"\x00", {"_type": "binary"}], "b": 1.5}
    assert decode_value(encode_value(value)) == value


@pytest.mark.parametrize(
    "data",
    [
        {"_type": "binary", "_encoding": "base64", "data": "not base64!"},
        {"_type": "binary"},
        {"_type": "mapping", "data": [1]},
        {"_type": "unknown"},
    ],
)
def test_decode_rejects_malformed_markers(data: dict) -> None:
    with pytest.raises(ValueError):
        decode_value(data)
