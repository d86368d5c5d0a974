from __future__ import annotations

import pytest

from basketledger.errors import DecodeError, NotFound
from basketledger.pos import Basket, Position, Product
from basketledger.store import EntryStore, MemorySubstrate


@pytest.fixture
def entries(substrate: MemorySubstrate) -> EntryStore:
    return EntryStore(substrate)


def test_put_is_idempotent(entries: EntryStore, substrate: MemorySubstrate) -> None:
    first = entries.put("product", {"name": "A", "description": "", "price": 10.0})
    second = entries.put("product", {"price": 10.0, "name": "A", "description": ""})

    assert first == second
    assert substrate.content_addresses() == [first]
    # Both puts are committed; the catalog deduplicates.
    assert [r.address for r in substrate.chain()] == [first, first]


def test_get_returns_entry_with_type_tag(entries: EntryStore) -> None:
    address = entries.put("note", {"text": "hello"})
    entry = entries.get(address)
    assert entry.type_tag == "note"
    assert entry.payload == {"text": "hello"}
    assert entry.address == address


def test_get_missing_raises_not_found(entries: EntryStore) -> None:
    with pytest.raises(NotFound) as exc:
        entries.get("0" * 64)
    assert exc.value.address == "0" * 64


def test_product_round_trip(entries: EntryStore, product_a: Product) -> None:
    address = entries.put_record(product_a)
    assert entries.get_typed(address, Product) == product_a


def test_position_round_trip(entries: EntryStore) -> None:
    position = Position(amount=3, timestamp="2024-01-01T00:00:00+00:00")
    assert entries.get_typed(entries.put_record(position), Position) == position


def test_get_typed_rejects_wrong_type_tag(entries: EntryStore, cart: Basket) -> None:
    address = entries.put_record(cart)
    with pytest.raises(DecodeError) as exc:
        entries.get_typed(address, Product)
    assert exc.value.expected == "product"


def test_get_typed_rejects_malformed_payload(entries: EntryStore) -> None:
    missing_price = entries.put("product", {"name": "A", "description": ""})
    bad_price = entries.put("product", {"name": "A", "description": "", "price": "cheap"})
    not_an_object = entries.put("product", ["A", 10])

    for address in (missing_price, bad_price, not_an_object):
        with pytest.raises(DecodeError):
            entries.get_typed(address, Product)


def test_get_typed_missing_raises_not_found(entries: EntryStore) -> None:
    with pytest.raises(NotFound):
        entries.get_typed("f" * 64, Product)


def test_exists_and_verify(entries: EntryStore) -> None:
    address = entries.put("blob", b"\x00\x01")
    assert entries.exists(address)
    assert entries.verify(address)
    assert not entries.exists("a" * 64)
    assert not entries.verify("a" * 64)


def test_stored_entry_is_detached_from_caller_payload(entries: EntryStore) -> None:
    payload = {"n": 1, "tags": ["a"]}
    address = entries.put("note", payload)

    payload["n"] = 2
    payload["tags"].append("b")
    assert entries.get(address).payload == {"n": 1, "tags": ["a"]}

    loaded = entries.get(address).payload
    loaded["n"] = 3
    loaded["tags"].clear()
    assert entries.get(address).payload == {"n": 1, "tags": ["a"]}
    assert entries.verify(address)


def test_nested_bytes_round_trip(entries: EntryStore) -> None:
    payload = {"data": b"\x00\x01", "parts": [b"x", {"inner": bytearray(b"y")}]}
    address = entries.put("blob", payload)
    assert entries.get(address).payload == {"data": b"\x00\x01", "parts": [b"x", {"inner": b"y"}]}
    assert entries.verify(address)


def test_bytes_and_marker_lookalike_are_distinct_entries(entries: EntryStore) -> None:
    lookalike = {"_type": "binary", "_encoding": "base64", "data": "aGk="}
    raw = entries.put("x", b"hi")
    mapped = entries.put("x", lookalike)

    assert raw != mapped
    assert entries.get(raw).payload == b"hi"
    assert entries.get(mapped).payload == lookalike
