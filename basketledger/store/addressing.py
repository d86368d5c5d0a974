"""
Content addressing for entries.

An address is the sha256 of the canonical serialization of
(type_tag, payload). Canonical JSON uses sorted keys, compact separators
and a single spelling per number, so equal payloads always collide.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import json
import math
from typing import Any

from ..errors import InvalidRecord

# Opaque to callers: equality and hashing only.
Address = str

ADDRESS_LENGTH = 64

# Marker key for values JSON cannot hold natively. A payload dict that
# happens to use the key itself is escaped as a "mapping", so encoded
# bytes and user data can never share a spelling.
TYPE_KEY = "_type"


def encode_value(value: Any, *, canonical: bool = False) -> Any:
    """
    Return a JSON-ready copy of a payload value.

    Bytes become a base64 "binary" marker at any depth, and dicts that
    use the marker key are escaped. With canonical=True numbers get one
    spelling each (integral floats are written as ints).

    Raises:
        InvalidRecord: non-finite number, non-string key or unsupported type
    """
    if isinstance(value, bool) or value is None or isinstance(value, str):
        return value
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            raise InvalidRecord(f"non-finite number in payload: {value!r}")
        # 5.0 and 5 are the same price
        if canonical and value.is_integer():
            return int(value)
        return value
    if isinstance(value, (bytes, bytearray)):
        return {
            TYPE_KEY: "binary",
            "_encoding": "base64",
            "data": base64.b64encode(bytes(value)).decode("ascii"),
        }
    if isinstance(value, dict):
        out: dict[str, Any] = {}
        for key, item in value.items():
            if not isinstance(key, str):
                raise InvalidRecord(f"payload keys must be strings, got {key!r}")
            out[key] = encode_value(item, canonical=canonical)
        if TYPE_KEY in out:
            return {TYPE_KEY: "mapping", "data": out}
        return out
    if isinstance(value, (list, tuple)):
        return [encode_value(item, canonical=canonical) for item in value]
    raise InvalidRecord(f"unsupported payload value of type {type(value).__name__}")


def decode_value(data: Any) -> Any:
    """
    Inverse of encode_value(); always returns fresh containers.

    Raises:
        ValueError: a marker dict is malformed
    """
    if isinstance(data, list):
        return [decode_value(item) for item in data]
    if not isinstance(data, dict):
        return data
    if TYPE_KEY not in data:
        return {key: decode_value(item) for key, item in data.items()}
    kind = data[TYPE_KEY]
    if kind == "binary":
        try:
            return base64.b64decode(data["data"], validate=True)
        except (KeyError, TypeError, binascii.Error) as e:
            raise ValueError(f"malformed binary value: {e}") from e
    if kind == "mapping" and isinstance(data.get("data"), dict):
        return {key: decode_value(item) for key, item in data["data"].items()}
    raise ValueError(f"unknown encoded value kind {kind!r}")


def canonical_json(type_tag: str, payload: Any) -> str:
    """Canonical serialization of an entry, the input of address_of()."""
    return json.dumps(
        {"type_tag": type_tag, "payload": encode_value(payload, canonical=True)},
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    )


def address_of(type_tag: str, payload: Any) -> Address:
    """
    Compute the address of an entry.

    Args:
        type_tag: Declared entry type (e.g. "product")
        payload: Structured value or raw bytes

    Returns:
        Hex-encoded sha256 digest
    """
    return hashlib.sha256(canonical_json(type_tag, payload).encode("utf-8")).hexdigest()


def is_address(value: object) -> bool:
    """Check that a value has the shape of an address."""
    if not isinstance(value, str) or len(value) != ADDRESS_LENGTH:
        return False
    try:
        int(value, 16)
    except ValueError:
        return False
    return True
