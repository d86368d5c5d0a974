"""
Immutable records kept by the host substrate.

Entry is the content-addressed unit. ChainRecord, LinkRecord and
HeadRecord are the lines of the append-only logs: they are written once
and never modified.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from .addressing import Address, address_of, decode_value, encode_value


@dataclass(frozen=True)
class Entry:
    """A typed, immutable record. Its address is derived from its content."""

    type_tag: str
    payload: Any

    @property
    def address(self) -> Address:
        return address_of(self.type_tag, self.payload)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to JSON-compatible dict."""
        return {
            "type_tag": self.type_tag,
            "payload": encode_value(self.payload),
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, sort_keys=True)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Entry:
        """Reconstruct from JSON dict."""
        return cls(type_tag=data["type_tag"], payload=decode_value(data.get("payload")))

    @classmethod
    def from_json(cls, text: str) -> Entry:
        return cls.from_dict(json.loads(text))


@dataclass(frozen=True)
class ChainRecord:
    """One commit of an entry. The same address may be committed many times."""

    type_tag: str
    address: Address
    committed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        return {
            "type_tag": self.type_tag,
            "address": self.address,
            "committed_at": self.committed_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ChainRecord:
        return cls(
            type_tag=data["type_tag"],
            address=data["address"],
            committed_at=datetime.fromisoformat(data["committed_at"]),
        )


@dataclass(frozen=True)
class LinkRecord:
    """Directional, tagged relation from base to target."""

    base: Address
    tag: str
    target: Address

    def to_dict(self) -> dict[str, Any]:
        return {"base": self.base, "tag": self.tag, "target": self.target}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LinkRecord:
        return cls(base=data["base"], tag=data["tag"], target=data["target"])


@dataclass(frozen=True)
class HeadRecord:
    """Redirects a logical identity to its latest version."""

    logical_id: Address
    version: Address

    def to_dict(self) -> dict[str, Any]:
        return {"logical_id": self.logical_id, "version": self.version}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HeadRecord:
        return cls(logical_id=data["logical_id"], version=data["version"])
