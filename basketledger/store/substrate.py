"""
Host substrate: the primitives the core is given.

The core never performs I/O itself. Everything it persists goes through
a Substrate: content blobs keyed by address, plus three append-only logs
(chain commits, links, head redirects). Nothing is ever rewritten or
deleted.
"""

from __future__ import annotations

import threading
from typing import Protocol, runtime_checkable

from .addressing import Address
from .entries import ChainRecord, Entry, HeadRecord, LinkRecord


@runtime_checkable
class Substrate(Protocol):
    """Storage primitives provided by the host."""

    def store_content(self, address: Address, entry: Entry) -> bool:
        """Store an entry if absent. Returns True if it was newly stored."""
        ...

    def load_content(self, address: Address) -> Entry | None:
        ...

    def has_content(self, address: Address) -> bool:
        ...

    def content_addresses(self) -> list[Address]:
        ...

    def commit(self, record: ChainRecord) -> None:
        """Append a commit to the chain (duplicates allowed)."""
        ...

    def chain(self) -> list[ChainRecord]:
        """All commits in append order."""
        ...

    def append_link(self, record: LinkRecord) -> None:
        ...

    def links(self, base: Address, tag: str) -> list[Address]:
        """Targets for (base, tag) in append order."""
        ...

    def append_head(self, record: HeadRecord, expected: Address | None) -> bool:
        """
        Append a redirect if the id's latest head is still expected.

        expected=None means the id must not have a head yet. Returns False,
        appending nothing, when another writer got there first.
        """
        ...

    def heads(self, start: int = 0) -> list[HeadRecord]:
        """Head redirects in append order, from position start on."""
        ...

    def size(self) -> int:
        """Total size of stored blobs in bytes."""
        ...


class MemorySubstrate:
    """
    In-process substrate backed by dicts and lists.

    A single lock makes each primitive atomic, so concurrent appends from
    different threads never interleave inside one operation. Blobs are
    kept in their serialized form, so neither the caller's payload nor a
    loaded copy shares state with the stored entry.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._content: dict[Address, str] = {}
        self._chain: list[ChainRecord] = []
        self._links: dict[tuple[Address, str], list[Address]] = {}
        self._heads: list[HeadRecord] = []
        self._latest: dict[Address, Address] = {}

    def store_content(self, address: Address, entry: Entry) -> bool:
        text = entry.to_json()
        with self._lock:
            if address in self._content:
                return False
            self._content[address] = text
            return True

    def load_content(self, address: Address) -> Entry | None:
        with self._lock:
            text = self._content.get(address)
        if text is None:
            return None
        return Entry.from_json(text)

    def has_content(self, address: Address) -> bool:
        with self._lock:
            return address in self._content

    def content_addresses(self) -> list[Address]:
        with self._lock:
            return list(self._content)

    def size(self) -> int:
        with self._lock:
            return sum(len(text.encode("utf-8")) for text in self._content.values())

    def commit(self, record: ChainRecord) -> None:
        with self._lock:
            self._chain.append(record)

    def chain(self) -> list[ChainRecord]:
        with self._lock:
            return list(self._chain)

    def append_link(self, record: LinkRecord) -> None:
        with self._lock:
            self._links.setdefault((record.base, record.tag), []).append(record.target)

    def links(self, base: Address, tag: str) -> list[Address]:
        with self._lock:
            return list(self._links.get((base, tag), []))

    def append_head(self, record: HeadRecord, expected: Address | None) -> bool:
        with self._lock:
            if self._latest.get(record.logical_id) != expected:
                return False
            self._heads.append(record)
            self._latest[record.logical_id] = record.version
            return True

    def heads(self, start: int = 0) -> list[HeadRecord]:
        with self._lock:
            return self._heads[start:]
