"""
Head pointers: logical identity -> current version.

Entries are immutable, so a logically mutable record is a chain of
versions. The head table is computed by folding the append-only head
log; it is never stored as the source of truth. Every version address
maps back to its logical identity, so a caller holding any version can
find the current one.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Sequence

from .addressing import Address
from .entries import HeadRecord
from .substrate import Substrate

logger = logging.getLogger(__name__)


@dataclass
class HeadState:
    """Folded view of the head log."""

    current: dict[Address, Address] = field(default_factory=dict)  # logical_id -> head
    origin: dict[Address, Address] = field(default_factory=dict)  # any version -> logical_id
    order: list[Address] = field(default_factory=list)  # logical ids, registration order

    def apply(self, record: HeadRecord) -> None:
        if record.logical_id not in self.current:
            self.order.append(record.logical_id)
            self.origin[record.logical_id] = record.logical_id
        self.current[record.logical_id] = record.version
        self.origin.setdefault(record.version, record.logical_id)


def fold_heads(records: Sequence[HeadRecord]) -> HeadState:
    """Compute current heads from the head log; the last redirect wins."""
    state = HeadState()
    for record in records:
        state.apply(record)
    return state


class HeadTable:
    """
    Indirection table from logical id to latest version address.

    Redirects are compare-and-set against the substrate: advance() only
    succeeds if the head recorded there is still the version the caller
    computed from, whichever table or engine wrote it. Every read first
    folds in head records appended since the last one. Callers serialize
    work on one logical id with lock(); different ids never share a lock.
    """

    def __init__(self, substrate: Substrate):
        self.substrate = substrate
        self._lock = threading.Lock()
        self._key_locks: dict[Address, threading.Lock] = {}
        self._state = HeadState()
        self._applied = 0

    def _sync(self) -> HeadState:
        """Fold head records appended since the last sync."""
        for record in self.substrate.heads(self._applied):
            self._state.apply(record)
            self._applied += 1
        return self._state

    def lock(self, logical_id: Address) -> threading.Lock:
        """Per-identity lock for read-compute-write cycles."""
        with self._lock:
            return self._key_locks.setdefault(logical_id, threading.Lock())

    def register(self, logical_id: Address) -> bool:
        """
        Make an address its own head, if it is not known yet.

        Returns:
            True if the identity was newly registered
        """
        with self._lock:
            if logical_id in self._sync().origin:
                return False
            record = HeadRecord(logical_id=logical_id, version=logical_id)
            registered = self.substrate.append_head(record, None)
            self._sync()
            return registered

    def resolve(self, address: Address) -> Address | None:
        """Logical id for any known version (or the id itself)."""
        with self._lock:
            return self._sync().origin.get(address)

    def current(self, logical_id: Address) -> Address | None:
        with self._lock:
            return self._sync().current.get(logical_id)

    def advance(self, logical_id: Address, expected: Address, new: Address) -> bool:
        """
        Redirect logical_id to new if its head is still expected.

        Returns:
            False if the head moved since the caller read it
        """
        with self._lock:
            head = self._sync().current.get(logical_id)
            if head != expected:
                return False
            if new == head:
                return True
            record = HeadRecord(logical_id=logical_id, version=new)
            advanced = self.substrate.append_head(record, expected)
            self._sync()
        if advanced:
            logger.debug(f"Head of {logical_id[:12]} advanced {expected[:12]} -> {new[:12]}")
        return advanced

    def logical_ids(self) -> list[Address]:
        with self._lock:
            return list(self._sync().order)
