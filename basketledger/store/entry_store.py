"""
Append-only entry store.

Entries are stored by their content address, so putting the same
(type_tag, payload) twice is a no-op that returns the same address.
Every put is still committed to the chain, which is what the type
catalog reads.
"""

from __future__ import annotations

import logging
from typing import Any, ClassVar, Protocol, TypeVar

from ..errors import DecodeError, InvalidRecord, NotFound
from .addressing import Address, address_of
from .entries import ChainRecord, Entry
from .substrate import Substrate

logger = logging.getLogger(__name__)


class Record(Protocol):
    """A domain record that can be stored as an entry."""

    type_tag: ClassVar[str]

    def to_payload(self) -> dict[str, Any]:
        ...

    @classmethod
    def from_payload(cls, payload: Any) -> Any:
        ...


R = TypeVar("R", bound=Record)


class EntryStore:
    """Address -> entry mapping. No in-place mutation, no deletion."""

    def __init__(self, substrate: Substrate):
        self.substrate = substrate

    def put(self, type_tag: str, payload: Any) -> Address:
        """
        Store an entry and return its address.

        If the content already exists only a chain commit is added. The
        substrate keeps its own copy, so later changes to payload do not
        reach the stored entry.

        Args:
            type_tag: Declared entry type
            payload: Structured value or bytes

        Returns:
            The entry address
        """
        address = address_of(type_tag, payload)
        stored = self.substrate.store_content(address, Entry(type_tag, payload))
        self.substrate.commit(ChainRecord(type_tag=type_tag, address=address))
        if stored:
            logger.debug(f"Stored {type_tag} entry {address}")
        else:
            logger.debug(f"Deduplicated {type_tag} entry {address}")
        return address

    def put_record(self, record: Record) -> Address:
        return self.put(record.type_tag, record.to_payload())

    def get(self, address: Address) -> Entry:
        """
        Load the entry at an address.

        The returned entry is a fresh copy; changing its payload does not
        touch what is stored.

        Raises:
            NotFound: nothing was ever stored at the address
            DecodeError: the stored blob is damaged and cannot be read
        """
        try:
            entry = self.substrate.load_content(address)
        except (KeyError, TypeError, ValueError) as e:
            raise DecodeError(address, "entry", str(e)) from e
        if entry is None:
            raise NotFound(address)
        return entry

    def get_typed(self, address: Address, record_type: type[R]) -> R:
        """
        Load an entry and decode it into a domain record.

        Raises:
            NotFound: nothing was ever stored at the address
            DecodeError: wrong type tag, or the payload does not fit the record
        """
        entry = self.get(address)
        expected = record_type.type_tag
        if entry.type_tag != expected:
            raise DecodeError(address, expected, f"stored type is {entry.type_tag!r}")
        try:
            return record_type.from_payload(entry.payload)
        except (KeyError, TypeError, ValueError) as e:
            raise DecodeError(address, expected, str(e)) from e

    def exists(self, address: Address) -> bool:
        return self.substrate.has_content(address)

    def verify(self, address: Address) -> bool:
        """
        Verify entry integrity by recomputing its address.

        Returns:
            True if the entry exists, can be read, and its content hashes
            to the address
        """
        try:
            entry = self.get(address)
        except (NotFound, DecodeError) as e:
            logger.debug(f"Entry {address} failed verification: {e}")
            return False
        try:
            return address_of(entry.type_tag, entry.payload) == address
        except InvalidRecord:
            return False
