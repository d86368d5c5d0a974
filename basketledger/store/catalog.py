"""Type catalog: enumerate stored addresses by type tag."""

from __future__ import annotations

from .addressing import Address
from .substrate import Substrate


class TypeCatalog:
    """Query the chain for every address committed under a type tag."""

    def __init__(self, substrate: Substrate):
        self.substrate = substrate

    def all_of_type(self, type_tag: str) -> list[Address]:
        """
        Addresses stored under type_tag, in commit order.

        The chain holds one record per put, so identical content shows up
        more than once; only the first occurrence is kept.
        """
        seen: set[Address] = set()
        result: list[Address] = []
        for record in self.substrate.chain():
            if record.type_tag != type_tag or record.address in seen:
                continue
            seen.add(record.address)
            result.append(record.address)
        return result

    def count(self, type_tag: str) -> int:
        return len(self.all_of_type(type_tag))
