"""Typed, ordered links between addresses."""

from __future__ import annotations

import logging

from .addressing import Address
from .entries import LinkRecord
from .substrate import Substrate

logger = logging.getLogger(__name__)


class LinkIndex:
    """
    (base, tag) -> targets in creation order.

    Links are permanent. Re-linking the same pair appends a duplicate
    unless unique=True is passed.
    """

    def __init__(self, substrate: Substrate):
        self.substrate = substrate

    def link(self, base: Address, target: Address, tag: str, *, unique: bool = False) -> bool:
        """
        Append target to the sequence for (base, tag).

        Returns:
            True if a link was appended, False if unique=True and it already existed
        """
        if unique and target in self.substrate.links(base, tag):
            return False
        self.substrate.append_link(LinkRecord(base=base, tag=tag, target=target))
        logger.debug(f"Linked {base[:12]} -[{tag}]-> {target[:12]}")
        return True

    def links_from(self, base: Address, tag: str) -> list[Address]:
        """Targets linked from base under tag; empty if none."""
        return self.substrate.links(base, tag)
