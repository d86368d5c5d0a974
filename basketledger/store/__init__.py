"""
Content-addressed entry store with typed links.

- addressing: canonical sha256 addresses for (type_tag, payload), payload codec
- entry_store: idempotent put/get over the host substrate
- link_index: ordered, append-only (base, tag) -> targets
- catalog: addresses by type tag, deduplicated
- heads: logical identity -> current version
"""

from .addressing import Address, address_of, canonical_json, decode_value, encode_value, is_address
from .catalog import TypeCatalog
from .entries import ChainRecord, Entry, HeadRecord, LinkRecord
from .entry_store import EntryStore, Record
from .file_substrate import FileSubstrate
from .heads import HeadState, HeadTable, fold_heads
from .link_index import LinkIndex
from .substrate import MemorySubstrate, Substrate

__all__ = [
    # Addressing
    "Address",
    "address_of",
    "canonical_json",
    "decode_value",
    "encode_value",
    "is_address",
    # Records
    "ChainRecord",
    "Entry",
    "HeadRecord",
    "LinkRecord",
    # Substrates
    "FileSubstrate",
    "MemorySubstrate",
    "Substrate",
    # Components
    "EntryStore",
    "HeadState",
    "HeadTable",
    "LinkIndex",
    "Record",
    "TypeCatalog",
    "fold_heads",
]
