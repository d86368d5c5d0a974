"""
On-disk host substrate.

Layout under the store root:

    content/ab/ab1234...json   entry blobs, two-level by address prefix
    chain.jsonl                one ChainRecord per line
    links.jsonl                one LinkRecord per line
    heads.jsonl                one HeadRecord per line

Blobs are written once (temp file, then rename). The .jsonl logs are
append-only. In-memory indexes tail the log files: every read or append
first applies the lines added since the last one, so records written
through another substrate on the same root are seen, and a head
compare-and-set checks against the latest redirect on disk.
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any, Iterator

from .addressing import Address
from .entries import ChainRecord, Entry, HeadRecord, LinkRecord

logger = logging.getLogger(__name__)


class FileSubstrate:
    """Substrate persisted as content blobs plus JSON Lines logs."""

    def __init__(self, root: Path):
        """
        Initialize the substrate.

        Args:
            root: Store directory (created on first write)
        """
        self.root = root
        self.content_dir = root / "content"
        self.chain_path = root / "chain.jsonl"
        self.links_path = root / "links.jsonl"
        self.heads_path = root / "heads.jsonl"

        self._lock = threading.RLock()
        self._chain: list[ChainRecord] = []
        self._links: dict[tuple[Address, str], list[Address]] = {}
        self._heads: list[HeadRecord] = []
        self._latest: dict[Address, Address] = {}
        self._offsets: dict[Path, int] = {}
        self._indexed: bool = False

    # --- content blobs ---

    def _content_path(self, address: Address) -> Path:
        return self.content_dir / address[:2] / f"{address}.json"

    def store_content(self, address: Address, entry: Entry) -> bool:
        with self._lock:
            content_path = self._content_path(address)
            if content_path.exists():
                return False
            content_path.parent.mkdir(parents=True, exist_ok=True)

            # Write atomically (write to temp, then rename)
            temp_path = content_path.with_suffix(".tmp")
            temp_path.write_text(entry.to_json(), encoding="utf-8")
            temp_path.replace(content_path)
            return True

    def load_content(self, address: Address) -> Entry | None:
        content_path = self._content_path(address)
        if not content_path.exists():
            return None
        return Entry.from_json(content_path.read_text(encoding="utf-8"))

    def has_content(self, address: Address) -> bool:
        return self._content_path(address).exists()

    def content_addresses(self) -> list[Address]:
        """List all addresses with a stored blob."""
        addresses: list[Address] = []
        if not self.content_dir.exists():
            return addresses
        for prefix_dir in sorted(self.content_dir.iterdir()):
            if prefix_dir.is_dir() and len(prefix_dir.name) == 2:
                for content_file in sorted(prefix_dir.glob("*.json")):
                    addresses.append(content_file.stem)
        return addresses

    def size(self) -> int:
        """Total size of stored blobs in bytes."""
        total = 0
        if not self.content_dir.exists():
            return total
        for prefix_dir in self.content_dir.iterdir():
            if prefix_dir.is_dir():
                for content_file in prefix_dir.glob("*.json"):
                    total += content_file.stat().st_size
        return total

    # --- append-only logs ---

    def _append_line(self, path: Path, data: dict[str, Any]) -> None:
        self.root.mkdir(parents=True, exist_ok=True)
        with path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(data, separators=(",", ":")) + "\n")

    def _tail(self, path: Path) -> Iterator[dict[str, Any]]:
        """Yield complete lines appended to a log since it was last read."""
        if not path.exists():
            return
        offset = self._offsets.get(path, 0)
        with path.open("rb") as f:
            f.seek(offset)
            data = f.read()
        # A line still being written has no newline yet
        end = data.rfind(b"\n") + 1
        self._offsets[path] = offset + end
        for line in data[:end].decode("utf-8").splitlines():
            line = line.strip()
            if line:
                yield json.loads(line)

    def _refresh(self) -> None:
        """Bring the in-memory indexes up to date with the log files."""
        for data in self._tail(self.chain_path):
            self._chain.append(ChainRecord.from_dict(data))
        for data in self._tail(self.links_path):
            record = LinkRecord.from_dict(data)
            self._links.setdefault((record.base, record.tag), []).append(record.target)
        for data in self._tail(self.heads_path):
            record = HeadRecord.from_dict(data)
            self._heads.append(record)
            self._latest[record.logical_id] = record.version
        if not self._indexed:
            self._indexed = True
            logger.debug(
                f"Indexed store at {self.root}: {len(self._chain)} commits, "
                f"{sum(len(v) for v in self._links.values())} links, {len(self._heads)} heads"
            )

    def commit(self, record: ChainRecord) -> None:
        with self._lock:
            self._append_line(self.chain_path, record.to_dict())
            self._refresh()

    def chain(self) -> list[ChainRecord]:
        with self._lock:
            self._refresh()
            return list(self._chain)

    def append_link(self, record: LinkRecord) -> None:
        with self._lock:
            self._append_line(self.links_path, record.to_dict())
            self._refresh()

    def links(self, base: Address, tag: str) -> list[Address]:
        with self._lock:
            self._refresh()
            return list(self._links.get((base, tag), []))

    def append_head(self, record: HeadRecord, expected: Address | None) -> bool:
        with self._lock:
            self._refresh()
            if self._latest.get(record.logical_id) != expected:
                return False
            self._append_line(self.heads_path, record.to_dict())
            self._refresh()
            return True

    def heads(self, start: int = 0) -> list[HeadRecord]:
        with self._lock:
            self._refresh()
            return self._heads[start:]
