"""Local dataset and key-value storage for extraction output."""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol

from kosis_extractor.core.logging import get_logger

log = get_logger("storage")

_SAFE_KEY = re.compile(r"^[A-Za-z0-9!\-_.'()]{1,256}$")


class RecordSink(Protocol):
    """Anything that accepts output records one at a time."""

    async def push_data(self, record: Dict[str, Any]) -> None:
        ...


class MemoryDataset:
    """Keeps pushed records in memory (used by the HTTP API and tests)."""

    def __init__(self):
        self.items: List[Dict[str, Any]] = []

    async def push_data(self, record: Dict[str, Any]) -> None:
        self.items.append(record)

    def of_type(self, record_type: Optional[str]) -> List[Dict[str, Any]]:
        return [item for item in self.items if item.get("type") == record_type]


class DatasetStore:
    """Appends records as JSON lines under ``<root>/datasets/<name>/items.jsonl``."""

    def __init__(self, root: str = "storage", name: str = "default"):
        self.dataset_dir = Path(root) / "datasets" / name
        self.dataset_dir.mkdir(parents=True, exist_ok=True)
        self.items_file = self.dataset_dir / "items.jsonl"

    async def push_data(self, record: Dict[str, Any]) -> None:
        with open(self.items_file, "a", encoding="utf-8") as f:
            f.write(json.dumps(record, ensure_ascii=False, default=str))
            f.write("\n")

    def list_items(
        self,
        offset: int = 0,
        limit: Optional[int] = None,
        record_type: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Read stored records; ``record_type="data"`` selects untagged (normalized) records."""
        if not self.items_file.exists():
            return []

        items: List[Dict[str, Any]] = []
        with open(self.items_file, "r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue
                item = json.loads(line)
                if record_type == "data" and "type" in item:
                    continue
                if record_type not in (None, "data") and item.get("type") != record_type:
                    continue
                items.append(item)
        end = offset + limit if limit is not None else None
        return items[offset:end]

    def count(self) -> int:
        if not self.items_file.exists():
            return 0
        with open(self.items_file, "r", encoding="utf-8") as f:
            return sum(1 for line in f if line.strip())

    def clear(self) -> None:
        if self.items_file.exists():
            self.items_file.unlink()


class KeyValueStore:
    """One file per key under ``<root>/key_value_stores/<name>/``.

    JSON values are stored as ``<key>.json``; bytes are written as-is.
    """

    def __init__(self, root: str = "storage", name: str = "default"):
        self.store_dir = Path(root) / "key_value_stores" / name
        self.store_dir.mkdir(parents=True, exist_ok=True)

    def _check_key(self, key: str) -> None:
        if not _SAFE_KEY.match(key):
            raise ValueError(f"Invalid key-value store key: {key!r}")

    async def get_value(self, key: str) -> Any:
        self._check_key(key)
        json_file = self.store_dir / f"{key}.json"
        if json_file.exists():
            with open(json_file, "r", encoding="utf-8") as f:
                return json.load(f)

        raw_file = self.store_dir / key
        if raw_file.exists():
            return raw_file.read_bytes()
        return None

    async def set_value(self, key: str, value: Any, content_type: Optional[str] = None) -> None:
        self._check_key(key)
        if isinstance(value, (bytes, bytearray)):
            (self.store_dir / key).write_bytes(bytes(value))
            log.debug(f"Stored {len(value)} bytes under {key} ({content_type or 'application/octet-stream'})")
            return

        with open(self.store_dir / f"{key}.json", "w", encoding="utf-8") as f:
            json.dump(value, f, ensure_ascii=False, indent=2, default=str)

    async def delete_value(self, key: str) -> None:
        self._check_key(key)
        for path in (self.store_dir / f"{key}.json", self.store_dir / key):
            if path.exists():
                path.unlink()
