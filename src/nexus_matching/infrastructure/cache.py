"""Disk-backed JSON cache for profile API responses.

Usage example:
    from pathlib import Path

    from nexus_matching.infrastructure.cache import DiskCache

    cache = DiskCache(Path("data/cache/profiles"))
    cache.set("expertise:p-1:2024-05-01", {"expertise": []})
"""

from __future__ import annotations

import hashlib
import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, cast

from ..protocols import Cache


@dataclass
class DiskCache(Cache):
    """One JSON file per key, named by the key's SHA-256."""

    cache_dir: Path

    def __post_init__(self) -> None:
        self.cache_dir = Path(self.cache_dir)
        self.cache_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()
        return self.cache_dir / f"{digest}.json"

    def get(self, key: str) -> dict[str, Any] | None:
        path = self._path(key)
        if not path.exists():
            return None
        return cast(dict[str, Any], json.loads(path.read_text(encoding="utf-8")))

    def set(self, key: str, value: dict[str, Any]) -> None:
        path = self._path(key)
        # Write then rename so a concurrent reader never sees a partial file.
        tmp = path.with_suffix(f".{os.getpid()}.tmp")
        tmp.write_text(json.dumps(value, ensure_ascii=False), encoding="utf-8")
        tmp.replace(path)

    def has(self, key: str) -> bool:
        return self._path(key).exists()
