"""In-process cache store."""
from __future__ import annotations

from typing import Dict, List, Optional

from .cache import CacheEntry


class MemoryCacheStore:
    """Dict-backed store; entries are replaced wholesale, never edited."""

    def __init__(self) -> None:
        self._entries: Dict[str, CacheEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    async def get(self, key: str) -> Optional[CacheEntry]:
        return self._entries.get(key)

    async def put(self, entry: CacheEntry) -> None:
        self._entries[entry.key] = entry

    async def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    async def keys_for_tag(self, tag: str) -> List[str]:
        return [key for key, entry in self._entries.items() if tag in entry.tags]

    async def delete_older_than(self, cutoff: float) -> int:
        stale = [key for key, entry in self._entries.items() if entry.created_at <= cutoff]
        for key in stale:
            del self._entries[key]
        return len(stale)
