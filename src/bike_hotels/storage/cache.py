"""Time- and tag-bounded cache of normalised hotel lists keyed by bounding box.

Entries are immutable: expiry is decided by comparing ``created_at`` with the
clock, and a refresh writes a brand new entry over the old key. Every write
first sweeps entries past the TTL so the store does not grow with each new
box. Concurrent misses for the same key share a single in-flight fetch task.
"""
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional, Protocol

from bike_hotels.geo.bbox import BoundingBox
from bike_hotels.hotels.models import ClientHotel

logger = logging.getLogger(__name__)

DEFAULT_TTL_S = 3600.0
GLOBAL_TAG = "hotel-map-data"

FetchFn = Callable[[], Awaitable[List[ClientHotel]]]


def bbox_tag(key: str) -> str:
    return f"hotel-map-bbox-{key}"


@dataclass(frozen=True)
class CacheEntry:
    key: str
    hotels: tuple[ClientHotel, ...]
    created_at: float
    tags: frozenset[str]

    def is_fresh(self, now: float, ttl_s: float) -> bool:
        return now - self.created_at < ttl_s


class CacheStore(Protocol):
    """Key-value backing store; may be remote, hence async."""

    async def get(self, key: str) -> Optional[CacheEntry]: ...

    async def put(self, entry: CacheEntry) -> None: ...

    async def delete(self, key: str) -> None: ...

    async def keys_for_tag(self, tag: str) -> List[str]: ...

    async def delete_older_than(self, cutoff: float) -> int: ...


class HotelCache:
    """Memoises ``fetch_fn`` results per bounding box."""

    def __init__(
        self,
        store: CacheStore,
        *,
        ttl_s: float = DEFAULT_TTL_S,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.store = store
        self.ttl_s = ttl_s
        self._clock = clock
        self._inflight: dict[str, asyncio.Task[CacheEntry]] = {}

    def in_flight(self, bbox: BoundingBox) -> bool:
        return bbox.cache_key in self._inflight

    async def get_or_fetch(self, bbox: BoundingBox, fetch_fn: FetchFn) -> List[ClientHotel]:
        key = bbox.cache_key
        entry = await self.store.get(key)
        if entry is not None and entry.is_fresh(self._clock(), self.ttl_s):
            logger.debug("Cache hit for bbox %s", key)
            return list(entry.hotels)
        if entry is not None:
            logger.info("Cache entry for bbox %s expired; refreshing", key)

        task = self._inflight.get(key)
        if task is None:
            logger.debug("Cache miss for bbox %s; starting fetch", key)
            task = asyncio.create_task(self._populate(key, fetch_fn))
            self._inflight[key] = task
            task.add_done_callback(lambda done, key=key: self._forget(key, done))
        else:
            logger.debug("Joining in-flight fetch for bbox %s", key)

        # shield: a cancelled caller must not cancel the fetch other callers await.
        entry = await asyncio.shield(task)
        return list(entry.hotels)

    async def _populate(self, key: str, fetch_fn: FetchFn) -> CacheEntry:
        hotels = await fetch_fn()
        entry = CacheEntry(
            key=key,
            hotels=tuple(hotels),
            created_at=self._clock(),
            tags=frozenset({GLOBAL_TAG, bbox_tag(key)}),
        )
        await self.purge_expired()
        await self.store.put(entry)
        logger.info("Cached %s hotels for bbox %s", len(entry.hotels), key)
        return entry

    def _forget(self, key: str, task: asyncio.Task[CacheEntry]) -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]
        if not task.cancelled() and task.exception() is not None:
            logger.warning("Fetch for bbox %s failed: %s", key, task.exception())

    async def purge_expired(self) -> int:
        """Drop every entry past the TTL; returns how many were removed."""
        removed = await self.store.delete_older_than(self._clock() - self.ttl_s)
        if removed:
            logger.info("Purged %s expired cache entries", removed)
        return removed

    async def invalidate_tag(self, tag: str) -> int:
        keys = await self.store.keys_for_tag(tag)
        for key in keys:
            await self.store.delete(key)
        logger.info("Invalidated %s cache entries for tag %s", len(keys), tag)
        return len(keys)

    async def invalidate_all(self) -> int:
        return await self.invalidate_tag(GLOBAL_TAG)

    async def invalidate_bbox(self, bbox: BoundingBox) -> int:
        return await self.invalidate_tag(bbox_tag(bbox.cache_key))
