"""Cache layer and its backing stores."""

from .cache import GLOBAL_TAG, CacheEntry, CacheStore, HotelCache, bbox_tag
from .memory_store import MemoryCacheStore
from .sqlite_store import SqliteCacheStore

__all__ = [
    "GLOBAL_TAG",
    "CacheEntry",
    "CacheStore",
    "HotelCache",
    "MemoryCacheStore",
    "SqliteCacheStore",
    "bbox_tag",
]
