"""SQLite-backed cache store for normalised hotel lists.

One row per bounding box in ``cache_entries`` holds the JSON-encoded hotels and
the write time; ``cache_tags`` maps tags back to keys and is cleared by cascade
when its entry goes. The schema version lives in ``PRAGMA user_version``.
"""
from __future__ import annotations

import asyncio
import json
import logging
import sqlite3
from pathlib import Path
from typing import Callable, List, Optional, TypeVar

from bike_hotels.hotels.models import ClientHotel

from .cache import CacheEntry

logger = logging.getLogger(__name__)

T = TypeVar("T")

PRAGMA_CHOICES: dict[str, frozenset[str]] = {
    "journal_mode": frozenset({"delete", "truncate", "persist", "memory", "wal", "off"}),
    "synchronous": frozenset({"off", "normal", "full", "extra"}),
}

# Index i upgrades the schema from version i to i + 1.
MIGRATIONS: tuple[str, ...] = (
    """
    CREATE TABLE IF NOT EXISTS cache_entries (
        key TEXT PRIMARY KEY,
        payload TEXT NOT NULL,
        created_at REAL NOT NULL
    );

    CREATE TABLE IF NOT EXISTS cache_tags (
        key TEXT NOT NULL REFERENCES cache_entries(key) ON DELETE CASCADE,
        tag TEXT NOT NULL,
        PRIMARY KEY (key, tag)
    );

    CREATE INDEX IF NOT EXISTS idx_cache_tags_tag ON cache_tags(tag);
    CREATE INDEX IF NOT EXISTS idx_cache_entries_created_at ON cache_entries(created_at);
    """,
)
SCHEMA_VERSION = len(MIGRATIONS)


def checked_pragma(name: str, value: Optional[str]) -> Optional[str]:
    """Lower-case ``value`` and check it against the allowed settings of pragma ``name``.

    ``None`` or a blank string means "leave the database default".
    """
    if value is None or not value.strip():
        return None
    mode = value.strip().lower()
    allowed = PRAGMA_CHOICES[name]
    if mode not in allowed:
        raise ValueError(f"Unsupported SQLite {name} '{value}'. Expected one of: {sorted(allowed)}")
    return mode


def _encode_hotels(hotels: tuple[ClientHotel, ...]) -> str:
    return json.dumps(ClientHotel.to_dicts(hotels), separators=(",", ":"))


class SqliteCacheStore:
    """Cache store over a single sqlite3 connection used from worker threads."""

    def __init__(
        self,
        db_path: Path,
        *,
        busy_timeout_ms: int = 2000,
        journal_mode: Optional[str] = "wal",
        synchronous: Optional[str] = "normal",
    ) -> None:
        self.path = db_path
        self.busy_timeout_ms = max(int(busy_timeout_ms), 0)
        self.pragmas = {
            "journal_mode": checked_pragma("journal_mode", journal_mode),
            "synchronous": checked_pragma("synchronous", synchronous),
        }
        self._connection: Optional[sqlite3.Connection] = None
        self._lock = asyncio.Lock()

    async def initialize(self) -> None:
        async with self._lock:
            if self._connection is None:
                self._connection = await asyncio.to_thread(self._connect)

    async def close(self) -> None:
        conn, self._connection = self._connection, None
        if conn is not None:
            await asyncio.to_thread(conn.close)

    def _connect(self) -> sqlite3.Connection:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self.path, check_same_thread=False)
        try:
            conn.execute("PRAGMA foreign_keys = ON")
            conn.execute(f"PRAGMA busy_timeout = {self.busy_timeout_ms}")
            for name, mode in self.pragmas.items():
                if mode:
                    conn.execute(f"PRAGMA {name} = {mode.upper()}")
            self._migrate(conn)
        except sqlite3.Error as exc:
            conn.close()
            logger.error("Could not open SQLite cache at %s: %s", self.path, exc)
            raise
        return conn

    @staticmethod
    def _migrate(conn: sqlite3.Connection) -> None:
        version = conn.execute("PRAGMA user_version").fetchone()[0]
        if version > SCHEMA_VERSION:
            raise RuntimeError(
                f"SQLite cache schema version {version} is newer than supported ({SCHEMA_VERSION})"
            )
        for target, script in enumerate(MIGRATIONS[version:], start=version + 1):
            logger.info("Migrating SQLite cache schema to version %s", target)
            conn.executescript(script)
            conn.execute(f"PRAGMA user_version = {target}")
        conn.commit()

    def _require_connection(self) -> sqlite3.Connection:
        if self._connection is None:
            raise RuntimeError("SQLite cache store has not been initialised")
        return self._connection

    async def _run(self, op: Callable[[sqlite3.Connection], T]) -> T:
        conn = self._require_connection()
        async with self._lock:
            return await asyncio.to_thread(op, conn)

    # ------------------------------------------------------------------
    # cache store interface

    async def get(self, key: str) -> Optional[CacheEntry]:
        def _op(conn: sqlite3.Connection) -> Optional[CacheEntry]:
            row = conn.execute(
                "SELECT payload, created_at FROM cache_entries WHERE key=?",
                (key,),
            ).fetchone()
            if row is None:
                return None
            tags = frozenset(
                tag for (tag,) in conn.execute("SELECT tag FROM cache_tags WHERE key=?", (key,))
            )
            try:
                hotels = tuple(ClientHotel.from_dict(item) for item in json.loads(row[0]))
            except (ValueError, KeyError, TypeError) as exc:
                logger.warning("Discarding unreadable cache payload for %s: %s", key, exc)
                return None
            return CacheEntry(key=key, hotels=hotels, created_at=float(row[1]), tags=tags)

        return await self._run(_op)

    async def put(self, entry: CacheEntry) -> None:
        def _op(conn: sqlite3.Connection) -> None:
            with conn:
                # Replace the row and its tags together; cascades drop the old tags.
                conn.execute("DELETE FROM cache_entries WHERE key=?", (entry.key,))
                conn.execute(
                    "INSERT INTO cache_entries(key, payload, created_at) VALUES(?, ?, ?)",
                    (entry.key, _encode_hotels(entry.hotels), entry.created_at),
                )
                conn.executemany(
                    "INSERT INTO cache_tags(key, tag) VALUES(?, ?)",
                    [(entry.key, tag) for tag in sorted(entry.tags)],
                )

        await self._run(_op)

    async def delete(self, key: str) -> None:
        def _op(conn: sqlite3.Connection) -> None:
            with conn:
                conn.execute("DELETE FROM cache_entries WHERE key=?", (key,))

        await self._run(_op)

    async def delete_older_than(self, cutoff: float) -> int:
        def _op(conn: sqlite3.Connection) -> int:
            with conn:
                return conn.execute("DELETE FROM cache_entries WHERE created_at <= ?", (cutoff,)).rowcount

        return await self._run(_op)

    async def keys_for_tag(self, tag: str) -> List[str]:
        def _op(conn: sqlite3.Connection) -> List[str]:
            return [key for (key,) in conn.execute("SELECT key FROM cache_tags WHERE tag=?", (tag,))]

        return await self._run(_op)
