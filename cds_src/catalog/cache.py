"""Key/value cache used to skip backing-store loads on warm start."""

import logging
import os
import sqlite3
import time
from abc import ABC, abstractmethod

from ..config import Config

logger = logging.getLogger(__name__)


class Cache(ABC):
    """Byte-valued cache with per-entry expiry."""

    @abstractmethod
    def get(self, key: str) -> bytes | None:
        """Return the cached value, or None if missing or expired."""

    @abstractmethod
    def set(self, key: str, value: bytes, ttl_seconds: int) -> None:
        """Store a value for ttl_seconds."""


CACHE_SCHEMA = """
CREATE TABLE IF NOT EXISTS cache_entries (
    key TEXT PRIMARY KEY,
    value BLOB NOT NULL,
    expires_at REAL NOT NULL,          -- Unix timestamp
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

CREATE INDEX IF NOT EXISTS idx_cache_expires ON cache_entries(expires_at);
"""


class SQLiteCache(Cache):
    """SQLite-backed cache."""

    def __init__(self, db_path: str | None = None, clock=time.time):
        """Initialize cache.

        Args:
            db_path: Path to SQLite database. Defaults to Config.CATALOG_CACHE_DB_PATH
            clock: Callable returning the current Unix time
        """
        self.db_path = os.path.expanduser(db_path or Config.CATALOG_CACHE_DB_PATH)
        self.clock = clock

        db_dir = os.path.dirname(self.db_path)
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)

        with sqlite3.connect(self.db_path) as conn:
            conn.executescript(CACHE_SCHEMA)

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(self.db_path)

    def get(self, key: str) -> bytes | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT value, expires_at FROM cache_entries WHERE key = ?", (key,)
            ).fetchone()

            if row is None:
                return None

            value, expires_at = row
            if expires_at <= self.clock():
                conn.execute("DELETE FROM cache_entries WHERE key = ?", (key,))
                logger.debug(f"Cache entry '{key}' expired")
                return None

            return bytes(value)

    def set(self, key: str, value: bytes, ttl_seconds: int) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO cache_entries (key, value, expires_at)
                VALUES (?, ?, ?)
                """,
                (key, sqlite3.Binary(value), self.clock() + ttl_seconds),
            )

    def purge_expired(self) -> int:
        """Delete expired entries. Returns the number removed."""
        with self._connect() as conn:
            result = conn.execute(
                "DELETE FROM cache_entries WHERE expires_at <= ?", (self.clock(),)
            )
            return result.rowcount
