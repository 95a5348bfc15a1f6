# baro/storage/sqlite_cache_store.py

"""SQLite-backed key-value store for persisting the price cache."""

import logging
import sqlite3
import threading
from pathlib import Path

from baro.config.settings import Settings

logger = logging.getLogger("baro.cache.sqlite")

_SCHEMA = """\
CREATE TABLE IF NOT EXISTS kv_store (
    key   TEXT PRIMARY KEY,
    value BLOB NOT NULL
);
"""


def _escape_like(prefix: str) -> str:
    """Escape LIKE wildcards so the prefix matches literally."""
    return (
        prefix.replace("\\", "\\\\")
        .replace("%", "\\%")
        .replace("_", "\\_")
    )


class SqliteCacheStore:
    """Durable byte-valued key-value store on a single SQLite file."""

    def __init__(
        self, db_path: Path | None = None,
    ) -> None:
        path = db_path or Settings.CACHE_DB_PATH
        if str(path) != ":memory:":
            path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        self._conn = sqlite3.connect(
            str(path), check_same_thread=False,
        )
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.executescript(_SCHEMA)
        logger.debug("SqliteCacheStore opened at %s", path)

    def close(self) -> None:
        """Close the database connection."""
        with self._lock:
            self._conn.close()

    def get(self, key: str) -> bytes | None:
        with self._lock:
            row = self._conn.execute(
                "SELECT value FROM kv_store WHERE key = ?", (key,),
            ).fetchone()
        if row is None:
            return None
        return bytes(row[0])

    def set(self, key: str, value: bytes) -> None:
        with self._lock:
            self._conn.execute(
                "INSERT INTO kv_store (key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value=excluded.value",
                (key, sqlite3.Binary(value)),
            )
            self._conn.commit()

    def remove(self, key: str) -> None:
        with self._lock:
            self._conn.execute(
                "DELETE FROM kv_store WHERE key = ?", (key,),
            )
            self._conn.commit()

    def list_keys(self, prefix: str) -> list[str]:
        with self._lock:
            rows = self._conn.execute(
                "SELECT key FROM kv_store WHERE key LIKE ? ESCAPE '\\' "
                "ORDER BY key",
                (_escape_like(prefix) + "%",),
            ).fetchall()
        # LIKE is case-insensitive for ASCII
        return [r[0] for r in rows if r[0].startswith(prefix)]
