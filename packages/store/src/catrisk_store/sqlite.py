"""SQLiteStore — local single-file database store.

Why SQLite as an alternative to plain files:
- Batteries included: ships with Python, no extra dependencies.
- One file holds every key, which is convenient to copy between machines.
- Writes are transactional, so a crash mid-write keeps the previous value.

Schema:
  kv — one row per key, the value stored as a BLOB.
"""

from __future__ import annotations

import logging
import sqlite3

from catrisk_store.base import BaseStore

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS kv (
    key         TEXT PRIMARY KEY,
    value       BLOB NOT NULL,
    updated_at  TEXT DEFAULT CURRENT_TIMESTAMP
);
"""


class SQLiteStore(BaseStore):
    """Stores blobs in a local SQLite database file.

    The database file path defaults to `.catrisk.db` in the current working
    directory. Configure via .catrisk.yml: `store_path: /path/to/catrisk.db`.
    """

    def __init__(self, db_path: str = ".catrisk.db"):
        self._conn = sqlite3.connect(db_path)
        self._conn.row_factory = sqlite3.Row
        self._conn.executescript(_SCHEMA)
        self._conn.commit()

    def get(self, key: str) -> bytes | None:
        row = self._conn.execute("SELECT value FROM kv WHERE key=?", (key,)).fetchone()
        if row is None:
            return None
        value = row["value"]
        return value.encode("utf-8") if isinstance(value, str) else bytes(value)

    def set(self, key: str, value: bytes) -> None:
        self._conn.execute(
            """
            INSERT INTO kv (key, value, updated_at) VALUES (?, ?, CURRENT_TIMESTAMP)
            ON CONFLICT(key) DO UPDATE SET value=excluded.value, updated_at=excluded.updated_at
            """,
            (key, sqlite3.Binary(value)),
        )
        self._conn.commit()

    def close(self) -> None:
        self._conn.close()
