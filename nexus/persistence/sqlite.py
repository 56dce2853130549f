"""SQLite implementation of the key/value storage."""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Any, Optional

from .repository import KeyValueStorage


class SQLiteStorage(KeyValueStorage):
    """Persist key/value pairs in a SQLite file so they survive restarts."""

    def __init__(self, db_path: str | Path):
        self.db_path = str(db_path)
        self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._ensure_schema()

    # ------------------------------------------------------------------
    # Schema management
    def _ensure_schema(self) -> None:
        cur = self._conn.cursor()
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS storage (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL
            )
            """
        )
        self._conn.commit()

    # ------------------------------------------------------------------
    # Helper methods
    def _execute(self, query: str, *params: Any) -> None:
        cur = self._conn.cursor()
        cur.execute(query, params)
        self._conn.commit()

    def _fetchone(self, query: str, *params: Any) -> sqlite3.Row | None:
        cur = self._conn.cursor()
        cur.execute(query, params)
        return cur.fetchone()

    # ------------------------------------------------------------------
    # Storage API
    def get_item(self, key: str) -> Optional[str]:
        row = self._fetchone("SELECT value FROM storage WHERE key = ?", key)
        return row["value"] if row else None

    def set_item(self, key: str, value: str) -> None:
        self._execute(
            "INSERT INTO storage (key, value) VALUES (?, ?) "
            "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
            key,
            value,
        )

    def remove_item(self, key: str) -> None:
        self._execute("DELETE FROM storage WHERE key = ?", key)

    def close(self) -> None:
        self._conn.close()
