# src/study_planner/storage/prefs_store.py

from __future__ import annotations

import asyncio
import contextlib
import logging
import sqlite3
import time
from pathlib import Path

logger = logging.getLogger(__name__)

_KIND_STRING = "string"
_KIND_BOOL = "bool"


class SqlitePreferenceStore:
    """
    SQLite-backed key-value preference store.

    One row per key, tagged with the value kind ("string" / "bool").
    A key written as one kind reads as missing through the other getter.

    Thread-safety:
    - each call opens its own SQLite connection
    - async methods run the blocking call in a worker thread
    """

    def __init__(self, db_path: str | Path = "prefs.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        try:
            total = self.count_keys()
        except sqlite3.Error:
            total = -1
        logger.info("SqlitePreferenceStore ready db=%s keys=%s", self._db_path, total)

    def close(self) -> None:
        """Compatibility hook for shutdown (no persistent connections to close)."""
        return

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS prefs (
                    key TEXT PRIMARY KEY,
                    kind TEXT NOT NULL,
                    value TEXT NOT NULL,
                    updated_at REAL NOT NULL
                )
                """
            )
            conn.commit()
        finally:
            conn.close()

    def _read(self, key: str, kind: str) -> str | None:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute("SELECT kind, value FROM prefs WHERE key = ?", (key,))
            row = cur.fetchone()
            if row is None or row["kind"] != kind:
                return None
            return str(row["value"])
        finally:
            conn.close()

    def _write(self, key: str, kind: str, value: str) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO prefs(key, kind, value, updated_at)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    kind = excluded.kind,
                    value = excluded.value,
                    updated_at = excluded.updated_at
                """,
                (key, kind, value, time.time()),
            )
            conn.commit()
            logger.debug("Pref written key=%s kind=%s bytes=%d", key, kind, len(value))
        finally:
            conn.close()

    # ---- sync API ----

    def count_keys(self) -> int:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute("SELECT COUNT(*) FROM prefs")
            (n,) = cur.fetchone()
            return int(n)
        finally:
            conn.close()

    def remove(self, key: str) -> None:
        conn = self._get_conn()
        try:
            conn.execute("DELETE FROM prefs WHERE key = ?", (key,))
            conn.commit()
        finally:
            conn.close()

    # ---- PreferenceStore (async) ----

    async def get_string(self, key: str) -> str | None:
        return await asyncio.to_thread(self._read, key, _KIND_STRING)

    async def set_string(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._write, key, _KIND_STRING, str(value))

    async def get_bool(self, key: str) -> bool | None:
        raw = await asyncio.to_thread(self._read, key, _KIND_BOOL)
        if raw is None:
            return None
        return raw == "1"

    async def set_bool(self, key: str, value: bool) -> None:
        await asyncio.to_thread(self._write, key, _KIND_BOOL, "1" if value else "0")
