# src/dia_maestro/storage/kv_store.py

from __future__ import annotations

import contextlib
import logging
import sqlite3
import time
from pathlib import Path

logger = logging.getLogger(__name__)


class StorageError(RuntimeError):
    """Raised by key-value stores when a read or write cannot be completed."""


class StorageQuotaExceededError(StorageError):
    """Raised when a value does not fit into the configured quota."""


def _value_size(value: str) -> int:
    return len(value.encode("utf-8"))


class SqliteKeyValueStore:
    """
    SQLite-backed key-value store.

    One row per key; values are opaque strings (JSON documents in practice).
    A write replaces the whole value.

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(self, db_path: str | Path = "storage.sqlite3", *, quota_bytes: int | None = None) -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._quota_bytes = quota_bytes
        self._ensure_schema()
        logger.info("SqliteKeyValueStore ready db=%s quota=%s", self._db_path, quota_bytes)

    def close(self) -> None:
        """Compatibility hook for shutdown (no persistent connections to close)."""
        return

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at REAL NOT NULL
                )
                """
            )
            conn.commit()
        finally:
            conn.close()

    def _used_bytes_except(self, conn: sqlite3.Connection, key: str) -> int:
        row = conn.execute(
            "SELECT COALESCE(SUM(LENGTH(CAST(value AS BLOB))), 0) FROM kv WHERE key != ?",
            (key,),
        ).fetchone()
        return int(row[0] or 0)

    # ---- public API ----

    def get_item(self, key: str) -> str | None:
        try:
            conn = self._get_conn()
            try:
                row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to read key {key!r}: {e}") from e
        return None if row is None else str(row[0])

    def set_item(self, key: str, value: str) -> None:
        try:
            conn = self._get_conn()
            try:
                if self._quota_bytes is not None:
                    used = self._used_bytes_except(conn, key)
                    if used + _value_size(value) > self._quota_bytes:
                        raise StorageQuotaExceededError(
                            f"Quota exceeded writing {key!r} "
                            f"({used + _value_size(value)} > {self._quota_bytes} bytes)"
                        )
                conn.execute(
                    """
                    INSERT INTO kv (key, value, updated_at) VALUES (?, ?, ?)
                    ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
                    """,
                    (key, value, time.time()),
                )
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to write key {key!r}: {e}") from e
        logger.debug("kv set key=%s bytes=%d", key, _value_size(value))

    def remove_item(self, key: str) -> None:
        try:
            conn = self._get_conn()
            try:
                conn.execute("DELETE FROM kv WHERE key = ?", (key,))
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to remove key {key!r}: {e}") from e

    def keys(self) -> list[str]:
        try:
            conn = self._get_conn()
            try:
                rows = conn.execute("SELECT key FROM kv ORDER BY key").fetchall()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to list keys: {e}") from e
        return [str(r[0]) for r in rows]


class InMemoryKeyValueStore:
    """Dict-backed store for tests and throwaway sessions."""

    def __init__(self, initial: dict[str, str] | None = None, *, quota_bytes: int | None = None) -> None:
        self.data: dict[str, str] = dict(initial or {})
        self._quota_bytes = quota_bytes

    def get_item(self, key: str) -> str | None:
        return self.data.get(key)

    def set_item(self, key: str, value: str) -> None:
        if self._quota_bytes is not None:
            used = sum(_value_size(v) for k, v in self.data.items() if k != key)
            if used + _value_size(value) > self._quota_bytes:
                raise StorageQuotaExceededError(f"Quota exceeded writing {key!r}")
        self.data[key] = value

    def remove_item(self, key: str) -> None:
        self.data.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self.data)

    def close(self) -> None:
        return
