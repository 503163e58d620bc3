"""Key-value store contract and backends for session persistence."""

import sqlite3
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path
from typing import Optional, Set

import structlog

from ..errors import PersistenceError


class KeyValueStore(ABC):
    """
    Minimal string key-value contract.

    set() raises PersistenceError on failure; get() returns None for an
    absent key; list() returns the keys starting with prefix.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    def list(self, prefix: str = "") -> Set[str]:
        ...


class InMemoryKeyValueStore(KeyValueStore):
    """Process-local store; the default when no backend is configured."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise PersistenceError("Value must be a string", operation="set", key=key)
        with self._lock:
            self._data[key] = value

    def list(self, prefix: str = "") -> Set[str]:
        with self._lock:
            return {k for k in self._data if k.startswith(prefix)}


class SQLiteKeyValueStore(KeyValueStore):
    """SQLite-backed durable store."""

    def __init__(self, db_path: str = "sessions.db"):
        self.db_path = Path(db_path)
        self.logger = structlog.get_logger("session.kv_store")
        self._lock = threading.Lock()

        self._init_database()

    def _init_database(self) -> None:
        """Initialize database schema."""
        with self._get_connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS kv_store (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
            """)
            conn.commit()

    @contextmanager
    def _get_connection(self):
        """Get database connection, translating sqlite errors."""
        conn = None
        try:
            conn = sqlite3.connect(self.db_path, timeout=30.0)
            yield conn
        except sqlite3.Error as e:
            if conn:
                conn.rollback()
            self.logger.error("Database error", db_path=str(self.db_path), error=str(e))
            raise PersistenceError(f"Database error: {e}", operation="connect",
                                   context={"db_path": str(self.db_path)}) from e
        finally:
            if conn:
                conn.close()

    def get(self, key: str) -> Optional[str]:
        with self._get_connection() as conn:
            row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
            return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        with self._lock:
            with self._get_connection() as conn:
                conn.execute(
                    "INSERT OR REPLACE INTO kv_store (key, value) VALUES (?, ?)",
                    (key, value),
                )
                conn.commit()

    def list(self, prefix: str = "") -> Set[str]:
        # Escape LIKE wildcards so prefixes match literally
        escaped = prefix.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        with self._get_connection() as conn:
            rows = conn.execute(
                "SELECT key FROM kv_store WHERE key LIKE ? ESCAPE '\\'",
                (escaped + "%",),
            ).fetchall()
            # LIKE is case-insensitive for ASCII
            return {row[0] for row in rows if row[0].startswith(prefix)}
