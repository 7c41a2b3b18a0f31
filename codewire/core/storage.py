"""
Key-value persistence for CodeWire.
"""
import json
import logging
import sqlite3
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)

class KeyValueStore:
    """
    Stores named string records in a single SQLite table.

    Bookmarks and questions are each persisted as one JSON document under
    a fixed key, so the store only needs whole-value reads and writes.
    """
    def __init__(self, path: str = "codewire.db"):
        """
        Initialize the KeyValueStore.

        Args:
            path: SQLite database file, or ":memory:" for a private in-memory store
        """
        self.path = path
        if path != ":memory:":
            Path(path).parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(path)
        self._init_db()

    def _init_db(self):
        """Initialize the key-value table."""
        with self._conn:
            self._conn.execute("""
                CREATE TABLE IF NOT EXISTS kv (
                    key TEXT PRIMARY KEY,
                    value TEXT,
                    updated DATETIME DEFAULT CURRENT_TIMESTAMP
                )
            """)

    def get(self, key: str) -> Optional[str]:
        """
        Get a stored value.

        Args:
            key: The record name

        Returns:
            The stored string, or None if absent
        """
        cursor = self._conn.execute("SELECT value FROM kv WHERE key = ?", (key,))
        row = cursor.fetchone()
        return row[0] if row else None

    def set(self, key: str, value: str):
        """
        Store a value, replacing any previous one.

        Args:
            key: The record name
            value: The string to store
        """
        with self._conn:
            self._conn.execute(
                """
                INSERT OR REPLACE INTO kv (key, value, updated)
                VALUES (?, ?, CURRENT_TIMESTAMP)
                """,
                (key, value)
            )

    def delete(self, key: str):
        with self._conn:
            self._conn.execute("DELETE FROM kv WHERE key = ?", (key,))

    def get_json(self, key: str) -> Optional[Any]:
        """
        Get a stored JSON document.

        Args:
            key: The record name

        Returns:
            The decoded value, or None if the record is absent or not valid JSON
        """
        raw = self.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError as e:
            logger.warning(f"Ignoring malformed record {key!r}: {e}")
            return None

    def set_json(self, key: str, value: Any):
        self.set(key, json.dumps(value, ensure_ascii=False))

    def close(self):
        self._conn.close()
