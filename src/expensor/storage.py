"""
Key-value blob storage backed by SQLite.
Each named slot holds one opaque blob; writes overwrite the previous value.
"""

import sqlite3
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Base exception for storage operations."""


class KeyValueStorage:
    """Manages named blob slots in a SQLite database."""

    def __init__(self, db_path: Union[str, Path] = "receipts.db"):
        """Initialize key-value storage.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = str(db_path)
        self.logger = logger

    @contextmanager
    def get_connection(self):
        """Context manager for database connections with automatic cleanup."""
        conn = None
        try:
            conn = sqlite3.connect(self.db_path)
            yield conn
        except sqlite3.Error as e:
            if conn:
                conn.rollback()
            self.logger.error(f"Storage error: {str(e)}")
            raise StorageError(str(e)) from e
        finally:
            if conn:
                conn.close()

    def initialize(self) -> None:
        """Create the slot table if it does not exist yet."""
        with self.get_connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS kv_slots (
                    key TEXT PRIMARY KEY,
                    value BLOB NOT NULL,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)
            conn.commit()
            self.logger.info(f"Key-value storage ready at {self.db_path}")

    def get(self, key: str) -> Optional[bytes]:
        """Read the blob stored under key.

        Returns:
            Blob bytes, or None if the slot is empty
        """
        with self.get_connection() as conn:
            row = conn.execute("SELECT value FROM kv_slots WHERE key = ?", (key,)).fetchone()
            if row is None:
                return None
            return bytes(row[0])

    def set(self, key: str, value: bytes) -> None:
        """Overwrite the blob stored under key."""
        with self.get_connection() as conn:
            conn.execute("""
                INSERT INTO kv_slots (key, value, updated_at)
                VALUES (?, ?, CURRENT_TIMESTAMP)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = CURRENT_TIMESTAMP
            """, (key, sqlite3.Binary(value)))
            conn.commit()
            self.logger.debug(f"Wrote {len(value)} bytes to slot '{key}'")

