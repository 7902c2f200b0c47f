"""
Unit tests for the SQLite-backed key-value storage.
"""

import pytest
import sqlite3
import tempfile
import os

from expensor.storage import KeyValueStorage, StorageError


class TestKeyValueStorage:
    """Test cases for KeyValueStorage class."""

    @pytest.fixture
    def temp_storage(self):
        """Create temporary storage for testing."""
        temp_file = tempfile.NamedTemporaryFile(delete=False, suffix='.db')
        temp_file.close()

        storage = KeyValueStorage(temp_file.name)
        storage.initialize()

        yield storage

        os.unlink(temp_file.name)

    def test_initialization_creates_table(self, temp_storage):
        with temp_storage.get_connection() as conn:
            row = conn.execute("""
                SELECT name FROM sqlite_master
                WHERE type='table' AND name='kv_slots'
            """).fetchone()
            assert row is not None

    def test_initialize_is_idempotent(self, temp_storage):
        temp_storage.set("SavedReceipts", b"[]")
        temp_storage.initialize()
        assert temp_storage.get("SavedReceipts") == b"[]"

    def test_get_missing_slot(self, temp_storage):
        assert temp_storage.get("SavedReceipts") is None

    def test_set_and_get(self, temp_storage):
        temp_storage.set("SavedReceipts", b"[]")
        assert temp_storage.get("SavedReceipts") == b"[]"

    def test_set_overwrites(self, temp_storage):
        """Test last write wins."""
        temp_storage.set("SavedReceipts", b"[1]")
        temp_storage.set("SavedReceipts", b"[2]")

        assert temp_storage.get("SavedReceipts") == b"[2]"
        with temp_storage.get_connection() as conn:
            count = conn.execute("SELECT COUNT(*) FROM kv_slots").fetchone()[0]
        assert count == 1

    def test_slots_are_independent(self, temp_storage):
        temp_storage.set("a", b"1")
        temp_storage.set("b", b"2")

        assert temp_storage.get("a") == b"1"
        assert temp_storage.get("b") == b"2"

    def test_values_survive_new_instance(self, temp_storage):
        temp_storage.set("SavedReceipts", b"payload")

        reopened = KeyValueStorage(temp_storage.db_path)
        assert reopened.get("SavedReceipts") == b"payload"

    def test_uninitialized_storage_raises(self, tmp_path):
        """Test SQLite errors surface as StorageError."""
        storage = KeyValueStorage(tmp_path / "empty.db")
        with pytest.raises(StorageError):
            storage.get("SavedReceipts")

    def test_storage_error_wraps_sqlite_error(self, tmp_path):
        storage = KeyValueStorage(tmp_path / "empty.db")
        with pytest.raises(StorageError) as exc_info:
            storage.set("a", b"1")
        assert isinstance(exc_info.value.__cause__, sqlite3.Error)
