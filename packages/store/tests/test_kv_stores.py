"""Tests for the key-value store backends."""

from __future__ import annotations

from catrisk_store.file import FileStore
from catrisk_store.memory import MemoryStore
from catrisk_store.sqlite import SQLiteStore

# ---------------------------------------------------------------------------
# MemoryStore
# ---------------------------------------------------------------------------


class TestMemoryStore:
    def test_missing_key_returns_none(self):
        assert MemoryStore().get("catrisk_history") is None

    def test_set_and_get(self):
        store = MemoryStore()
        store.set("k", b"[]")
        assert store.get("k") == b"[]"

    def test_initial_data(self):
        assert MemoryStore({"k": b"x"}).get("k") == b"x"

    def test_close_is_safe(self):
        MemoryStore().close()


# ---------------------------------------------------------------------------
# FileStore
# ---------------------------------------------------------------------------


class TestFileStore:
    def test_missing_key_returns_none(self, tmp_path):
        assert FileStore(str(tmp_path)).get("catrisk_history") is None

    def test_set_creates_directory(self, tmp_path):
        store = FileStore(str(tmp_path / "nested" / ".catrisk"))
        store.set("catrisk_history", b'[{"id": "1"}]')
        assert (tmp_path / "nested" / ".catrisk" / "catrisk_history.json").read_bytes() == b'[{"id": "1"}]'

    def test_overwrite(self, tmp_path):
        store = FileStore(str(tmp_path))
        store.set("k", b"first")
        store.set("k", b"second")
        assert store.get("k") == b"second"

    def test_no_temp_files_left_behind(self, tmp_path):
        store = FileStore(str(tmp_path))
        store.set("k", b"data")
        assert [p.name for p in tmp_path.iterdir()] == ["k.json"]

    def test_unsafe_key_characters_are_replaced(self, tmp_path):
        store = FileStore(str(tmp_path))
        store.set("../escape", b"data")
        assert store.get("../escape") == b"data"
        assert (tmp_path / ".._escape.json").exists()


# ---------------------------------------------------------------------------
# SQLiteStore
# ---------------------------------------------------------------------------


class TestSQLiteStore:
    def test_missing_key_returns_none(self, tmp_path):
        store = SQLiteStore(db_path=str(tmp_path / "test.db"))
        assert store.get("k") is None
        store.close()

    def test_upsert(self, tmp_path):
        store = SQLiteStore(db_path=str(tmp_path / "test.db"))
        store.set("k", b"first")
        store.set("k", b"second")
        assert store.get("k") == b"second"
        store.close()

    def test_persists_across_connections(self, tmp_path):
        db = str(tmp_path / "test.db")
        store = SQLiteStore(db_path=db)
        store.set("catrisk_history", b"[]")
        store.close()

        reopened = SQLiteStore(db_path=db)
        assert reopened.get("catrisk_history") == b"[]"
        reopened.close()

