"""
Tests for the database registry.
"""

import json
import time

import pytest

from jsondb.config import JsonDBConfig
from jsondb.errors import (
    DatabaseExistsError,
    DatabaseNotFoundError,
    DatabaseReadError,
    StoreUnavailable,
)
from jsondb.registry import DatabaseRegistry
from jsondb.storage.snapshot import SnapshotWriter


class TestDatabaseRegistry:
    """Loading, caching and closing databases."""

    def test_get_loads_snapshot(self, registry, caplog):
        caplog.set_level("INFO", logger="jsondb")
        collection = registry.get("sample")
        assert len(collection) == 4
        assert registry.is_open("sample")
        assert "getDb :: Database loaded: sample, Records: 4" in caplog.text

    def test_name_with_suffix(self, registry):
        assert registry.get("sample.json").count({}) == 4
        assert registry.names() == ["sample"]

    def test_handles_share_one_store(self, registry):
        first = registry.get("sample")
        second = registry.get("sample")
        first.insert({"_id": "new"})
        assert "new" in second

    def test_store_is_not_reloaded(self, registry, data_dir):
        registry.get("sample")
        (data_dir / "sample.json").write_text("{}", encoding="utf-8")
        assert registry.get("sample").count({}) == 4

    def test_writes_reach_disk(self, registry, data_dir):
        registry.get("sample").insert({"_id": "5", "name": "five"})
        assert registry.flush(timeout=5)
        on_disk = json.loads((data_dir / "sample.json").read_text(encoding="utf-8"))
        assert on_disk["5"] == {"_id": "5", "name": "five"}

    def test_skip_save_leaves_disk_untouched(self, registry, data_dir):
        registry.get("sample").remove({"_id": "1"}, {"skip_save": True})
        registry.flush()
        on_disk = json.loads((data_dir / "sample.json").read_text(encoding="utf-8"))
        assert "1" in on_disk

    def test_missing_database(self, registry, error_log):
        with pytest.raises(DatabaseNotFoundError):
            registry.get("absent")
        assert 'getDb :: Database not found: "absent"' in error_log.text
        assert not registry.is_open("absent")

    def test_unreadable_database(self, registry, data_dir):
        (data_dir / "broken.json").write_text("[]", encoding="utf-8")
        with pytest.raises(DatabaseReadError):
            registry.get("broken")

    def test_create_missing(self, data_dir):
        with DatabaseRegistry(data_dir, create_missing=True) as db_registry:
            assert db_registry.get("fresh").count({}) == 0
        assert json.loads((data_dir / "fresh.json").read_text()) == {}

    def test_create(self, registry, data_dir):
        registry.create("made")
        registry.flush()
        assert (data_dir / "made.json").exists()
        with pytest.raises(DatabaseExistsError):
            registry.create("made")
        with pytest.raises(DatabaseExistsError):
            registry.create("sample")

    def test_no_data_dir(self):
        db_registry = DatabaseRegistry("")
        try:
            with pytest.raises(StoreUnavailable, match="Database directory is not set"):
                db_registry.get("sample")
        finally:
            db_registry.writer.close()

    def test_close(self, registry, error_log):
        registry.get("sample")
        assert registry.close("sample")
        assert not registry.is_open("sample")
        assert not registry.close("sample")
        assert "closeDb :: DB does not exist" in error_log.text

    def test_context_manager_flushes_and_closes(self, data_dir):
        with DatabaseRegistry(data_dir) as db_registry:
            db_registry.get("sample").insert({"_id": "ctx"})
        assert db_registry.writer.closed
        assert db_registry.names() == []
        assert "ctx" in json.loads((data_dir / "sample.json").read_text())

    def test_from_config(self, data_dir):
        config = JsonDBConfig.from_dict(
            {"storage": {"data_dir": str(data_dir), "create_missing": True, "max_workers": 1}}
        )
        with DatabaseRegistry.from_config(config) as db_registry:
            assert db_registry.data_dir == str(data_dir)
            assert db_registry.create_missing

    def test_round_trip_in_fresh_registry(self, data_dir):
        with DatabaseRegistry(data_dir) as first:
            collection = first.get("sample")
            collection.insert({"_id": "5", "text": "ünïcode"})
            collection.update({"_id": "1"}, {"$push": {"vals": 2}})
            expected = collection.find({})

        with DatabaseRegistry(data_dir) as second:
            assert second.get("sample").find({}) == expected


class TestReopen:
    """Reopening a database never loses a write queued before it was closed."""

    @pytest.fixture
    def slow_writes(self, monkeypatch):
        original_write = SnapshotWriter._write

        def slow_write(writer, path, content):
            time.sleep(0.2)
            original_write(writer, path, content)

        monkeypatch.setattr(SnapshotWriter, "_write", slow_write)

    def test_close_then_get(self, data_dir, slow_writes):
        with DatabaseRegistry(data_dir) as db_registry:
            db_registry.get("sample").insert({"_id": "last"})
            assert db_registry.close("sample")
            assert "last" in db_registry.get("sample")

    def test_close_all_then_get(self, data_dir, slow_writes):
        with DatabaseRegistry(data_dir) as db_registry:
            db_registry.get("sample").insert({"_id": "last"})
            db_registry.close_all()
            assert "last" in db_registry.get("sample")

    def test_created_database_keeps_insert(self, data_dir, slow_writes):
        with DatabaseRegistry(data_dir, create_missing=True) as db_registry:
            db_registry.get("fresh").insert({"_id": "a"})
            db_registry.close("fresh")
            reopened = db_registry.get("fresh")
            assert "a" in reopened
            reopened.insert({"_id": "b"})

        on_disk = json.loads((data_dir / "fresh.json").read_text(encoding="utf-8"))
        assert list(on_disk) == ["a", "b"]
