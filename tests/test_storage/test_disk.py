"""Tests for the diskcache-backed storage backend."""

from __future__ import annotations

import sqlite3
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import diskcache
import pytest

from apicache.exceptions import StorageError
from apicache.models import CacheEntry
from apicache.storage import DiskCacheStorage


NOW = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _entry(key: str, data: object = None) -> CacheEntry:
    return CacheEntry(
        key=key,
        data=data if data is not None else {"id": 1, "name": "test"},
        cached_at=NOW,
        expires_at=NOW + timedelta(seconds=300),
    )


@pytest.fixture()
def storage(tmp_path):
    """Create a DiskCacheStorage pointing at tmp_path."""
    s = DiskCacheStorage(tmp_path)
    yield s
    s.close()


class TestGetSet:
    def test_round_trips_entries(self, storage: DiskCacheStorage) -> None:
        entry = _entry("GET:/users:")
        storage.set("GET:/users:", entry)
        assert storage.get("GET:/users:") == entry

    def test_miss_returns_none(self, storage: DiskCacheStorage) -> None:
        assert storage.get("missing") is None

    def test_delete_and_clear(self, storage: DiskCacheStorage) -> None:
        storage.set("a", _entry("a"))
        storage.set("b", _entry("b"))
        storage.delete("a")
        assert storage.keys() == ["b"]
        storage.clear()
        assert storage.keys() == []

    def test_delete_missing_key_is_noop(self, storage: DiskCacheStorage) -> None:
        storage.delete("missing")
        assert len(storage) == 0

    def test_membership(self, storage: DiskCacheStorage) -> None:
        storage.set("a", _entry("a"))
        assert "a" in storage
        assert "b" not in storage


class TestPersistence:
    def test_entries_survive_reopen(self, tmp_path) -> None:
        with DiskCacheStorage(tmp_path) as first:
            first.set("GET:/users:", _entry("GET:/users:"))

        with DiskCacheStorage(tmp_path) as second:
            entry = second.get("GET:/users:")
            assert entry is not None
            assert entry.data == {"id": 1, "name": "test"}
            assert entry.expires_at == NOW + timedelta(seconds=300)

    def test_directory_layout(self, tmp_path) -> None:
        with DiskCacheStorage(tmp_path) as storage:
            assert storage.directory == tmp_path / "responses"
            assert (tmp_path / "responses").is_dir()


class TestErrors:
    def test_read_failure_is_a_miss(self, storage: DiskCacheStorage) -> None:
        storage.set("a", _entry("a"))
        with patch.object(storage._cache, "get", side_effect=sqlite3.OperationalError("locked")):
            assert storage.get("a") is None

    def test_foreign_value_is_a_miss(self, storage: DiskCacheStorage) -> None:
        storage._cache.set("raw", {"not": "an entry"})
        assert storage.get("raw") is None

    def test_write_failure_raises_storage_error(self, storage: DiskCacheStorage) -> None:
        with patch.object(storage._cache, "set", side_effect=OSError("disk full")):
            with pytest.raises(StorageError, match="disk full"):
                storage.set("a", _entry("a"))

    @pytest.mark.parametrize(
        "exc",
        [ModuleNotFoundError("No module named 'old_models'"), AttributeError("CacheEntry")],
    )
    def test_entry_that_no_longer_unpickles_is_a_miss(
        self, storage: DiskCacheStorage, exc: Exception
    ) -> None:
        storage.set("a", _entry("a"))
        with patch.object(storage._cache, "get", side_effect=exc):
            assert storage.get("a") is None

    def test_listing_failure_raises_storage_error(self, storage: DiskCacheStorage) -> None:
        with patch.object(
            storage._cache, "iterkeys", side_effect=sqlite3.OperationalError("locked")
        ):
            with pytest.raises(StorageError, match="list cache keys"):
                storage.keys()

    def test_count_failure_raises_storage_error(self, storage: DiskCacheStorage) -> None:
        with patch.object(
            diskcache.Cache, "__len__", side_effect=sqlite3.OperationalError("locked")
        ):
            with pytest.raises(StorageError, match="count cache entries"):
                len(storage)

    def test_membership_failure_is_absent(self, storage: DiskCacheStorage) -> None:
        storage.set("a", _entry("a"))
        with patch.object(
            diskcache.Cache, "__contains__", side_effect=sqlite3.OperationalError("locked")
        ):
            assert ("a" in storage) is False


class TestStats:
    def test_stats(self, storage: DiskCacheStorage, tmp_path) -> None:
        storage.set("a", _entry("a"))
        stats = storage.stats()
        assert stats["size"] == 1
        assert stats["directory"] == str(tmp_path / "responses")
        assert stats["volume"] > 0
