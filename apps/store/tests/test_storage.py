from __future__ import annotations

import pytest

from naumah.local_store import LocalDataStore
from naumah.storage import (
    MemoryStorage,
    SqliteStorage,
    StorageError,
    StorageFullError,
    StorageUnavailableError,
)

from store_helpers import make_storage


@pytest.mark.parametrize("kind", ["memory", "sqlite"])
def test_basic_get_set_delete(kind: str, tmp_path) -> None:
    storage = make_storage(kind, tmp_path)

    assert storage.get("missing") is None
    storage.set("naumah_a", "1")
    storage.set("naumah_a", "2")
    assert storage.get("naumah_a") == "2"

    storage.delete("naumah_a")
    storage.delete("naumah_a")
    assert storage.get("naumah_a") is None


@pytest.mark.parametrize("kind", ["memory", "sqlite"])
def test_list_keys_matches_prefix_literally(kind: str, tmp_path) -> None:
    storage = make_storage(kind, tmp_path)
    for key in ["week_1", "week_10", "weekX1", "week%2", "other"]:
        storage.set(key, "x")

    assert storage.list_keys("week_") == ["week_1", "week_10"]
    assert storage.list_keys("week%") == ["week%2"]
    assert storage.list_keys("nothing") == []


def test_memory_quota_counts_new_keys_only() -> None:
    storage = MemoryStorage(max_items=2)
    storage.set("a", "1")
    storage.set("b", "1")
    storage.set("a", "2")

    with pytest.raises(StorageFullError):
        storage.set("c", "1")
    assert len(storage) == 2


def test_disabled_memory_storage_raises() -> None:
    storage = MemoryStorage(disabled=True)

    with pytest.raises(StorageUnavailableError):
        storage.get("a")
    with pytest.raises(StorageUnavailableError):
        storage.list_keys("")


def test_sqlite_persists_across_instances(tmp_path) -> None:
    path = tmp_path / "store.db"
    first = SqliteStorage(path)
    first.initialize()
    first.set("naumah_last_update", "2025-03-01T12:00:00+00:00")

    second = SqliteStorage(path)
    assert second.get("naumah_last_update") == "2025-03-01T12:00:00+00:00"


def test_sqlite_unreachable_path_is_unavailable(tmp_path) -> None:
    storage = SqliteStorage(tmp_path / "missing" / "store.db")

    with pytest.raises(StorageUnavailableError):
        storage.initialize()


def test_sqlite_without_table_raises_storage_error(tmp_path) -> None:
    storage = SqliteStorage(tmp_path / "store.db")

    with pytest.raises(StorageError):
        storage.set("a", "1")
    assert LocalDataStore(storage).is_available() is False
