from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from naumah.config import AppConfig, build_storage, load_config
from naumah.storage import MemoryStorage, SqliteStorage


def test_missing_config_uses_defaults(tmp_path) -> None:
    config = load_config(tmp_path / "config.json")

    assert config == AppConfig()
    assert config.storage_prefix == "naumah_"
    assert config.resolved_database_path.name == "naumah_store.db"


def test_memory_backend_from_config(tmp_path) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"storage_backend": "memory", "storage_prefix": "test_"}))

    config = load_config(path)

    assert config.storage_prefix == "test_"
    assert isinstance(build_storage(config), MemoryStorage)


def test_sqlite_backend_creates_database(tmp_path) -> None:
    db_path = tmp_path / "nested" / "store.db"
    config = AppConfig(storage_backend="sqlite", database_path=str(db_path))

    storage = build_storage(config)

    assert isinstance(storage, SqliteStorage)
    assert db_path.exists()
    storage.set("naumah_last_update", "x")
    assert storage.list_keys("naumah_") == ["naumah_last_update"]


def test_malformed_config_raises(tmp_path) -> None:
    path = tmp_path / "config.json"
    path.write_text("{storage_backend: memory")

    with pytest.raises(ValueError, match="Invalid JSON"):
        load_config(path)


def test_unknown_backend_rejected(tmp_path) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"storage_backend": "redis"}))

    with pytest.raises(ValidationError):
        load_config(path)
