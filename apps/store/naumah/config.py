"""Local store configuration utilities."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field

from .storage import MemoryStorage, SqliteStorage, StoragePort

logger = logging.getLogger(__name__)


class AppConfig(BaseModel):
    """Strongly typed configuration loaded from config.json."""

    storage_prefix: str = Field(default="naumah_", min_length=1)
    storage_backend: Literal["memory", "sqlite"] = Field(default="sqlite")
    database_path: str = Field(default="./data/naumah_store.db")

    @property
    def resolved_database_path(self) -> Path:
        """Return the absolute path for the SQLite database file."""
        path = Path(self.database_path)
        if path.is_absolute():
            return path
        return (Path(__file__).resolve().parents[1] / path).resolve()


def _config_path() -> Path:
    return Path(__file__).resolve().parents[1] / "config.json"


def load_config(path: Optional[Path] = None) -> AppConfig:
    """Load configuration from config.json, falling back to defaults if missing."""

    config_file = path or _config_path()
    if not config_file.exists():
        logger.info("No config at %s, using default local store settings", config_file)
        return AppConfig()

    try:
        contents: Dict[str, Any] = json.loads(config_file.read_text())
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {config_file}: {exc}") from exc
    return AppConfig(**contents)


def build_storage(config: AppConfig) -> StoragePort:
    if config.storage_backend == "memory":
        return MemoryStorage()
    db_path = config.resolved_database_path
    db_path.parent.mkdir(parents=True, exist_ok=True)
    storage = SqliteStorage(db_path)
    storage.initialize()
    return storage
