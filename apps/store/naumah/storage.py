"""Key-value storage backends the local data store is built on."""
from __future__ import annotations

import sqlite3
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Union


class StorageError(Exception):
    """Raised by a backend when a read or write cannot be completed."""


class StorageUnavailableError(StorageError):
    pass


class StorageFullError(StorageError):
    pass


class StoragePort(ABC):
    """Minimal string key-value contract supplied by the host application.

    Backends raise on failure; callers decide how to degrade.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]: ...

    @abstractmethod
    def set(self, key: str, value: str) -> None: ...

    @abstractmethod
    def delete(self, key: str) -> None: ...

    @abstractmethod
    def list_keys(self, prefix: str) -> List[str]: ...


class MemoryStorage(StoragePort):
    """In-process dict backend, mostly for tests and single-run tools."""

    def __init__(self, *, max_items: Optional[int] = None, disabled: bool = False) -> None:
        self._items: Dict[str, str] = {}
        self.max_items = max_items
        self.disabled = disabled

    def _check_enabled(self) -> None:
        if self.disabled:
            raise StorageUnavailableError("storage is disabled")

    def get(self, key: str) -> Optional[str]:
        self._check_enabled()
        return self._items.get(key)

    def set(self, key: str, value: str) -> None:
        self._check_enabled()
        if (
            self.max_items is not None
            and key not in self._items
            and len(self._items) >= self.max_items
        ):
            raise StorageFullError(f"storage quota of {self.max_items} items exceeded")
        self._items[key] = value

    def delete(self, key: str) -> None:
        self._check_enabled()
        self._items.pop(key, None)

    def list_keys(self, prefix: str) -> List[str]:
        self._check_enabled()
        return sorted(key for key in self._items if key.startswith(prefix))

    def __len__(self) -> int:
        return len(self._items)


class SqliteStorage(StoragePort):
    """File-backed backend using a single kv_store table."""

    def __init__(self, db_path: Union[str, Path]) -> None:
        self.db_path = Path(db_path)

    def initialize(self) -> None:
        try:
            with sqlite3.connect(self.db_path) as conn:
                conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS kv_store (
                        key TEXT PRIMARY KEY,
                        value TEXT NOT NULL,
                        updated_at TEXT NOT NULL
                    );
                    """
                )
                conn.commit()
        except sqlite3.Error as exc:
            raise StorageUnavailableError(f"Unable to initialize {self.db_path}: {exc}") from exc

    @contextmanager
    def get_connection(self) -> Iterator[sqlite3.Connection]:
        try:
            conn = sqlite3.connect(self.db_path)
        except sqlite3.Error as exc:
            raise StorageUnavailableError(f"Unable to open {self.db_path}: {exc}") from exc
        try:
            yield conn
        except sqlite3.Error as exc:
            raise StorageError(str(exc)) from exc
        finally:
            conn.close()

    def get(self, key: str) -> Optional[str]:
        with self.get_connection() as conn:
            row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        now = datetime.now(tz=timezone.utc).isoformat()
        with self.get_connection() as conn:
            conn.execute(
                """
                INSERT INTO kv_store (key, value, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at
                """,
                (key, value, now),
            )
            conn.commit()

    def delete(self, key: str) -> None:
        with self.get_connection() as conn:
            conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
            conn.commit()

    def list_keys(self, prefix: str) -> List[str]:
        with self.get_connection() as conn:
            cursor = conn.execute(
                "SELECT key FROM kv_store WHERE substr(key, 1, ?) = ? ORDER BY key",
                (len(prefix), prefix),
            )
            return [row[0] for row in cursor.fetchall()]
