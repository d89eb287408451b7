"""Key-value persistence media for the fallback store.

The fallback store serializes its entire state under one fixed key, so a
backend only needs to get and set opaque strings. MemoryBackend is used in
tests; SQLiteBackend is the durable production medium.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

import aiosqlite

from agentprep.errors import StorageUnavailableError

_SCHEMA = """
CREATE TABLE IF NOT EXISTS kv_store (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);
"""


class KeyValueBackend(ABC):
    """Abstract string key-value medium."""

    async def initialize(self) -> None:
        """Open the medium. No-op by default."""

    async def close(self) -> None:
        """Release the medium. No-op by default."""

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the stored value, or None when the key was never written."""

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Replace the value stored under ``key`` atomically."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove ``key``. Missing keys are ignored."""


class MemoryBackend(KeyValueBackend):
    """In-process dictionary. State is lost when the object is discarded."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> str | None:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)


class SQLiteBackend(KeyValueBackend):
    """Async SQLite key-value table."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path
        self._db: aiosqlite.Connection | None = None

    async def initialize(self) -> None:
        """Open connection and create schema."""
        try:
            self._db = await aiosqlite.connect(str(self.db_path))
            await self._db.executescript(_SCHEMA)
            await self._db.commit()
        except (aiosqlite.Error, OSError) as exc:
            raise StorageUnavailableError(f"Cannot open database at {self.db_path}") from exc

    async def close(self) -> None:
        if self._db:
            await self._db.close()
            self._db = None

    @property
    def db(self) -> aiosqlite.Connection:
        if self._db is None:
            raise StorageUnavailableError("SQLiteBackend not initialized; call initialize() first")
        return self._db

    async def get(self, key: str) -> str | None:
        try:
            cursor = await self.db.execute("SELECT value FROM kv_store WHERE key = ?", (key,))
            row = await cursor.fetchone()
        except aiosqlite.Error as exc:
            raise StorageUnavailableError(f"Failed to read {key!r}") from exc
        return row[0] if row else None

    async def set(self, key: str, value: str) -> None:
        try:
            await self.db.execute(
                """INSERT INTO kv_store (key, value) VALUES (?, ?)
                   ON CONFLICT(key) DO UPDATE SET
                     value=excluded.value,
                     updated_at=CURRENT_TIMESTAMP""",
                (key, value),
            )
            await self.db.commit()
        except aiosqlite.Error as exc:
            raise StorageUnavailableError(f"Failed to write {key!r}") from exc

    async def delete(self, key: str) -> None:
        try:
            await self.db.execute("DELETE FROM kv_store WHERE key = ?", (key,))
            await self.db.commit()
        except aiosqlite.Error as exc:
            raise StorageUnavailableError(f"Failed to delete {key!r}") from exc
