"""SQLite signal store: one counter row per (language, signal kind).

Async via aiosqlite. Pass ":memory:" for a throwaway database.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import aiosqlite

from langprofile.errors import StoreFailure
from langprofile.storage.base import BaseSignalStore, validate_increment
from langprofile.storage.models import LanguageSignalInfo, SignalKind

logger = logging.getLogger(__name__)

_MEMORY_DB = ":memory:"

_SCHEMA = """
CREATE TABLE IF NOT EXISTS language_signal_info (
    language_tag TEXT NOT NULL,
    signal_kind TEXT NOT NULL,
    count INTEGER NOT NULL CHECK (count >= 1),
    PRIMARY KEY (language_tag, signal_kind)
);
"""

# ON CONFLICT keeps the existing rowid, so rowid order is first-write order.
_UPSERT = """
INSERT INTO language_signal_info (language_tag, signal_kind, count)
VALUES (?, ?, ?)
ON CONFLICT (language_tag, signal_kind) DO UPDATE SET count = count + excluded.count
RETURNING count
"""


class SignalStore(BaseSignalStore):
    """SQLite-backed store of language signal counters."""

    def __init__(self, db_path: str | Path = _MEMORY_DB) -> None:
        self.db_path = str(db_path)
        self._db: aiosqlite.Connection | None = None
        # One connection, one transaction at a time: writes are serialized.
        self._write_lock = asyncio.Lock()

    async def connect(self) -> None:
        """Open the database connection and create the table."""
        if self._db:
            return
        try:
            if self.db_path != _MEMORY_DB:
                Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
            self._db = await aiosqlite.connect(self.db_path)
            await self._db.executescript(_SCHEMA)
            await self._db.commit()
        except (aiosqlite.Error, OSError) as exc:
            raise StoreFailure(f"Could not open signal store at {self.db_path}") from exc
        logger.info(f"Signal store connected: {self.db_path}")

    async def close(self) -> None:
        """Close the database connection."""
        if self._db:
            await self._db.close()
            self._db = None

    def _connection(self) -> aiosqlite.Connection:
        if not self._db:
            raise StoreFailure("Signal store is not connected.")
        return self._db

    async def upsert_increment(
        self, language_tag: str, signal_kind: SignalKind, delta: int = 1
    ) -> int:
        validate_increment(language_tag, signal_kind, delta)
        db = self._connection()
        async with self._write_lock:
            try:
                rows = await db.execute_fetchall(
                    _UPSERT, (language_tag, signal_kind.value, delta)
                )
                await db.commit()
            except aiosqlite.Error as exc:
                logger.warning(f"Upsert failed for {language_tag}/{signal_kind.name}: {exc}")
                await db.rollback()
                raise StoreFailure(
                    f"Could not increment {language_tag}/{signal_kind.name}"
                ) from exc

        count = rows[0][0]
        logger.debug(f"{language_tag}/{signal_kind.name} -> {count}")
        return count

    async def get_all(self) -> list[LanguageSignalInfo]:
        return await self._select("", ())

    async def get(
        self, language_tag: str, signal_kind: SignalKind
    ) -> LanguageSignalInfo | None:
        rows = await self._select(
            "WHERE language_tag = ? AND signal_kind = ?",
            (language_tag, signal_kind.value),
        )
        return rows[0] if rows else None

    async def get_by_signal_kind(self, signal_kind: SignalKind) -> list[LanguageSignalInfo]:
        return await self._select("WHERE signal_kind = ?", (signal_kind.value,))

    async def _select(self, where: str, params: tuple) -> list[LanguageSignalInfo]:
        db = self._connection()
        try:
            rows = await db.execute_fetchall(
                f"SELECT language_tag, signal_kind, count FROM language_signal_info "
                f"{where} ORDER BY rowid",
                params,
            )
        except aiosqlite.Error as exc:
            raise StoreFailure("Could not read the signal store") from exc
        return [
            LanguageSignalInfo(language_tag=tag, signal_kind=SignalKind(kind), count=count)
            for tag, kind, count in rows
        ]
