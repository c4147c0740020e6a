"""In-memory signal store, for tests and short-lived processes."""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict

from langprofile.storage.base import BaseSignalStore, validate_increment
from langprofile.storage.models import LanguageSignalInfo, SignalKind

logger = logging.getLogger(__name__)


class InMemorySignalStore(BaseSignalStore):
    """Keeps counters in an insertion-ordered dict.

    Each key has its own lock, so increments on different keys never wait
    on each other and increments on the same key are applied one at a time.
    """

    def __init__(self) -> None:
        self._counts: dict[tuple[str, SignalKind], int] = {}
        self._locks: defaultdict[tuple[str, SignalKind], asyncio.Lock] = defaultdict(
            asyncio.Lock
        )

    async def upsert_increment(
        self, language_tag: str, signal_kind: SignalKind, delta: int = 1
    ) -> int:
        validate_increment(language_tag, signal_kind, delta)
        key = (language_tag, signal_kind)
        async with self._locks[key]:
            count = self._counts.get(key, 0) + delta
            self._counts[key] = count
        logger.debug(f"{language_tag}/{signal_kind.name} -> {count}")
        return count

    async def get_all(self) -> list[LanguageSignalInfo]:
        return [
            LanguageSignalInfo(language_tag=tag, signal_kind=kind, count=count)
            for (tag, kind), count in self._counts.items()
        ]
