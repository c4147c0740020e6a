"""Base signal store interface: both store backends implement this."""

from __future__ import annotations

from abc import ABC, abstractmethod

from langprofile.storage.models import LanguageSignalInfo, SignalKind


class BaseSignalStore(ABC):
    """Abstract persistence for LanguageSignalInfo rows.

    Every mutation goes through upsert_increment, which must be atomic
    per (language_tag, signal_kind) key.
    """

    async def connect(self) -> None:
        """Open the underlying storage. Override if needed."""

    async def close(self) -> None:
        """Release the underlying storage. Override if needed."""

    async def __aenter__(self) -> "BaseSignalStore":
        await self.connect()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    @abstractmethod
    async def upsert_increment(
        self, language_tag: str, signal_kind: SignalKind, delta: int = 1
    ) -> int:
        """Add delta to the row's count, inserting it with count=delta if absent.

        Returns:
            The committed count for the key.
        """
        ...

    @abstractmethod
    async def get_all(self) -> list[LanguageSignalInfo]:
        """Return every row, in the order keys were first written."""
        ...

    async def get(
        self, language_tag: str, signal_kind: SignalKind
    ) -> LanguageSignalInfo | None:
        """Look up a single row by key."""
        for info in await self.get_all():
            if info.key == (language_tag, signal_kind):
                return info
        return None

    async def get_by_signal_kind(self, signal_kind: SignalKind) -> list[LanguageSignalInfo]:
        """Return the rows for one signal kind, in first-write order."""
        return [info for info in await self.get_all() if info.signal_kind == signal_kind]


def validate_increment(language_tag: str, signal_kind: SignalKind, delta: int) -> None:
    """Reject arguments that would break the row invariants."""
    if not isinstance(language_tag, str) or not language_tag.strip():
        raise ValueError("language_tag must be a non-empty string.")
    if not isinstance(signal_kind, SignalKind):
        raise ValueError(f"Unknown signal kind: {signal_kind!r}")
    if delta < 1:
        raise ValueError(f"delta must be >= 1, got {delta}.")
