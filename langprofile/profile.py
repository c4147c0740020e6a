"""Language profile: read-side summary over the signal store."""

from __future__ import annotations

from dataclasses import dataclass

from langprofile.storage.base import BaseSignalStore
from langprofile.storage.models import SignalKind


@dataclass
class LanguageUsage:
    """Usage of one language for one signal kind."""

    language_tag: str
    count: int
    share: float    # count / total count for the signal kind


class LanguageProfile:
    """Answers "which languages does this user use?" from stored counters."""

    def __init__(self, store: BaseSignalStore) -> None:
        self.store = store

    async def usage(self, signal_kind: SignalKind) -> list[LanguageUsage]:
        """Return per-language usage for a signal kind, most used first.

        Ties keep first-seen order.
        """
        infos = await self.store.get_by_signal_kind(signal_kind)
        total = sum(info.count for info in infos)
        if total == 0:
            return []
        ranked = sorted(infos, key=lambda info: info.count, reverse=True)
        return [
            LanguageUsage(language_tag=info.language_tag, count=info.count, share=info.count / total)
            for info in ranked
        ]

    async def frequent_languages(
        self, signal_kind: SignalKind, min_share: float = 0.1
    ) -> list[str]:
        """Return the tags whose share of a signal kind is at least min_share."""
        if not 0.0 <= min_share <= 1.0:
            raise ValueError(f"min_share must be between 0 and 1, got {min_share}.")
        return [u.language_tag for u in await self.usage(signal_kind) if u.share >= min_share]
