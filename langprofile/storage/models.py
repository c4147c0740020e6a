"""Row model for the language signal store."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class SignalKind(str, Enum):
    """The kind of event that produced a language observation."""

    CONVERSATION_ACTIONS = "suggest_conversation_actions"
    CLASSIFY_TEXT = "classify_text"


@dataclass(frozen=True)
class LanguageSignalInfo:
    """How many times a language was seen for one signal kind.

    One row exists per (language_tag, signal_kind) pair.
    """

    language_tag: str       # BCP-47 tag as produced by the detector
    signal_kind: SignalKind
    count: int = 1

    @property
    def key(self) -> tuple[str, SignalKind]:
        """Primary key of the row."""
        return (self.language_tag, self.signal_kind)
