"""Conversation request schema: the input to conversation-action ingestion.

Mirrors what a conversation-actions caller hands over: the recent messages
of one thread plus free-form extras.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone


@dataclass
class ConversationMessage:
    """A single message in a conversation thread."""

    text: str = ""
    author: str = ""                                # Sender identifier, empty for unknown
    reference_time: datetime | None = None          # When the message was sent
    extras: dict = field(default_factory=dict)      # Grouping metadata, e.g. notification key

    @property
    def is_blank(self) -> bool:
        """Check if the message carries no text worth detecting."""
        return not self.text or not self.text.strip()


@dataclass
class ConversationActionsRequest:
    """A batch of messages submitted together for conversation actions."""

    messages: list[ConversationMessage] = field(default_factory=list)
    extras: dict = field(default_factory=dict)

    @property
    def latest_reference_time(self) -> datetime | None:
        """Return the newest reference time among the messages, if any have one.

        Naive times are read as UTC so they compare with aware ones.
        """
        times = [
            m.reference_time if m.reference_time.tzinfo else m.reference_time.replace(tzinfo=timezone.utc)
            for m in self.messages
            if m.reference_time is not None
        ]
        return max(times) if times else None
