"""Notification-key extraction: groups the messages of one ingestion call."""

from __future__ import annotations

from dataclasses import dataclass, field

from langprofile.conversation.message import ConversationActionsRequest, ConversationMessage

# Extras entry that names the notification a request belongs to.
NOTIFICATION_KEY = "notification_key"

DEFAULT_NOTIFICATION_KEY = "default_notification_key"


@dataclass
class MessageGroup:
    """The messages of one call, under their effective notification key."""

    notification_key: str
    messages: list[ConversationMessage] = field(default_factory=list)


def extract_notification_key(
    request: ConversationActionsRequest, default: str = DEFAULT_NOTIFICATION_KEY
) -> str:
    """Return the notification key for the whole request.

    The request's own extras win; otherwise the first message that declares
    a key supplies it; otherwise the default key is used.
    """
    key = request.extras.get(NOTIFICATION_KEY)
    if key:
        return str(key)
    for message in request.messages:
        key = message.extras.get(NOTIFICATION_KEY)
        if key:
            return str(key)
    return default


def group_by_notification_key(
    request: ConversationActionsRequest, default: str = DEFAULT_NOTIFICATION_KEY
) -> MessageGroup:
    """Bundle the request's non-blank messages under its notification key."""
    return MessageGroup(
        notification_key=extract_notification_key(request, default),
        messages=[m for m in request.messages if not m.is_blank],
    )
