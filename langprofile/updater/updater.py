"""Language profile updater: turns ingestion requests into counter increments.

Pipeline: request → notification key → detection → store upsert.
Each public call is queued as one unit of work; the caller gets back an
asyncio task to await.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections import OrderedDict
from datetime import datetime
from typing import Awaitable, Callable, Iterable, Union

from langprofile.conversation.message import ConversationActionsRequest
from langprofile.errors import DetectionFailure
from langprofile.storage.base import BaseSignalStore
from langprofile.storage.models import SignalKind
from langprofile.updater.dedup import (
    DEFAULT_NOTIFICATION_KEY,
    NOTIFICATION_KEY,
    group_by_notification_key,
)

logger = logging.getLogger(__name__)

# text -> language tags, most confident first. May be sync or async.
LanguageDetector = Callable[[str], Union[list[str], Awaitable[list[str]]]]


class LanguageProfileUpdater:
    """Records how often each language is used, per signal kind.

    Calls run one at a time in submission order, so a call that was awaited
    is fully visible to every call submitted after it. Increments inside a
    call are applied one language at a time; if a later one fails, earlier
    ones stay committed and the returned task carries the error.
    """

    NOTIFICATION_KEY = NOTIFICATION_KEY

    def __init__(
        self,
        store: BaseSignalStore,
        default_notification_key: str = DEFAULT_NOTIFICATION_KEY,
        suppress_replays: bool = False,
        replay_cache_size: int = 256,
    ) -> None:
        self.store = store
        self.default_notification_key = default_notification_key
        self.suppress_replays = suppress_replays
        self.replay_cache_size = replay_cache_size
        self._queue_lock = asyncio.Lock()
        self._pending: set[asyncio.Task] = set()
        # notification key -> newest reference time already counted
        self._last_counted: OrderedDict[str, datetime] = OrderedDict()

    # ─── Public API ──────────────────────────────────────────────

    def update_from_conversation_actions_async(
        self, request: ConversationActionsRequest, detector: LanguageDetector
    ) -> asyncio.Task:
        """Queue a conversation-actions update.

        Every distinct top-ranked language among the request's messages
        gets exactly one CONVERSATION_ACTIONS increment.

        Args:
            request: The messages submitted together for conversation actions.
            detector: Function from text to ranked language tags.

        Returns:
            Task that resolves to None once the increments are committed.
        """
        return self._submit(self._update_from_conversation_actions, request, detector)

    def update_from_classify_text_async(self, language_tags: Iterable[str]) -> asyncio.Task:
        """Queue a classify-text update: one CLASSIFY_TEXT increment per distinct tag."""
        return self._submit(self._update_from_classify_text, list(language_tags))

    async def aclose(self) -> None:
        """Wait for every queued call to finish."""
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)

    # ─── Work queue ──────────────────────────────────────────────

    def _submit(self, func: Callable[..., Awaitable[None]], *args) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(self._run_serially(func, *args))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _run_serially(self, func: Callable[..., Awaitable[None]], *args) -> None:
        # asyncio.Lock wakes waiters in FIFO order, which keeps submission order.
        async with self._queue_lock:
            await func(*args)

    # ─── Units of work ───────────────────────────────────────────

    async def _update_from_conversation_actions(
        self, request: ConversationActionsRequest, detector: LanguageDetector
    ) -> None:
        group = group_by_notification_key(request, self.default_notification_key)
        if self._is_replay(group.notification_key, request):
            logger.debug(f"Skipping replayed request for {group.notification_key}")
            return

        languages: list[str] = []
        for message in group.messages:
            tag = await self._detect_top_language(message.text, detector)
            if tag:
                languages.append(tag)

        await self._increment_each(languages, SignalKind.CONVERSATION_ACTIONS)
        self._remember(group.notification_key, request)

    async def _update_from_classify_text(self, language_tags: list[str]) -> None:
        await self._increment_each(
            [tag for tag in language_tags if tag and tag.strip()],
            SignalKind.CLASSIFY_TEXT,
        )

    async def _increment_each(self, language_tags: list[str], signal_kind: SignalKind) -> None:
        for tag in dict.fromkeys(language_tags):
            count = await self.store.upsert_increment(tag, signal_kind, 1)
            logger.debug(f"Counted {tag} for {signal_kind.name} (now {count})")

    @staticmethod
    async def _detect_top_language(text: str, detector: LanguageDetector) -> str | None:
        try:
            result = detector(text)
            if inspect.isawaitable(result):
                result = await result
        except Exception as exc:
            raise DetectionFailure(f"Language detection failed: {exc}") from exc

        if isinstance(result, str):
            result = [result]
        elif result is not None and not isinstance(result, (list, tuple)):
            raise DetectionFailure(
                f"Detector returned {type(result).__name__}, expected a list of language tags"
            )

        for tag in result or []:
            if isinstance(tag, str) and tag.strip():
                return tag
        return None

    # ─── Replay suppression ──────────────────────────────────────

    def _is_replay(self, notification_key: str, request: ConversationActionsRequest) -> bool:
        """Check if every message was already counted under this notification key."""
        if not self.suppress_replays:
            return False
        latest = request.latest_reference_time
        last = self._last_counted.get(notification_key)
        if latest is None or last is None:
            return False
        return latest <= last

    def _remember(self, notification_key: str, request: ConversationActionsRequest) -> None:
        if not self.suppress_replays:
            return
        latest = request.latest_reference_time
        if latest is None:
            return
        previous = self._last_counted.get(notification_key)
        if previous is None or latest > previous:
            self._last_counted[notification_key] = latest
        self._last_counted.move_to_end(notification_key)
        while len(self._last_counted) > self.replay_cache_size:
            self._last_counted.popitem(last=False)
