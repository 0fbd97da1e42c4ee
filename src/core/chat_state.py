"""Per-chat greeting state (core domain).

The table owns one ChatState per chat and answers whether a greeting may be
posted now. Throttling and duplicate suppression are separate predicates so
each rule can be checked on its own.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta
from typing import Optional

from core.models import ChatState, MessageRef

REASON_ALREADY_LATEST = "already latest"
REASON_DELAY_NOT_ELAPSED = "delay not elapsed"


class ChatStateTable:
    """In-memory table of ChatState records keyed by chat id.

    Callers must hold ``lock(chat_id)`` around read-modify-write sequences
    for the same chat; the table itself does no locking.
    """

    def __init__(self) -> None:
        self._states: dict[int, ChatState] = {}
        self._locks: dict[int, asyncio.Lock] = {}

    def __len__(self) -> int:
        return len(self._states)

    def __contains__(self, chat_id: object) -> bool:
        return chat_id in self._states

    def get_or_create(self, chat_id: int) -> ChatState:
        state = self._states.get(chat_id)
        if state is None:
            state = ChatState(chat_id=chat_id)
            self._states[chat_id] = state
        return state

    def lock(self, chat_id: int) -> asyncio.Lock:
        """Return the lock serializing event handling for one chat."""

        lock = self._locks.get(chat_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[chat_id] = lock
        return lock

    def is_bot_message_latest(self, chat_id: int) -> bool:
        return self.get_or_create(chat_id).bot_message_is_latest

    def delay_elapsed(self, chat_id: int, now: datetime, min_delay: timedelta) -> bool:
        """True if nothing was sent yet or at least ``min_delay`` has passed."""

        last_sent_at = self.get_or_create(chat_id).last_sent_at
        if last_sent_at is None:
            return True
        return now - last_sent_at >= min_delay

    def should_greet(self, chat_id: int, now: datetime, min_delay: timedelta) -> bool:
        return not self.is_bot_message_latest(chat_id) and self.delay_elapsed(chat_id, now, min_delay)

    def suppression_reason(self, chat_id: int, now: datetime, min_delay: timedelta) -> Optional[str]:
        """Explain why ``should_greet`` is False, or None when it is True."""

        if self.is_bot_message_latest(chat_id):
            return REASON_ALREADY_LATEST
        if not self.delay_elapsed(chat_id, now, min_delay):
            return REASON_DELAY_NOT_ELAPSED
        return None

    def mark_sent(self, chat_id: int, now: datetime, ref: MessageRef) -> None:
        state = self.get_or_create(chat_id)
        state.last_sent_at = now
        state.bot_message_is_latest = True
        state.last_sent_message_ref = ref

    def mark_activity(self, chat_id: int) -> None:
        self.get_or_create(chat_id).bot_message_is_latest = False

    def forget_message(self, chat_id: int) -> None:
        """Drop the reference to a greeting that no longer exists."""

        state = self.get_or_create(chat_id)
        if state.bot_message_is_latest:
            raise ValueError(f"Chat {chat_id}: cannot forget the latest greeting")
        state.last_sent_message_ref = None
