"""Greeting text lookup and update (core domain)."""

from __future__ import annotations

import asyncio
import logging
from typing import Mapping, Optional

from core.chat_state import ChatStateTable
from core.ports import GreetingPersistencePort

LOGGER = logging.getLogger(__name__)


class GreetingStore:
    """Default greeting plus per-chat overrides kept on the chat state table.

    The in-memory value is authoritative; the durable write through the
    persistence port is best-effort.
    """

    def __init__(
        self,
        table: ChatStateTable,
        default_text: str,
        persistence: Optional[GreetingPersistencePort] = None,
    ) -> None:
        self._table = table
        self._default_text = default_text
        self._persistence = persistence

    @property
    def default_text(self) -> str:
        return self._default_text

    @property
    def customizable(self) -> bool:
        return self._persistence is not None

    def get(self, chat_id: int) -> str:
        """Return the chat's custom greeting, or the default when unset."""

        if chat_id in self._table:
            custom = self._table.get_or_create(chat_id).custom_greeting_text
            if custom:
                return custom
        return self._default_text

    def preload(self, greetings: Mapping[int, str]) -> None:
        """Install greetings loaded at startup without writing them back."""

        for chat_id, text in greetings.items():
            self._table.get_or_create(chat_id).custom_greeting_text = text

    async def set(self, chat_id: int, text: str) -> bool:
        """Update the chat's greeting; return False if it was not persisted.

        The file write runs in a worker thread so it never blocks the loop.
        """

        self._table.get_or_create(chat_id).custom_greeting_text = text
        if self._persistence is None:
            return False
        try:
            await asyncio.to_thread(self._persistence.save, chat_id, text)
        except OSError:
            LOGGER.exception("Chat %s: failed to persist greeting", chat_id)
            return False
        return True
