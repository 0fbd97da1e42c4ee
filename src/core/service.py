"""Greeting service: the per-chat greeting state machine.

This module is integration-agnostic. It only relies on ports for messaging,
rich-text conversion, and persistence, so a fake transport is enough to drive
it in tests.

Branches per event category:
- join: greet unless the bot's greeting is still the latest message or the
  minimum delay has not passed; the previous greeting is deleted first
- activity: any other chat content makes the bot's greeting stale
- command: /start answers privately, /use lets admins set the chat greeting
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional

from core.chat_state import ChatStateTable
from core.clock import MonotonicClock
from core.config import GreetingConfig
from core.greeting_store import GreetingStore
from core.models import ChatEvent, EventCategory, EventKind, categorize
from core.ports import EntityConverterPort, TransportError, TransportPort

LOGGER = logging.getLogger(__name__)

NOTICE_ADMINS_UNAVAILABLE = "Can not get the list of chat admins."
NOTICE_NOT_ADMIN = "You are not admin."
NOTICE_USE_NEEDS_REPLY = "Use this command in reply to the message you want to make the greeting."
NOTICE_USE_EMPTY = "The message you replied to has no text to use as the greeting."
NOTICE_USE_GROUP_ONLY = "This command only works in group chats."
NOTICE_OK = "OK"


class GreetingService:
    """Orchestrates the chat state table, greeting store, and transport."""

    def __init__(
        self,
        table: ChatStateTable,
        store: GreetingStore,
        transport: TransportPort,
        converter: EntityConverterPort,
        config: GreetingConfig,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._table = table
        self._store = store
        self._transport = transport
        self._converter = converter
        self._config = config
        self._clock = clock or MonotonicClock()

    async def handle(self, event: ChatEvent) -> None:
        """Process one inbound event."""

        category = categorize(event.kind)

        # /start never touches group state, so it skips the chat lock.
        if event.kind is EventKind.START:
            await self._handle_start(event)
            return

        async with self._table.lock(event.chat_id):
            if category is EventCategory.JOIN:
                await self._handle_join(event)
            elif category is EventCategory.ACTIVITY:
                self._handle_activity(event)
            elif event.kind is EventKind.USE:
                await self._handle_use(event)

    async def _handle_join(self, event: ChatEvent) -> None:
        if event.is_private:
            return

        LOGGER.info("Chat %s. User joined.", event.label)
        chat_id = event.chat_id
        now = self._clock()
        reason = self._table.suppression_reason(chat_id, now, self._config.min_delay)
        if reason is not None:
            LOGGER.info("Chat %s. Not posting: %s.", event.label, reason)
            return

        # Deleting the previous greeting is best-effort; a failure never blocks
        # the new one.
        previous = self._table.get_or_create(chat_id).last_sent_message_ref
        if previous is not None:
            try:
                await self._transport.delete_message(previous)
            except TransportError as exc:
                LOGGER.warning("Chat %s. Failed to delete previous greeting: %s", event.label, exc)
            else:
                self._table.forget_message(chat_id)

        text = self._store.get(chat_id)
        try:
            ref = await self._transport.send_message(chat_id, text, self._config.parse_mode)
        except TransportError as exc:
            # State stays as it was so the next join retries.
            LOGGER.error("Chat %s. Failed to send greeting: %s", event.label, exc)
            return

        self._table.mark_sent(chat_id, now, ref)
        LOGGER.info("Chat %s. Greeting sent (message %s).", event.label, ref.message_id)

    def _handle_activity(self, event: ChatEvent) -> None:
        LOGGER.debug("Chat %s. Reset of bot_message_is_latest (%s).", event.label, event.kind.value)
        self._table.mark_activity(event.chat_id)

    async def _handle_start(self, event: ChatEvent) -> None:
        if not event.is_private:
            return
        recipient = event.sender_id if event.sender_id is not None else event.chat_id
        LOGGER.info("/start from %s", recipient)
        try:
            await self._transport.send_message(recipient, self._store.default_text, self._config.parse_mode)
        except TransportError as exc:
            LOGGER.warning("Replying to /start failed: %s", exc)

    async def _handle_use(self, event: ChatEvent) -> None:
        if not (self._config.allow_custom_greetings and self._store.customizable):
            LOGGER.debug("Chat %s. Ignoring /use, custom greetings are disabled.", event.label)
            return
        if event.is_private:
            await self._reply(event, NOTICE_USE_GROUP_ONLY)
            return

        try:
            admins = await self._transport.list_admins(event.chat_id)
        except TransportError as exc:
            LOGGER.warning("Chat %s. Can not get the list of chat admins: %s", event.label, exc)
            await self._reply(event, NOTICE_ADMINS_UNAVAILABLE)
            return
        if event.sender_id is None or event.sender_id not in admins:
            await self._reply(event, NOTICE_NOT_ADMIN)
            return

        target = event.reply_to
        if target is None:
            await self._reply(event, NOTICE_USE_NEEDS_REPLY)
            return
        if not target.text.strip():
            await self._reply(event, NOTICE_USE_EMPTY)
            return

        text = self._converter.convert(target.text, target.entities)
        await self._store.set(event.chat_id, text)
        # Force a fresh post on the next join instead of keeping the old text on top.
        self._table.mark_activity(event.chat_id)
        LOGGER.info("Chat %s. Greeting updated by %s.", event.label, event.sender_id)
        await self._reply(event, NOTICE_OK)

    async def _reply(self, event: ChatEvent, text: str) -> None:
        try:
            await self._transport.reply(event, text)
        except TransportError as exc:
            LOGGER.warning("Chat %s. Failed to reply: %s", event.label, exc)
