"""Telegram-to-core event mapping adapter.

This keeps Telethon-specific details out of the greeting service.
"""

from __future__ import annotations

import logging
from typing import Optional

from telethon.tl.custom import Message

from core.models import ChatEvent, EventKind, ReplyTarget

LOGGER = logging.getLogger(__name__)

COMMANDS = {
    "/start": EventKind.START,
    "/use": EventKind.USE,
}


def _chat_title(source) -> Optional[str]:
    chat = getattr(source, "chat", None)
    title = getattr(chat, "title", None)
    if isinstance(title, str) and title:
        return title
    return None


def command_kind(text: str) -> Optional[EventKind]:
    """Return the command kind for "/cmd" or "/cmd@botname" text, if known."""

    if not text.startswith("/"):
        return None
    word = text.split(maxsplit=1)[0]
    name, _, _ = word.partition("@")
    return COMMANDS.get(name.lower())


def message_kind(message: Message) -> Optional[EventKind]:
    """Classify a message; None for content that does not count as activity."""

    # Voice notes are audio documents too, so they are checked first.
    if getattr(message, "sticker", None):
        return EventKind.STICKER
    if getattr(message, "voice", None):
        return EventKind.VOICE
    if getattr(message, "audio", None):
        return EventKind.AUDIO
    if getattr(message, "photo", None):
        return EventKind.PHOTO

    text = message.raw_text or ""
    if not text:
        return None
    return command_kind(text) or EventKind.TEXT


async def _reply_target(message: Message) -> Optional[ReplyTarget]:
    if not getattr(message, "is_reply", False):
        return None
    replied = await message.get_reply_message()
    if replied is None:
        # The replied-to message was deleted or is not accessible to the bot.
        LOGGER.info("Chat %s: reply target of message %s is unavailable", message.chat_id, message.id)
        return None
    return ReplyTarget(
        message_id=replied.id,
        text=replied.raw_text or "",
        entities=tuple(replied.entities or ()),
    )


async def build_message_event(message: Message) -> Optional[ChatEvent]:
    """Build a ChatEvent from a Telethon Message, or None to ignore it."""

    kind = message_kind(message)
    if kind is None:
        return None

    # Only /use needs the replied-to message; skip the extra request otherwise.
    reply_to = await _reply_target(message) if kind is EventKind.USE else None

    return ChatEvent(
        kind=kind,
        chat_id=message.chat_id,
        sender_id=message.sender_id,
        message_id=message.id,
        is_private=bool(message.is_private),
        chat_title=_chat_title(message),
        reply_to=reply_to,
    )


def build_join_event(event) -> Optional[ChatEvent]:
    """Build a ChatEvent from a Telethon ChatAction event for member joins."""

    if not (getattr(event, "user_joined", False) or getattr(event, "user_added", False)):
        return None

    action_message = getattr(event, "action_message", None)
    return ChatEvent(
        kind=EventKind.JOINED,
        chat_id=event.chat_id,
        sender_id=getattr(event, "user_id", None),
        message_id=getattr(action_message, "id", None),
        is_private=bool(getattr(event, "is_private", False)),
        chat_title=_chat_title(event),
    )
