"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to any integration-specific types.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Optional


@dataclass(frozen=True)
class MessageRef:
    """Handle to a message sent by the bot, enough to delete it later."""

    chat_id: int
    message_id: int


@dataclass
class ChatState:
    """Mutable greeting state of a single chat.

    ``bot_message_is_latest`` is only ever True while ``last_sent_message_ref``
    points at the greeting that made it so.
    """

    chat_id: int
    last_sent_at: Optional[datetime] = None
    bot_message_is_latest: bool = False
    last_sent_message_ref: Optional[MessageRef] = None
    custom_greeting_text: Optional[str] = None


class EventKind(str, Enum):
    JOINED = "joined"
    TEXT = "text"
    PHOTO = "photo"
    AUDIO = "audio"
    STICKER = "sticker"
    VOICE = "voice"
    START = "start"
    USE = "use"


class EventCategory(Enum):
    JOIN = "join"
    ACTIVITY = "activity"
    COMMAND = "command"


_CATEGORIES = {
    EventKind.JOINED: EventCategory.JOIN,
    EventKind.TEXT: EventCategory.ACTIVITY,
    EventKind.PHOTO: EventCategory.ACTIVITY,
    EventKind.AUDIO: EventCategory.ACTIVITY,
    EventKind.STICKER: EventCategory.ACTIVITY,
    EventKind.VOICE: EventCategory.ACTIVITY,
    EventKind.START: EventCategory.COMMAND,
    EventKind.USE: EventCategory.COMMAND,
}


def categorize(kind: EventKind) -> EventCategory:
    """Map an event kind onto the branch of the state machine handling it."""

    return _CATEGORIES[kind]


@dataclass(frozen=True)
class ReplyTarget:
    """The message a command was issued in reply to.

    ``entities`` are the transport's formatting spans, opaque to the core and
    only passed through to the entity converter.
    """

    message_id: int
    text: str
    entities: tuple[Any, ...] = ()


@dataclass(frozen=True)
class ChatEvent:
    """Minimal inbound event used by the greeting service."""

    kind: EventKind
    chat_id: int
    sender_id: Optional[int]
    message_id: Optional[int]
    is_private: bool = False
    chat_title: Optional[str] = None
    reply_to: Optional[ReplyTarget] = None

    @property
    def label(self) -> str:
        """Human-friendly chat label for log lines."""

        if self.chat_title:
            return f"{self.chat_title} ({self.chat_id})"
        return str(self.chat_id)
