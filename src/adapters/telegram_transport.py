"""Telethon transport adapter.

Implements the core TransportPort on top of a bot-authorized TelegramClient.
Every remote call is bounded by a timeout so one slow chat cannot stall
handling of the others.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Optional, TypeVar

from telethon import TelegramClient, errors
from telethon.tl.types import ChannelParticipantsAdmins

from core.models import ChatEvent, MessageRef
from core.ports import TransportError

T = TypeVar("T")

# Entity resolution failures surface as ValueError in Telethon.
_FAILURES = (errors.RPCError, ConnectionError, ValueError)


class TelethonTransport:
    """TransportPort adapter that talks to Telegram through Telethon."""

    def __init__(self, client: TelegramClient, timeout: float = 10.0) -> None:
        self._client = client
        self._timeout = timeout

    async def _call(self, operation: str, awaitable: Awaitable[T]) -> T:
        try:
            return await asyncio.wait_for(awaitable, timeout=self._timeout)
        except asyncio.TimeoutError as exc:
            raise TransportError(f"{operation} timed out after {self._timeout:g}s") from exc
        except _FAILURES as exc:
            raise TransportError(f"{operation} failed: {exc}") from exc

    async def send_message(self, chat_id: int, text: str, parse_mode: Optional[str]) -> MessageRef:
        message = await self._call(
            "send_message",
            self._client.send_message(
                chat_id,
                text,
                parse_mode=parse_mode,
                link_preview=False,
            ),
        )
        return MessageRef(chat_id=chat_id, message_id=message.id)

    async def delete_message(self, ref: MessageRef) -> None:
        await self._call("delete_message", self._client.delete_messages(ref.chat_id, [ref.message_id]))

    async def list_admins(self, chat_id: int) -> list[int]:
        admins = await self._call(
            "list_admins",
            self._client.get_participants(chat_id, filter=ChannelParticipantsAdmins()),
        )
        return [admin.id for admin in admins]

    async def reply(self, event: ChatEvent, text: str) -> None:
        await self._call(
            "reply",
            self._client.send_message(
                event.chat_id,
                text,
                reply_to=event.message_id,
                parse_mode=None,
            ),
        )
