"""Ports (interfaces) used by the greeting service.

Ports define the minimal contracts for the messaging transport, the rich-text
converter, and greeting persistence so that the core can be reused with
different backends.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence

from core.models import ChatEvent, MessageRef


class TransportError(RuntimeError):
    """Raised by transport adapters when a remote call fails or times out."""


class TransportPort(Protocol):
    """Messaging operations required by the greeting service."""

    async def send_message(self, chat_id: int, text: str, parse_mode: Optional[str]) -> MessageRef:
        ...

    async def delete_message(self, ref: MessageRef) -> None:
        ...

    async def list_admins(self, chat_id: int) -> list[int]:
        ...

    async def reply(self, event: ChatEvent, text: str) -> None:
        ...


class EntityConverterPort(Protocol):
    """Converts text plus formatting entities into escaped, sendable formatted text."""

    def convert(self, text: str, entities: Sequence[Any]) -> str:
        ...


class GreetingPersistencePort(Protocol):
    """Durable storage of per-chat greetings. Failures raise OSError."""

    def save(self, chat_id: int, text: str) -> None:
        ...
