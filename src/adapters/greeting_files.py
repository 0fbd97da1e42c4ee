"""Filesystem configuration adapter.

Reads the bot token and greeting texts at startup and persists per-chat
greetings as ``chat<ID>.md`` files. Startup reads raise on I/O errors so the
process fails before serving any event.
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field

LOGGER = logging.getLogger(__name__)

BUILTIN_DEFAULT_GREETING = "Hello"
DEFAULT_GREETING_FILE = "default.md"
CHAT_FILE_PATTERN = re.compile(r"^chat(-?\d+)\.md$")


@dataclass(frozen=True)
class GreetingSet:
    """Greetings found in a greeting directory."""

    default_text: str
    per_chat: dict[int, str] = field(default_factory=dict)


def _read_text(path: str) -> str:
    with open(path, "r", encoding="utf-8") as handle:
        return handle.read()


def read_token(path: str) -> str:
    """Read the bot token, trimmed of surrounding whitespace."""

    token = _read_text(path).strip()
    # Fail fast on an empty file to avoid an ambiguous auth error later.
    if not token:
        raise RuntimeError(f"Bot token file is empty: {path}")
    return token


def read_greeting_text(path: str) -> str:
    return _read_text(path)


def chat_greeting_filename(chat_id: int) -> str:
    return f"chat{chat_id}.md"


def parse_chat_filename(name: str) -> int:
    """Return the chat id encoded in a ``chat<ID>.md`` file name."""

    match = CHAT_FILE_PATTERN.match(name)
    if not match:
        raise ValueError(f"Not a chat greeting file name: {name}")
    return int(match.group(1))


def load_greeting_dir(directory: str) -> GreetingSet:
    """Scan a greeting directory.

    ``default.md`` overrides the built-in default; ``chat<ID>.md`` files give
    per-chat greetings. Anything else is skipped with a warning.
    """

    default_text = BUILTIN_DEFAULT_GREETING
    per_chat: dict[int, str] = {}
    for name in sorted(os.listdir(directory)):
        path = os.path.join(directory, name)
        if not os.path.isfile(path):
            continue
        if name == DEFAULT_GREETING_FILE:
            default_text = _read_text(path)
            continue
        try:
            chat_id = parse_chat_filename(name)
        except ValueError:
            LOGGER.warning("Can not extract chat ID from file name %s, skipping", name)
            continue
        per_chat[chat_id] = _read_text(path)

    LOGGER.info("Loaded %s chat greetings from %s", len(per_chat), directory)
    return GreetingSet(default_text=default_text, per_chat=per_chat)


class GreetingFileWriter:
    """GreetingPersistencePort implementation writing one file per chat."""

    def __init__(self, directory: str) -> None:
        self._directory = directory

    def path_for(self, chat_id: int) -> str:
        return os.path.join(self._directory, chat_greeting_filename(chat_id))

    def save(self, chat_id: int, text: str) -> None:
        """Overwrite the chat's greeting file. Raises OSError on failure."""

        with open(self.path_for(chat_id), "w", encoding="utf-8") as handle:
            handle.write(text)
