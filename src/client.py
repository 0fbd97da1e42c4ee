"""Telegram client factory for greeter.

We explicitly manage the client's lifecycle (start/run_until_disconnected)
so it is obvious when the session is created and when it ends. This avoids
implicit context-manager behavior for a long-running bot.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

from dotenv import load_dotenv
from telethon import TelegramClient

import settings


def build_client(session_name: Optional[str] = None) -> TelegramClient:
    """Create a Telethon client from environment variables.

    Even bot accounts need API_ID/API_HASH for MTProto; we read them via
    python-dotenv to keep secrets out of the repo. The session name defaults
    to "greeter" to create a local .session file.
    """

    load_dotenv()

    api_id = os.getenv("API_ID")
    api_hash = os.getenv("API_HASH")
    session_name = session_name or os.getenv("SESSION_NAME", settings.DEFAULT_SESSION_NAME)

    # Fail fast on missing credentials to avoid an ambiguous login error.
    if not api_id or not api_hash:
        raise RuntimeError("Missing API_ID or API_HASH in environment")

    logging.getLogger(__name__).info("Initializing Telegram client")

    return TelegramClient(session_name, int(api_id), api_hash)
