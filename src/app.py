"""Application entry point for the greeter bot."""

from __future__ import annotations

import argparse
import logging
import os
import re
from datetime import timedelta
from logging.handlers import RotatingFileHandler
from typing import Optional

from art import tprint
from dotenv import load_dotenv
from telethon import TelegramClient, events

import settings
from adapters.greeting_files import (
    GreetingFileWriter,
    load_greeting_dir,
    read_greeting_text,
    read_token,
)
from adapters.html_entities import TelethonHtmlConverter
from adapters.telegram_mapper import build_join_event, build_message_event
from adapters.telegram_transport import TelethonTransport
from client import build_client
from core.chat_state import ChatStateTable
from core.config import PARSE_MODE_HTML, PARSE_MODE_MARKDOWN, GreetingConfig
from core.greeting_store import GreetingStore
from core.service import GreetingService

NAME = "GREETER"
FONT = "tarty-1"

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"
MASK = "***"


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


class SecretMaskingFormatter(logging.Formatter):
    """Formatter that masks the bot token and other secrets in every line."""

    def __init__(self, secrets: list[str]) -> None:
        super().__init__(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT)
        # Longest first so a secret containing another one is masked whole.
        ordered = sorted({secret for secret in secrets if secret}, key=len, reverse=True)
        self._pattern = re.compile("|".join(map(re.escape, ordered))) if ordered else None

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        if self._pattern is None:
            return message
        return self._pattern.sub(MASK, message)


def _env_secrets(redact_cfg: dict) -> list[str]:
    if not redact_cfg.get("enabled", False):
        return []
    return [os.environ[name] for name in redact_cfg.get("patterns", []) if os.getenv(name)]


def _rotating_file_handler(file_cfg: dict) -> logging.Handler:
    path = file_cfg.get("path", "logs/greeter.log")
    if not os.path.isabs(path):
        path = os.path.join(settings.PROJECT_ROOT, path)
    os.makedirs(os.path.dirname(path), exist_ok=True)
    return RotatingFileHandler(
        path,
        maxBytes=int(file_cfg.get("max_bytes", 5 * 1024 * 1024)),
        backupCount=int(file_cfg.get("backup_count", 5)),
        encoding="utf-8",
    )


def build_log_handlers(config: dict, secrets: list[str]) -> list[logging.Handler]:
    """Create the handlers described by the ``logging`` config section."""

    if not config.get("enabled", False):
        return []

    handlers: list[logging.Handler] = []
    if config.get("console", True):
        handlers.append(logging.StreamHandler())
    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        handlers.append(_rotating_file_handler(file_cfg))

    formatter = SecretMaskingFormatter(secrets + _env_secrets(config.get("redact", {})))
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def _configure_logging(secrets: list[str]) -> None:
    load_dotenv()
    config = settings.LOGGING or {}
    handlers = build_log_handlers(config, secrets)
    if not handlers:
        return
    level = getattr(logging, str(config.get("level", "INFO")).upper(), logging.INFO)
    logging.basicConfig(level=level, handlers=handlers)


def _duration(value: str) -> timedelta:
    try:
        return settings.parse_duration(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _boolean(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in {"1", "t", "true", "yes", "on"}:
        return True
    if lowered in {"0", "f", "false", "no", "off"}:
        return False
    raise argparse.ArgumentTypeError(f"Invalid boolean: {value!r}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="greeter", description="Greets new members of Telegram group chats.")
    parser.add_argument(
        "--telegram-bot-token",
        default=settings.DEFAULT_TOKEN_PATH,
        help="File with bot token",
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--greet-dir", help="Directory with greetings (enables /use for chat admins)")
    source.add_argument("--greet-text", help="File with the greeting text")
    parser.add_argument(
        "--markdown",
        type=_boolean,
        nargs="?",
        const=True,
        default=True,
        help="Send the --greet-text greeting as markdown (--greet-dir greetings are HTML)",
    )
    parser.add_argument(
        "--delay",
        type=_duration,
        default=settings.parse_duration(settings.DEFAULT_DELAY),
        help="Min delay between bot's messages, e.g. 5m or 1h30m",
    )
    parser.add_argument(
        "--timeout",
        type=_duration,
        default=settings.parse_duration(settings.DEFAULT_TIMEOUT),
        help="Timeout of a single Telegram API call",
    )
    parser.add_argument("--session", default=None, help="Telethon session name")
    return parser


def _parse_mode(args: argparse.Namespace) -> Optional[str]:
    """Greet-dir greetings are HTML produced by the entity converter."""

    if args.greet_dir:
        return PARSE_MODE_HTML
    return PARSE_MODE_MARKDOWN if args.markdown else None


def build_store(table: ChatStateTable, args: argparse.Namespace) -> GreetingStore:
    """Load greetings from disk. I/O errors propagate and abort startup."""

    if args.greet_dir:
        greetings = load_greeting_dir(args.greet_dir)
        store = GreetingStore(table, greetings.default_text, GreetingFileWriter(args.greet_dir))
        store.preload(greetings.per_chat)
        return store
    return GreetingStore(table, read_greeting_text(args.greet_text))


def register_handlers(client: TelegramClient, service: GreetingService) -> None:
    logger = logging.getLogger(__name__)

    # Each handler swallows its own failure so one chat's error never stops
    # the dispatcher or leaks into another chat.
    @client.on(events.ChatAction)
    async def on_chat_action(event) -> None:
        try:
            chat_event = build_join_event(event)
            if chat_event is None:
                return
            await service.handle(chat_event)
        except Exception:
            logger.exception("Error while handling chat action")

    @client.on(events.NewMessage(incoming=True))
    async def on_message(event) -> None:
        try:
            chat_event = await build_message_event(event.message)
            if chat_event is None:
                return
            await service.handle(chat_event)
        except Exception:
            logger.exception("Error while handling message")


def _run(args: argparse.Namespace) -> None:
    _print_banner()
    token = read_token(args.telegram_bot_token)
    _configure_logging([token])
    logger = logging.getLogger(__name__)

    logger.info("Starting greeter")

    table = ChatStateTable()
    store = build_store(table, args)
    config = GreetingConfig(
        min_delay=args.delay,
        parse_mode=_parse_mode(args),
        allow_custom_greetings=bool(args.greet_dir),
    )
    logger.info(
        "Minimum delay %s, custom greetings %s",
        config.min_delay,
        "enabled" if config.allow_custom_greetings else "disabled",
    )

    client = build_client(args.session)
    transport = TelethonTransport(client, timeout=args.timeout.total_seconds())
    service = GreetingService(
        table=table,
        store=store,
        transport=transport,
        converter=TelethonHtmlConverter(),
        config=config,
    )
    register_handlers(client, service)

    # Explicit lifecycle management makes start/shutdown behavior obvious.
    client.start(bot_token=token)
    logger.info("Starting bot.")
    client.run_until_disconnected()


def main(argv: Optional[list[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    _run(args)


if __name__ == "__main__":
    main()
