from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler

from app import MASK, SecretMaskingFormatter, build_log_handlers


def _record(message: str, *args) -> logging.LogRecord:
    return logging.LogRecord("greeter", logging.INFO, __file__, 1, message, args, None)


def test_formatter_masks_token_in_arguments() -> None:
    formatter = SecretMaskingFormatter(["123:secret"])
    line = formatter.format(_record("auth failed for %s", "bot123:secret/getMe"))
    assert "123:secret" not in line
    assert f"bot{MASK}/getMe" in line


def test_formatter_masks_longest_secret_whole() -> None:
    formatter = SecretMaskingFormatter(["abc", "abcdef", ""])
    assert formatter.format(_record("x abcdef y")).endswith(f"x {MASK} y")


def test_formatter_without_secrets_keeps_message() -> None:
    assert SecretMaskingFormatter([]).format(_record("plain")).endswith("plain")


def test_disabled_logging_builds_no_handlers() -> None:
    assert build_log_handlers({"enabled": False}, ["t"]) == []


def test_handlers_share_masking_formatter(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("API_HASH", "hash-value")
    config = {
        "enabled": True,
        "file": {"enabled": True, "path": str(tmp_path / "logs" / "greeter.log")},
        "redact": {"enabled": True, "patterns": ["API_HASH", "UNSET_VARIABLE"]},
    }
    handlers = build_log_handlers(config, ["token"])
    try:
        assert len(handlers) == 2
        assert any(isinstance(handler, RotatingFileHandler) for handler in handlers)
        line = handlers[0].formatter.format(_record("token hash-value"))
        assert line.endswith(f"{MASK} {MASK}")
    finally:
        for handler in handlers:
            handler.close()
