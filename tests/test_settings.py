from __future__ import annotations

from datetime import timedelta

import pytest

from app import _parse_mode, build_parser
from settings import parse_duration


def test_parse_duration_units() -> None:
    assert parse_duration("5m") == timedelta(minutes=5)
    assert parse_duration("1h30m") == timedelta(hours=1, minutes=30)
    assert parse_duration("90s") == timedelta(seconds=90)
    assert parse_duration("250ms") == timedelta(milliseconds=250)
    assert parse_duration("1.5h") == timedelta(minutes=90)
    assert parse_duration("0") == timedelta(0)


def test_parse_duration_rejects_garbage() -> None:
    for value in ("", "5", "m5", "5 m", "5x", "1h foo"):
        with pytest.raises(ValueError):
            parse_duration(value)


def test_parser_defaults() -> None:
    args = build_parser().parse_args(["--greet-dir", "greetings"])
    assert args.telegram_bot_token == "token.txt"
    assert args.greet_dir == "greetings"
    assert args.delay == timedelta(minutes=5)
    assert args.timeout == timedelta(seconds=10)
    assert args.markdown is True


def test_parser_markdown_and_delay() -> None:
    args = build_parser().parse_args(
        ["--greet-text", "greet.md", "--markdown", "false", "--delay", "2m30s"]
    )
    assert args.greet_text == "greet.md"
    assert args.markdown is False
    assert args.delay == timedelta(minutes=2, seconds=30)


def test_parser_requires_one_greeting_source() -> None:
    with pytest.raises(SystemExit):
        build_parser().parse_args([])
    with pytest.raises(SystemExit):
        build_parser().parse_args(["--greet-dir", "a", "--greet-text", "b"])
    with pytest.raises(SystemExit):
        build_parser().parse_args(["--greet-dir", "a", "--delay", "soon"])


def test_greet_dir_mode_sends_html() -> None:
    assert _parse_mode(build_parser().parse_args(["--greet-dir", "g", "--markdown", "false"])) == "html"
    assert _parse_mode(build_parser().parse_args(["--greet-text", "g.md"])) == "md"
    assert _parse_mode(build_parser().parse_args(["--greet-text", "g.md", "--markdown", "no"])) is None
