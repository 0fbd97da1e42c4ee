"""Static configuration for greeter.

Runtime inputs (token path, greeting sources, delay) come from the command
line; the optional config.json only carries the logging section so log sinks
can be tweaked without touching Python.
"""

import json
import os
import re
from datetime import timedelta

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

CONFIG_PATH = os.path.join(PROJECT_ROOT, "config.json")

# CLI defaults.
DEFAULT_TOKEN_PATH = "token.txt"
DEFAULT_DELAY = "5m"
DEFAULT_TIMEOUT = "10s"
DEFAULT_SESSION_NAME = "greeter"

_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")
_DURATION_UNITS = {
    "ns": timedelta(microseconds=0.001),
    "us": timedelta(microseconds=1),
    "µs": timedelta(microseconds=1),
    "ms": timedelta(milliseconds=1),
    "s": timedelta(seconds=1),
    "m": timedelta(minutes=1),
    "h": timedelta(hours=1),
}


def parse_duration(value: str) -> timedelta:
    """Parse a duration such as "5m", "1h30m", "90s" or "250ms".

    A bare "0" is accepted as zero; every other value needs a unit.
    """

    text = value.strip()
    if text == "0":
        return timedelta(0)
    if not text:
        raise ValueError("Empty duration")

    total = timedelta(0)
    position = 0
    for match in _DURATION_PART.finditer(text):
        if match.start() != position:
            break
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        position = match.end()
    if position != len(text):
        raise ValueError(f"Invalid duration: {value!r}")
    return total


def _load_json_config() -> dict:
    """Load config.json if present; an absent file means defaults."""

    if not os.path.exists(CONFIG_PATH):
        return {}

    with open(CONFIG_PATH, "r", encoding="utf-8") as handle:
        return json.load(handle)


_CONFIG = _load_json_config()

# Expose the raw config for modules that need structured access.
CONFIG = _CONFIG

# Logging configuration. Console logging at INFO is on unless disabled here.
LOGGING = _CONFIG.get("logging", {"enabled": True})
