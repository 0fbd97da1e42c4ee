"""Rich-text entity to HTML conversion adapter.

Telegram delivers formatting as offset/length entities next to the plain
text. Telethon's HTML unparser turns them back into markup and escapes the
plain text around them, so delimiter-looking characters in the source message
survive being sent again with parse_mode="html".
"""

from __future__ import annotations

from typing import Any, Sequence

from telethon.extensions import html


class TelethonHtmlConverter:
    """EntityConverterPort implementation backed by Telethon's html module."""

    def convert(self, text: str, entities: Sequence[Any]) -> str:
        return html.unparse(text, list(entities))
