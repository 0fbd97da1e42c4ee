"""Core configuration dataclasses.

We keep config parsing outside the core, but these dataclasses define the
shape the core expects so adapters and app layers can build safely.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

# Parse modes understood by the transport; None sends plain text.
PARSE_MODE_MARKDOWN = "md"
PARSE_MODE_HTML = "html"


@dataclass(frozen=True)
class GreetingConfig:
    """Throttling and formatting settings for the greeting service.

    ``parse_mode`` must match the dialect the greeting texts are written in:
    greetings set through /use are produced by the entity converter as HTML.
    """

    min_delay: timedelta
    parse_mode: Optional[str] = PARSE_MODE_MARKDOWN
    allow_custom_greetings: bool = False
