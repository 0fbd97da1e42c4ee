"""Clock used for greeting throttling."""

from __future__ import annotations

import time
from datetime import datetime, timedelta, timezone
from typing import Callable


class MonotonicClock:
    """Timezone-aware timestamps that advance with ``time.monotonic``.

    Anchored to the wall clock once at construction, so stepping the system
    clock afterwards never makes elapsed time negative.
    """

    def __init__(self, monotonic: Callable[[], float] = time.monotonic) -> None:
        self._monotonic = monotonic
        self._anchor = datetime.now(timezone.utc)
        self._start = monotonic()

    def __call__(self) -> datetime:
        return self._anchor + timedelta(seconds=self._monotonic() - self._start)
