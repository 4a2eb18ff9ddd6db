"""Rate limiting between consecutive agent runs."""

from __future__ import annotations

import logging
import time
from typing import Callable

LOGGER = logging.getLogger(__name__)


class SymbolPacer:
    """Sleep a fixed ``interval`` before each symbol after the first.

    The pacer is called between symbols only, so a batch of ``n`` symbols
    pauses ``n - 1`` times. ``sleep`` is injectable for tests.
    """

    def __init__(self, interval: float = 2.0, sleep: Callable[[float], None] = time.sleep) -> None:
        self.interval = max(float(interval), 0.0)
        self._sleep = sleep
        self.pauses = 0

    def pause(self) -> None:
        self.pauses += 1
        if self.interval <= 0:
            return
        LOGGER.info("Waiting %.1f seconds before next analysis...", self.interval)
        self._sleep(self.interval)


__all__ = ["SymbolPacer"]
