"""
Scroll-until-stable controller for lazily rendered playlist rows
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from enum import Enum

from loguru import logger

from playlist_scraper.browser_manager import PageCapabilities


class ScrollOutcome(str, Enum):
    STABLE = "stable"
    TIMEOUT = "timeout"


@dataclass(frozen=True)
class ScrollResult:
    outcome: ScrollOutcome
    rounds: int
    final_height: int
    elapsed_seconds: float

    @property
    def stable(self) -> bool:
        return self.outcome == ScrollOutcome.STABLE


async def scroll_until_stable(
    page: PageCapabilities,
    settle_seconds: float = 2.0,
    max_rounds: int = 100,
    max_elapsed: float = 300.0,
) -> ScrollResult:
    """Scroll to the bottom until the page height stops changing.

    Each round scrolls, waits ``settle_seconds`` for lazy content and
    re-measures. Gives up with ``ScrollOutcome.TIMEOUT`` after ``max_rounds``
    rounds or ``max_elapsed`` seconds, whichever comes first.
    """
    start = time.monotonic()
    rounds = 0
    height = await page.scroll_height()

    while True:
        old_height = height
        await page.scroll_to_bottom()
        await asyncio.sleep(settle_seconds)
        height = await page.scroll_height()
        rounds += 1
        elapsed = time.monotonic() - start

        if height == old_height:
            logger.debug(f"Page stabilized at height {height} after {rounds} scroll(s)")
            return ScrollResult(ScrollOutcome.STABLE, rounds, height, elapsed)

        if rounds >= max_rounds or elapsed >= max_elapsed:
            logger.warning(
                f"Page still growing after {rounds} scroll(s) / {elapsed:.1f}s (height {height}), stopping"
            )
            return ScrollResult(ScrollOutcome.TIMEOUT, rounds, height, elapsed)
