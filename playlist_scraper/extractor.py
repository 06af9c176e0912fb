"""
Playlist field extractor - reads title, view text and thumbnail for every
playlist row currently in the DOM
"""

from __future__ import annotations

from typing import List

from loguru import logger

from playlist_scraper.browser_manager import PageCapabilities
from playlist_scraper.data_models.models import RawVideoRecord
from playlist_scraper.errors import CrawlFailureError, ErrorType, classify_error

ITEM_SELECTOR = "#contents ytd-playlist-video-renderer"

# Runs in the page; every field falls back to "" so one broken row
# never hides its siblings.
ROW_SCRIPT = """
(elements) => elements.map((el) => {
    const title = el.querySelector("#video-title")?.textContent?.trim() || "";
    const viewsText = el.querySelector("#video-info span")?.textContent?.trim() || "";
    const thumbnail = el.querySelector("img")?.src || "";
    return { title, viewsText, thumbnail };
})
"""


async def wait_for_items(page: PageCapabilities, timeout_ms: int = 30000) -> None:
    """Wait for the first playlist row; a timeout fails the crawl attempt"""
    try:
        await page.wait_for_selector(ITEM_SELECTOR, timeout_ms)
    except Exception as e:
        error_type = classify_error(e)
        if error_type == ErrorType.UNKNOWN:
            error_type = ErrorType.TIMEOUT
        raise CrawlFailureError(
            f"Playlist items did not appear within {timeout_ms}ms: {e}", error_type
        ) from e


async def read_records(page: PageCapabilities) -> List[RawVideoRecord]:
    """Read one raw record per playlist row, in document order"""
    rows = await page.query_and_map(ITEM_SELECTOR, ROW_SCRIPT)
    records = [RawVideoRecord.from_row(row) for row in rows or []]

    missing = sum(1 for r in records if not r.title or not r.raw_views_text)
    if missing:
        logger.debug(f"{missing} of {len(records)} rows are missing a title or view text")
    return records


async def extract(page: PageCapabilities, timeout_ms: int = 30000) -> List[RawVideoRecord]:
    await wait_for_items(page, timeout_ms)
    return await read_records(page)
