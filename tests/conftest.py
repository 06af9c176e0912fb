import asyncio
from contextlib import asynccontextmanager
from typing import Any, Callable, Dict, List, Optional, Tuple

import pytest

from playlist_scraper.config import ScraperConfig
from playlist_scraper.storage import MemoryDatasetStore, SessionManager


class FakePage:
    """In-memory stand-in for a playlist page"""

    def __init__(self, rows: Optional[List[Any]] = None, heights: Optional[List[int]] = None,
                 items_appear: bool = True, goto_error: Optional[Exception] = None,
                 failing_subrequests: Optional[List[Tuple[str, str]]] = None):
        self.rows = rows or []
        self.failing_subrequests = failing_subrequests or []
        self.on_request_failed: Optional[Callable[[str, str], None]] = None
        self.heights = heights or [1000]
        self.height_index = 0
        self.items_appear = items_appear
        self.goto_error = goto_error
        self.visited: List[str] = []
        self.scrolls = 0
        self.queries: List[str] = []

    async def goto(self, url: str) -> None:
        self.visited.append(url)
        if self.on_request_failed is not None:
            for subrequest_url, failure in self.failing_subrequests:
                self.on_request_failed(subrequest_url, failure)
        if self.goto_error is not None:
            raise self.goto_error

    async def wait_for_selector(self, selector: str, timeout_ms: int) -> None:
        if not self.items_appear:
            raise asyncio.TimeoutError(f"Timeout {timeout_ms}ms exceeded waiting for {selector}")

    async def scroll_height(self) -> int:
        return self.heights[self.height_index]

    async def scroll_to_bottom(self) -> None:
        self.scrolls += 1
        if self.height_index < len(self.heights) - 1:
            self.height_index += 1

    async def query_and_map(self, selector: str, script: str) -> List[Dict[str, Any]]:
        self.queries.append(selector)
        return list(self.rows)


class FakeEngine:
    """Hands out the same FakePage for every crawl request"""

    def __init__(self, page: FakePage):
        self.page = page
        self.pages_opened = 0
        self.pages_closed = 0
        self.started = False
        self.stopped = False

    @asynccontextmanager
    async def new_page(self, on_request_failed=None):
        self.pages_opened += 1
        self.page.on_request_failed = on_request_failed
        try:
            yield self.page
        finally:
            self.page.on_request_failed = None
            self.pages_closed += 1

    async def __aenter__(self):
        self.started = True
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.stopped = True


class CountingStore(MemoryDatasetStore):
    """Memory store that records how often areas are opened and dropped"""

    def __init__(self, fail_on_open: bool = False, fail_on_drop: bool = False):
        super().__init__()
        self.fail_on_open = fail_on_open
        self.fail_on_drop = fail_on_drop
        self.opened: List[str] = []
        self.dropped: List[str] = []

    def open_area(self, name: str) -> None:
        self.opened.append(name)
        if self.fail_on_open:
            raise OSError("storage unavailable")
        super().open_area(name)

    def drop_area(self, name: str) -> None:
        self.dropped.append(name)
        if self.fail_on_drop:
            raise ConnectionError("mongo went away")
        super().drop_area(name)


def make_rows(*views_texts: str) -> List[Dict[str, str]]:
    return [
        {"title": f"Title {i + 1}", "viewsText": text, "thumbnail": f"https://i.ytimg.com/vi/{i + 1}/hq.jpg"}
        for i, text in enumerate(views_texts)
    ]


@pytest.fixture
def fast_config():
    return ScraperConfig(
        scroll_settle_seconds=0.0,
        scroll_max_rounds=10,
        max_request_retries=0,
        selector_timeout_ms=100,
    )


@pytest.fixture
def store():
    return CountingStore()


@pytest.fixture
def session_manager(store):
    return SessionManager(store)
