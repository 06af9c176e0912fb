"""
Playlist Browser Manager - Playwright engine and page capabilities
Owns the browser process and hands out per-crawl pages that expose only the
operations the scroll controller and the extractor need.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Callable, Dict, List, Optional, Protocol

from fake_useragent import UserAgent
from loguru import logger
from playwright.async_api import Browser, Page, Playwright, async_playwright


BROWSER_ARGS = [
    '--no-sandbox',
    '--disable-blink-features=AutomationControlled',
    '--disable-dev-shm-usage',
    '--disable-extensions',
    '--disable-notifications',
]

STEALTH_SCRIPT = """
    Object.defineProperty(navigator, 'webdriver', {
        get: () => undefined,
    });

    Object.defineProperty(navigator, 'languages', {
        get: () => ['en-US', 'en'],
    });
"""


class PageCapabilities(Protocol):
    """What the crawl needs from a live page"""

    async def goto(self, url: str) -> None: ...

    async def wait_for_selector(self, selector: str, timeout_ms: int) -> None: ...

    async def scroll_height(self) -> int: ...

    async def scroll_to_bottom(self) -> None: ...

    async def query_and_map(self, selector: str, script: str) -> List[Dict[str, Any]]: ...


class PlaywrightPage:
    """PageCapabilities backed by a Playwright page"""

    def __init__(self, page: Page, navigation_timeout_ms: int = 30000):
        self.page = page
        self.navigation_timeout_ms = navigation_timeout_ms

    async def goto(self, url: str) -> None:
        response = await self.page.goto(url, wait_until='domcontentloaded', timeout=self.navigation_timeout_ms)
        if response is not None and response.status >= 400:
            raise RuntimeError(f"Navigation to {url} failed with status {response.status}")

    async def wait_for_selector(self, selector: str, timeout_ms: int) -> None:
        await self.page.wait_for_selector(selector, timeout=timeout_ms)

    async def scroll_height(self) -> int:
        height = await self.page.evaluate("() => document.body ? document.body.scrollHeight : 0")
        return int(height or 0)

    async def scroll_to_bottom(self) -> None:
        await self.page.evaluate("() => window.scrollTo(0, document.body.scrollHeight)")

    async def query_and_map(self, selector: str, script: str) -> List[Dict[str, Any]]:
        return await self.page.eval_on_selector_all(selector, script)


class BrowserEngine:
    """Manages the shared Chromium instance; one context per crawl"""

    def __init__(self, headless: bool = True, navigation_timeout_ms: int = 30000):
        self.headless = headless
        self.navigation_timeout_ms = navigation_timeout_ms
        self.playwright: Optional[Playwright] = None
        self.browser: Optional[Browser] = None
        self.ua = UserAgent()

    @property
    def is_running(self) -> bool:
        return self.browser is not None

    async def start(self) -> None:
        """Launch the browser if it is not running yet"""
        if self.is_running:
            return
        self.playwright = await async_playwright().start()
        self.browser = await self.playwright.chromium.launch(headless=self.headless, args=BROWSER_ARGS)
        logger.info(f"Browser engine started (headless={self.headless})")

    async def stop(self) -> None:
        """Clean up browser resources"""
        if self.browser:
            await self.browser.close()
            self.browser = None
        if self.playwright:
            await self.playwright.stop()
            self.playwright = None
        logger.info("Browser engine stopped")

    async def __aenter__(self) -> "BrowserEngine":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()

    @asynccontextmanager
    async def new_page(
        self,
        on_request_failed: Optional[Callable[[str, str], None]] = None,
    ) -> AsyncIterator[PlaywrightPage]:
        """Open an isolated context and page, closed on exit.

        ``on_request_failed`` receives (url, failure text) for every
        sub-request the page could not load.
        """
        if not self.browser:
            raise RuntimeError("Browser not started. Call start() first.")

        context = await self.browser.new_context(
            user_agent=self.ua.random,
            viewport={'width': 1920, 'height': 1080},
            locale='en-US',
            extra_http_headers={'Accept-Language': 'en-US,en;q=0.9'},
        )
        try:
            await context.add_init_script(STEALTH_SCRIPT)
            page = await context.new_page()
            if on_request_failed is not None:
                page.on("requestfailed", lambda request: on_request_failed(request.url, request.failure or ""))
            yield PlaywrightPage(page, navigation_timeout_ms=self.navigation_timeout_ms)
        finally:
            await context.close()
