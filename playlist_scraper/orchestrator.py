"""
Playlist Scrape Orchestrator
Validates the playlist URL, runs one crawl inside a scrape session and builds
the video list / graph payload. The session is disposed on every exit path.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, List, Optional, Sequence, Union

from loguru import logger

from playlist_scraper.config import ScraperConfig
from playlist_scraper.crawler import CrawlContext, CrawlRequest, PlaylistCrawler
from playlist_scraper.data_models.models import (
    GraphPoint,
    PlaylistLocator,
    PlaylistResult,
    RawVideoRecord,
    VideoRecord,
)
from playlist_scraper.errors import (
    CrawlFailureError,
    InfrastructureFailureError,
    InvalidInputError,
    PlaylistScraperError,
    classify_error,
)
from playlist_scraper.extractor import read_records, wait_for_items
from playlist_scraper.scroller import scroll_until_stable
from playlist_scraper.storage.session_manager import ScrapeSession, SessionManager
from playlist_scraper.view_counts import normalize_views


class CrawlState(str, Enum):
    VALIDATING = "validating"
    SESSION_OPEN = "session_open"
    NAVIGATING = "navigating"
    SCROLLING = "scrolling"
    EXTRACTING = "extracting"
    PERSISTING = "persisting"
    RESPONDING = "responding"
    DISPOSED = "disposed"
    FAILED = "failed"


def build_playlist_result(raw_records: Sequence[RawVideoRecord]) -> PlaylistResult:
    """Normalize view counts and derive graph points, keeping playlist order"""
    videos = [
        VideoRecord(title=raw.title, views=normalize_views(raw.raw_views_text), thumbnail_url=raw.thumbnail_url)
        for raw in raw_records
    ]
    graph = [GraphPoint(label=f"Video {index + 1}", views=video.views) for index, video in enumerate(videos)]
    return PlaylistResult(video_list=videos, graph_data=graph)


class PlaylistScrapeOrchestrator:
    """Main orchestrator for one playlist scrape per call to :meth:`run`"""

    def __init__(self, engine, session_manager: SessionManager, config: Optional[ScraperConfig] = None):
        """
        Args:
            engine: browser engine providing ``new_page()`` (see BrowserEngine)
            session_manager: owner of the transient datasets
            config: crawl limits and timeouts (defaults if omitted)
        """
        self.engine = engine
        self.session_manager = session_manager
        self.config = config or ScraperConfig()
        self.state = CrawlState.VALIDATING
        self.state_history: List[CrawlState] = []

    def _transition(self, state: CrawlState) -> None:
        self.state = state
        self.state_history.append(state)
        logger.debug(f"Crawl state -> {state.value}")

    async def run(self, payload: Union[str, dict, None]) -> PlaylistResult:
        """Scrape the playlist named by ``payload`` ({"playlistUrl": ...} or a URL)"""
        self.state_history = []
        self._transition(CrawlState.VALIDATING)
        try:
            locator = self.validate(payload)
            self._transition(CrawlState.SESSION_OPEN)
            session = self.session_manager.open()
        except PlaylistScraperError as e:
            self._transition(CrawlState.FAILED)
            logger.warning(f"Scrape rejected ({e.error_type.value}): {e}")
            raise

        try:
            result = await self._crawl_and_respond(locator, session)
        except PlaylistScraperError as e:
            self._transition(CrawlState.FAILED)
            logger.error(f"Crawling failed ({e.error_type.value}): {e}")
            self._dispose(session)
            raise
        except Exception as e:
            self._transition(CrawlState.FAILED)
            logger.error(f"Crawling failed: {e}")
            self._dispose(session)
            raise CrawlFailureError(f"Crawling failed: {e}", classify_error(e)) from e
        except BaseException:
            self._dispose(session)
            raise

        dispose_error = self._dispose(session)
        if dispose_error is not None:
            self._transition(CrawlState.FAILED)
            raise dispose_error

        logger.info(f"Scraped {len(result.video_list)} videos from playlist {locator.playlist_id}")
        return result

    def _dispose(self, session: ScrapeSession) -> Optional[InfrastructureFailureError]:
        """Drop the session; a failed drop is logged and returned, never raised"""
        try:
            self.session_manager.dispose(session)
        except InfrastructureFailureError as e:
            logger.error(f"Session {session.session_id} was not disposed: {e}")
            return e
        self._transition(CrawlState.DISPOSED)
        return None

    @staticmethod
    def validate(payload: Union[str, dict, None]) -> PlaylistLocator:
        if isinstance(payload, dict):
            url = payload.get("playlistUrl")
        else:
            url = payload
        if url is not None and not isinstance(url, str):
            raise InvalidInputError("Invalid playlist URL")
        return PlaylistLocator.parse(url)

    async def _crawl_and_respond(self, locator: PlaylistLocator, session: ScrapeSession) -> PlaylistResult:
        crawler = PlaylistCrawler(
            self.engine,
            self._handle_playlist_page,
            max_requests_per_crawl=self.config.max_requests_per_crawl,
            max_request_retries=self.config.max_request_retries,
        )
        self._transition(CrawlState.NAVIGATING)
        results = await crawler.run([
            CrawlRequest(url=locator.target_url, unique_key=f"{locator.target_url}:{session.session_id}")
        ])
        records: List[RawVideoRecord] = results[0] if results else []

        self._transition(CrawlState.PERSISTING)
        self.session_manager.commit(session, records)

        self._transition(CrawlState.RESPONDING)
        return build_playlist_result(self.session_manager.read_all(session))

    async def _handle_playlist_page(self, context: CrawlContext) -> List[RawVideoRecord]:
        page = context.page
        await wait_for_items(page, self.config.selector_timeout_ms)

        self._transition(CrawlState.SCROLLING)
        scroll = await scroll_until_stable(
            page,
            settle_seconds=self.config.scroll_settle_seconds,
            max_rounds=self.config.scroll_max_rounds,
            max_elapsed=self.config.scroll_max_seconds,
        )
        if not scroll.stable:
            logger.warning(f"Extracting from a page that did not stabilize ({scroll.rounds} scrolls)")

        self._transition(CrawlState.EXTRACTING)
        records = await read_records(page)
        logger.info(f"Found {len(records)} videos in the playlist")
        if context.failed_subrequests:
            logger.debug(f"{len(context.failed_subrequests)} sub-requests failed while loading {context.request.url}")
        return records


async def scrape_playlist(payload: Any, engine, session_manager: SessionManager,
                          config: Optional[ScraperConfig] = None) -> PlaylistResult:
    """Convenience wrapper for a single scrape"""
    orchestrator = PlaylistScrapeOrchestrator(engine, session_manager, config)
    return await orchestrator.run(payload)
