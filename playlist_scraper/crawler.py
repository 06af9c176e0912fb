"""
Single-page crawler - runs a request handler against freshly opened pages
with a per-crawl request cap and bounded per-request retries
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set

from loguru import logger

from playlist_scraper.browser_manager import PageCapabilities
from playlist_scraper.errors import CrawlFailureError, ErrorHandler, ErrorType, classify_error


@dataclass(frozen=True)
class CrawlRequest:
    url: str
    unique_key: str


@dataclass
class CrawlContext:
    request: CrawlRequest
    page: PageCapabilities
    failed_subrequests: List[Dict[str, str]] = field(default_factory=list)


RequestHandler = Callable[[CrawlContext], Awaitable[Any]]
FailedRequestHandler = Callable[[CrawlRequest, BaseException], None]


def log_failed_request(request: CrawlRequest, error: BaseException) -> None:
    logger.error(f"Request {request.url} failed too many times: {error}")


class PlaylistCrawler:
    """Runs ``request_handler`` once per unique request against a new page.

    ``engine`` must provide ``new_page(on_request_failed=...)`` as an async
    context manager yielding a :class:`PageCapabilities` page.
    """

    def __init__(
        self,
        engine,
        request_handler: RequestHandler,
        max_requests_per_crawl: int = 50,
        max_request_retries: int = 3,
        failed_request_handler: Optional[FailedRequestHandler] = log_failed_request,
        retry_base_delay: float = 1.0,
    ):
        self.engine = engine
        self.request_handler = request_handler
        self.max_requests_per_crawl = max_requests_per_crawl
        self.failed_request_handler = failed_request_handler
        self.error_handler = ErrorHandler(max_retries=max_request_retries, base_delay=retry_base_delay)
        self.handled_requests = 0

    async def run(self, requests: List[CrawlRequest]) -> List[Any]:
        """Process requests in order; the first request that exhausts its retries fails the crawl"""
        seen: Set[str] = set()
        results = []

        for request in requests:
            if request.unique_key in seen:
                logger.debug(f"Skipping duplicate request {request.unique_key}")
                continue
            seen.add(request.unique_key)

            if self.handled_requests >= self.max_requests_per_crawl:
                raise CrawlFailureError(
                    f"Crawl request limit of {self.max_requests_per_crawl} reached", ErrorType.REQUEST_LIMIT
                )
            self.handled_requests += 1

            try:
                result = await self.error_handler.retry_with_backoff(
                    self._process, request, on_failure=lambda e, r=request: self._on_failed(r, e)
                )
            except CrawlFailureError:
                raise
            except Exception as e:
                raise CrawlFailureError(f"Crawl of {request.url} failed: {e}", classify_error(e)) from e
            results.append(result)

        return results

    async def _process(self, request: CrawlRequest) -> Any:
        context: Optional[CrawlContext] = None

        def on_subrequest_failed(url: str, failure: str) -> None:
            if context is not None:
                context.failed_subrequests.append({"url": url, "failure": failure})
            logger.debug(f"Sub-request failed: {url} ({failure})")

        async with self.engine.new_page(on_request_failed=on_subrequest_failed) as page:
            context = CrawlContext(request=request, page=page)
            logger.info(f"Processing {request.url}...")
            await page.goto(request.url)
            return await self.request_handler(context)

    def _on_failed(self, request: CrawlRequest, error: BaseException) -> None:
        self.error_handler.log_error_stats()
        if self.failed_request_handler is None:
            return
        try:
            self.failed_request_handler(request, error)
        except Exception as e:
            logger.warning(f"Failed-request handler raised: {e}")
