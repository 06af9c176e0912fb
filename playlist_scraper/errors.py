"""
Error Handler - failure taxonomy and bounded retry logic for playlist crawls
Classifies browser/storage failures and retries individual crawl requests
"""

from __future__ import annotations

import asyncio
import random
from enum import Enum
from typing import Any, Callable, Dict, Optional

from loguru import logger


class ErrorType(Enum):
    """Types of errors that can occur"""
    INVALID_INPUT = "invalid_input"
    INFRASTRUCTURE = "infrastructure"
    TIMEOUT = "timeout"
    NETWORK_ERROR = "network_error"
    SCRIPT_ERROR = "script_error"
    REQUEST_LIMIT = "request_limit"
    UNKNOWN = "unknown"


class PlaylistScraperError(Exception):
    """Base exception for playlist scraper errors"""

    http_status = 500
    public_message = "An error occurred while scraping the playlist"

    def __init__(self, message: str, error_type: ErrorType = ErrorType.UNKNOWN):
        super().__init__(message)
        self.error_type = error_type


class InvalidInputError(PlaylistScraperError):
    """Missing or unparseable playlist locator"""

    http_status = 400

    def __init__(self, message: str):
        super().__init__(message, ErrorType.INVALID_INPUT)
        self.public_message = message


class InfrastructureFailureError(PlaylistScraperError):
    """Session or storage allocation failed"""

    def __init__(self, message: str):
        super().__init__(message, ErrorType.INFRASTRUCTURE)


class CrawlFailureError(PlaylistScraperError):
    """Navigation, selector wait or in-page script failed"""


def classify_error(exception: BaseException) -> ErrorType:
    """Classify the type of error based on the exception"""
    if isinstance(exception, PlaylistScraperError):
        return exception.error_type
    if isinstance(exception, asyncio.TimeoutError):
        return ErrorType.TIMEOUT

    error_message = str(exception).lower()
    if "timeout" in error_message or "timed out" in error_message:
        return ErrorType.TIMEOUT
    if any(err in error_message for err in [
        "net::err_", "connection", "network", "name not resolved",
        "connection refused", "connection reset",
    ]):
        return ErrorType.NETWORK_ERROR
    if "evaluation failed" in error_message or "execution context" in error_message:
        return ErrorType.SCRIPT_ERROR
    return ErrorType.UNKNOWN


class ErrorHandler:
    """Handles errors and implements retry logic for a single crawl request"""

    def __init__(self, max_retries: int = 3, base_delay: float = 1.0, max_delay: float = 10.0):
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.error_counts: Dict[ErrorType, int] = {error_type: 0 for error_type in ErrorType}

    def should_retry(self, error_type: ErrorType, retry_count: int) -> bool:
        """Determine if the request should be retried"""
        if retry_count >= self.max_retries:
            return False

        if error_type in [ErrorType.REQUEST_LIMIT, ErrorType.INVALID_INPUT, ErrorType.INFRASTRUCTURE]:
            return False

        return True

    def get_retry_delay(self, error_type: ErrorType, retry_count: int) -> float:
        """Calculate retry delay with exponential backoff and jitter"""
        delay = self.base_delay * (2 ** retry_count)
        if error_type == ErrorType.NETWORK_ERROR:
            delay *= 2

        delay *= random.uniform(0.8, 1.2)
        return max(0.0, min(self.max_delay, delay))

    async def retry_with_backoff(
        self,
        func: Callable,
        *args,
        on_failure: Optional[Callable[[BaseException], Any]] = None,
        **kwargs
    ) -> Any:
        """Execute function with retry logic and exponential backoff.

        ``on_failure`` is called once with the last exception when every
        attempt has failed; the exception is then re-raised.
        """
        last_exception: Optional[BaseException] = None

        for retry_count in range(self.max_retries + 1):
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                last_exception = e
                error_type = classify_error(e)
                self.error_counts[error_type] += 1

                logger.warning(f"Attempt {retry_count + 1} failed: {error_type.value} - {e}")

                # Failures already raised as scraper errors (e.g. selector timeouts) are final
                if isinstance(e, PlaylistScraperError) or not self.should_retry(error_type, retry_count):
                    break

                delay = self.get_retry_delay(error_type, retry_count)
                logger.info(f"Retrying in {delay:.2f} seconds...")
                await asyncio.sleep(delay)

        if on_failure is not None:
            on_failure(last_exception)
        raise last_exception

    def log_error_stats(self) -> None:
        """Log error statistics"""
        for error_type, count in self.error_counts.items():
            if count > 0:
                logger.info(f"  {error_type.value}: {count}")
