import asyncio

import pytest

from playlist_scraper.errors import (
    CrawlFailureError,
    ErrorHandler,
    ErrorType,
    InfrastructureFailureError,
    InvalidInputError,
    classify_error,
)


@pytest.mark.parametrize("exception, expected", [
    (asyncio.TimeoutError(), ErrorType.TIMEOUT),
    (RuntimeError("Timeout 30000ms exceeded."), ErrorType.TIMEOUT),
    (RuntimeError("net::ERR_NAME_NOT_RESOLVED at https://x"), ErrorType.NETWORK_ERROR),
    (RuntimeError("Evaluation failed: ReferenceError"), ErrorType.SCRIPT_ERROR),
    (RuntimeError("something else"), ErrorType.UNKNOWN),
    (InfrastructureFailureError("disk full"), ErrorType.INFRASTRUCTURE),
])
def test_classify_error(exception, expected):
    assert classify_error(exception) == expected


def test_http_status_per_error_kind():
    assert InvalidInputError("Invalid playlist URL").http_status == 400
    assert InfrastructureFailureError("x").http_status == 500
    assert CrawlFailureError("x").http_status == 500


def test_limits_and_bad_input_are_not_retried():
    handler = ErrorHandler(max_retries=3)
    assert not handler.should_retry(ErrorType.REQUEST_LIMIT, 0)
    assert not handler.should_retry(ErrorType.INVALID_INPUT, 0)
    assert handler.should_retry(ErrorType.TIMEOUT, 0)
    assert handler.should_retry(ErrorType.NETWORK_ERROR, 0)
    assert not handler.should_retry(ErrorType.NETWORK_ERROR, 3)


def test_retry_delay_is_capped():
    handler = ErrorHandler(base_delay=1.0, max_delay=5.0)
    assert handler.get_retry_delay(ErrorType.NETWORK_ERROR, 10) == 5.0


async def test_retry_with_backoff_eventually_succeeds():
    handler = ErrorHandler(max_retries=2, base_delay=0.0)
    calls = []

    async def flaky():
        calls.append(1)
        if len(calls) < 3:
            raise RuntimeError("connection reset")
        return "ok"

    assert await handler.retry_with_backoff(flaky) == "ok"
    assert len(calls) == 3
    assert handler.error_counts[ErrorType.NETWORK_ERROR] == 2


async def test_scraper_errors_are_not_retried():
    handler = ErrorHandler(max_retries=3, base_delay=0.0)
    calls = []
    failures = []

    async def selector_timeout():
        calls.append(1)
        raise CrawlFailureError("items never appeared", ErrorType.TIMEOUT)

    with pytest.raises(CrawlFailureError):
        await handler.retry_with_backoff(selector_timeout, on_failure=failures.append)
    assert len(calls) == 1
    assert len(failures) == 1
