from conftest import FakePage

from playlist_scraper.scroller import ScrollOutcome, scroll_until_stable


async def test_stops_when_height_is_unchanged():
    page = FakePage(heights=[1000])
    result = await scroll_until_stable(page, settle_seconds=0)
    assert result.outcome == ScrollOutcome.STABLE
    assert result.rounds == 1
    assert page.scrolls == 1


async def test_keeps_scrolling_while_content_loads():
    page = FakePage(heights=[1000, 2000, 3000, 3000])
    result = await scroll_until_stable(page, settle_seconds=0)
    assert result.stable
    assert result.final_height == 3000
    assert result.rounds == 3


async def test_round_cap_reports_timeout():
    page = FakePage(heights=list(range(1000, 100000, 1000)))
    result = await scroll_until_stable(page, settle_seconds=0, max_rounds=5)
    assert result.outcome == ScrollOutcome.TIMEOUT
    assert result.rounds == 5
    assert page.scrolls == 5


async def test_elapsed_cap_reports_timeout():
    page = FakePage(heights=list(range(1000, 100000, 1000)))
    result = await scroll_until_stable(page, settle_seconds=0.01, max_rounds=1000, max_elapsed=0.001)
    assert result.outcome == ScrollOutcome.TIMEOUT
    assert result.rounds == 1
