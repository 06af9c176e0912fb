import pytest
from conftest import FakePage, make_rows

from playlist_scraper.data_models.models import RawVideoRecord
from playlist_scraper.errors import CrawlFailureError, ErrorType
from playlist_scraper.extractor import ITEM_SELECTOR, extract, read_records


async def test_reads_rows_in_document_order():
    page = FakePage(rows=make_rows("10 views", "20 views", "30 views"))
    records = await extract(page)
    assert [r.raw_views_text for r in records] == ["10 views", "20 views", "30 views"]
    assert records[0].title == "Title 1"
    assert page.queries == [ITEM_SELECTOR]


async def test_partial_rows_are_kept():
    page = FakePage(rows=[
        {"title": "", "viewsText": "5 views", "thumbnail": ""},
        {"viewsText": None},
        {"title": "Only title"},
    ])
    records = await read_records(page)
    assert records == [
        RawVideoRecord(raw_views_text="5 views"),
        RawVideoRecord(),
        RawVideoRecord(title="Only title"),
    ]


async def test_duplicate_rows_are_not_filtered():
    page = FakePage(rows=make_rows("1 view") * 2)
    assert len(await read_records(page)) == 2


async def test_selector_timeout_is_a_crawl_failure():
    page = FakePage(rows=make_rows("1 view"), items_appear=False)
    with pytest.raises(CrawlFailureError) as exc:
        await extract(page, timeout_ms=50)
    assert exc.value.error_type == ErrorType.TIMEOUT
    assert page.queries == []
