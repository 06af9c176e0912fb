import pytest

from playlist_scraper.view_counts import normalize_views


@pytest.mark.parametrize("text, expected", [
    ("1,234 views", 1234),
    ("1.5M views", 1_500_000),
    ("200K views", 200_000),
    ("2B views", 2_000_000_000),
    ("1 view", 1),
    ("3 VIEWS", 3),
    ("12k Views", 12_000),
    ("  42 views  ", 42),
    ("1,000,000 views", 1_000_000),
])
def test_parses_view_counts(text, expected):
    assert normalize_views(text) == expected


@pytest.mark.parametrize("text", ["no data", "", None, "No views", "views", "1.2.3K views", "Premiered 2 days ago"])
def test_unparseable_text_is_zero(text):
    assert normalize_views(text) == 0


def test_fraction_without_suffix_is_truncated():
    assert normalize_views("1.5 views") == 1
