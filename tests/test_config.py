import pytest
from pydantic import ValidationError

from playlist_scraper import config
from playlist_scraper.config import ScraperConfig, get_config_summary, get_scraper_config, validate_config


def test_defaults_match_crawl_limits():
    cfg = ScraperConfig()
    assert cfg.selector_timeout_ms == 30000
    assert cfg.scroll_settle_seconds == 2.0
    assert cfg.max_requests_per_crawl == 50


def test_rejects_non_positive_limits():
    with pytest.raises(ValidationError):
        ScraperConfig(scroll_max_rounds=0)


def test_get_scraper_config_reads_module_settings(monkeypatch):
    monkeypatch.setattr(config, "PLAYLIST_SCROLL_MAX_ROUNDS", 7)
    assert get_scraper_config().scroll_max_rounds == 7


def test_validate_config_flags_unknown_backend(monkeypatch):
    monkeypatch.setattr(config, "PLAYLIST_STORAGE_BACKEND", "redis")
    assert validate_config() is False
    monkeypatch.setattr(config, "PLAYLIST_STORAGE_BACKEND", "memory")
    assert validate_config() is True


def test_summary_hides_connection_string():
    summary = get_config_summary()
    assert "mongodb_uri" not in summary
    assert "mongodb_uri_set" in summary


def test_numeric_settings_are_parsed_from_env_strings(monkeypatch):
    monkeypatch.setattr(config, "PLAYLIST_SCROLL_MAX_ROUNDS", "12")
    monkeypatch.setattr(config, "PLAYLIST_SCROLL_SETTLE_SECONDS", "0.5")
    cfg = get_scraper_config()
    assert cfg.scroll_max_rounds == 12
    assert cfg.scroll_settle_seconds == 0.5


def test_malformed_number_is_reported_not_raised_on_import(monkeypatch):
    monkeypatch.setattr(config, "PLAYLIST_MAX_REQUEST_RETRIES", "three")
    with pytest.raises(ValidationError):
        get_scraper_config()
    assert validate_config() is False
