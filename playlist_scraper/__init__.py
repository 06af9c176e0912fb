"""
YouTube playlist scraper - video titles, view counts and thumbnails from a
playlist page, driven through a headless browser
"""

from .data_models.models import GraphPoint, PlaylistLocator, PlaylistResult, RawVideoRecord, VideoRecord
from .errors import CrawlFailureError, InfrastructureFailureError, InvalidInputError, PlaylistScraperError
from .orchestrator import PlaylistScrapeOrchestrator, build_playlist_result, scrape_playlist
from .view_counts import normalize_views

__all__ = [
    'CrawlFailureError',
    'GraphPoint',
    'InfrastructureFailureError',
    'InvalidInputError',
    'PlaylistLocator',
    'PlaylistResult',
    'PlaylistScrapeOrchestrator',
    'PlaylistScraperError',
    'RawVideoRecord',
    'VideoRecord',
    'build_playlist_result',
    'normalize_views',
    'scrape_playlist',
]
