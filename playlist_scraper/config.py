import os
import sys

from dotenv import load_dotenv
from loguru import logger
from pydantic import BaseModel, Field, ValidationError

# Load environment variables from .env file
load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# Configuration Variables (numbers stay raw strings until ScraperConfig parses them)
PLAYLIST_HEADLESS = _env_bool('PLAYLIST_HEADLESS', True)
PLAYLIST_SELECTOR_TIMEOUT_MS = os.getenv('PLAYLIST_SELECTOR_TIMEOUT_MS', '30000')
PLAYLIST_SCROLL_SETTLE_SECONDS = os.getenv('PLAYLIST_SCROLL_SETTLE_SECONDS', '2.0')
PLAYLIST_SCROLL_MAX_ROUNDS = os.getenv('PLAYLIST_SCROLL_MAX_ROUNDS', '100')
PLAYLIST_SCROLL_MAX_SECONDS = os.getenv('PLAYLIST_SCROLL_MAX_SECONDS', '300')
PLAYLIST_MAX_REQUESTS_PER_CRAWL = os.getenv('PLAYLIST_MAX_REQUESTS_PER_CRAWL', '50')
PLAYLIST_MAX_REQUEST_RETRIES = os.getenv('PLAYLIST_MAX_REQUEST_RETRIES', '3')
PLAYLIST_STORAGE_BACKEND = os.getenv('PLAYLIST_STORAGE_BACKEND', 'memory')
PLAYLIST_STORAGE_PATH = os.getenv('PLAYLIST_STORAGE_PATH', 'playlist_datasets')
PLAYLIST_LOG_LEVEL = os.getenv('PLAYLIST_LOG_LEVEL', 'INFO')
MONGODB_URI = os.getenv('MONGODB_URI', 'mongodb://localhost:27017/')
MONGODB_DATABASE_NAME = os.getenv('MONGODB_DATABASE_NAME', 'playlist-scraper')

STORAGE_BACKENDS = ('memory', 'file', 'mongodb')


class ScraperConfig(BaseModel):
    """Configuration for playlist scraping operations"""
    headless: bool = Field(default=True, description="Run the browser without a window")
    selector_timeout_ms: int = Field(default=30000, gt=0, description="Wait for the first playlist item")
    scroll_settle_seconds: float = Field(default=2.0, ge=0.0, description="Pause after each scroll for lazy rows to render")
    scroll_max_rounds: int = Field(default=100, gt=0, description="Maximum scroll iterations before giving up on stabilization")
    scroll_max_seconds: float = Field(default=300.0, gt=0.0, description="Maximum time spent scrolling")
    max_requests_per_crawl: int = Field(default=50, gt=0, description="Upper bound on requests handled by one crawl")
    max_request_retries: int = Field(default=3, ge=0, description="Retries for a failed crawl request")
    storage_backend: str = Field(default="memory", description="'memory', 'file' or 'mongodb'")
    storage_path: str = Field(default="playlist_datasets", description="Directory used by the file backend")
    mongodb_uri: str = Field(default="mongodb://localhost:27017/")
    mongodb_database: str = Field(default="playlist-scraper")


def get_scraper_config() -> ScraperConfig:
    """
    Build the scraper configuration from environment variables.
    """
    return ScraperConfig(
        headless=PLAYLIST_HEADLESS,
        selector_timeout_ms=PLAYLIST_SELECTOR_TIMEOUT_MS,
        scroll_settle_seconds=PLAYLIST_SCROLL_SETTLE_SECONDS,
        scroll_max_rounds=PLAYLIST_SCROLL_MAX_ROUNDS,
        scroll_max_seconds=PLAYLIST_SCROLL_MAX_SECONDS,
        max_requests_per_crawl=PLAYLIST_MAX_REQUESTS_PER_CRAWL,
        max_request_retries=PLAYLIST_MAX_REQUEST_RETRIES,
        storage_backend=PLAYLIST_STORAGE_BACKEND,
        storage_path=PLAYLIST_STORAGE_PATH,
        mongodb_uri=MONGODB_URI,
        mongodb_database=MONGODB_DATABASE_NAME,
    )


def validate_config():
    """
    Validate that all configuration variables are properly set.
    Returns True if valid, False otherwise.
    """
    errors = []

    try:
        config = get_scraper_config()
    except ValidationError as e:
        for error in e.errors():
            errors.append(f"{'.'.join(str(p) for p in error['loc'])}: {error['msg']}")
        config = None

    if config is not None:
        if config.storage_backend not in STORAGE_BACKENDS:
            errors.append(f"PLAYLIST_STORAGE_BACKEND must be one of {', '.join(STORAGE_BACKENDS)}")
        elif config.storage_backend == 'mongodb' and not config.mongodb_uri.startswith(('mongodb://', 'mongodb+srv://')):
            errors.append("MONGODB_URI format is invalid")

    if errors:
        logger.error("Configuration validation failed:")
        for error in errors:
            logger.error(f"  - {error}")
        return False

    logger.debug("Configuration validation passed")
    return True


def get_config_summary():
    """
    Return a summary of current configuration (without sensitive data)
    """
    return {
        'headless': PLAYLIST_HEADLESS,
        'selector_timeout_ms': PLAYLIST_SELECTOR_TIMEOUT_MS,
        'scroll_settle_seconds': PLAYLIST_SCROLL_SETTLE_SECONDS,
        'scroll_max_rounds': PLAYLIST_SCROLL_MAX_ROUNDS,
        'scroll_max_seconds': PLAYLIST_SCROLL_MAX_SECONDS,
        'max_requests_per_crawl': PLAYLIST_MAX_REQUESTS_PER_CRAWL,
        'max_request_retries': PLAYLIST_MAX_REQUEST_RETRIES,
        'storage_backend': PLAYLIST_STORAGE_BACKEND,
        'mongodb_uri_set': bool(os.getenv('MONGODB_URI')),
    }


def configure_logging(level: str = PLAYLIST_LOG_LEVEL) -> None:
    """Route loguru output to stderr at the configured level"""
    logger.remove()
    logger.add(sys.stderr, level=level.upper())
