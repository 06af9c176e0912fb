"""
YouTube Playlist Scraper Main Interface
"""

import argparse
import asyncio
import json
import sys
from typing import Optional

from loguru import logger

from playlist_scraper.browser_manager import BrowserEngine
from playlist_scraper.config import configure_logging, get_scraper_config, validate_config
from playlist_scraper.errors import PlaylistScraperError
from playlist_scraper.orchestrator import scrape_playlist
from playlist_scraper.storage import SessionManager, create_store


async def scrape_to_file(url: str, output_file: Optional[str] = None, headless: bool = True) -> bool:
    """
    Scrape one playlist and write the JSON payload

    Args:
        url: YouTube playlist URL (must contain a ``list`` parameter)
        output_file: Output file name, stdout when omitted
        headless: Run the browser without a window

    Returns:
        bool: Success status
    """
    config = get_scraper_config().model_copy(update={'headless': headless})
    try:
        store = create_store(
            config.storage_backend,
            storage_path=config.storage_path,
            mongodb_uri=config.mongodb_uri,
            mongodb_database=config.mongodb_database,
        )
    except Exception as e:
        logger.error(f"Failed to open {config.storage_backend} storage: {e}")
        return False

    try:
        async with BrowserEngine(headless=config.headless) as engine:
            result = await scrape_playlist(url, engine, SessionManager(store), config)
    except PlaylistScraperError as e:
        logger.error(f"Failed to scrape playlist: {e}")
        return False
    except Exception as e:
        logger.error(f"Browser error: {e}")
        return False

    payload = json.dumps(result.to_response(), indent=2, ensure_ascii=False)
    if output_file:
        with open(output_file, 'w', encoding='utf-8') as f:
            f.write(payload)
        logger.info(f"Saved {len(result.video_list)} videos to {output_file}")
    else:
        print(payload)
    return True


def main():
    """Main function with argument parsing"""
    parser = argparse.ArgumentParser(
        description="YouTube Playlist Scraper - Extract titles, view counts and thumbnails from a playlist",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m playlist_scraper.main --url "https://www.youtube.com/playlist?list=PLAYLIST_ID"
  python -m playlist_scraper.main --url "..." --output playlist.json --show-browser
        """
    )
    parser.add_argument('--url', required=True, help='YouTube playlist URL to scrape')
    parser.add_argument('--output', '-o', default=None, help='Output file name (default: print to stdout)')
    parser.add_argument('--show-browser', action='store_true', help='Show browser window')
    parser.add_argument('--log-level', default=None, help='Log level (default: PLAYLIST_LOG_LEVEL or INFO)')

    args = parser.parse_args()

    if args.log_level:
        configure_logging(args.log_level)
    else:
        configure_logging()

    if not validate_config():
        sys.exit(1)

    try:
        success = asyncio.run(scrape_to_file(args.url, args.output, headless=not args.show_browser))
    except KeyboardInterrupt:
        logger.warning("Scraping interrupted by user")
        sys.exit(1)
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
