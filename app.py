#!/usr/bin/env python3
"""
Flask API for the YouTube Playlist Scraper
Accepts a playlist URL and returns the video list plus chart data.
"""

import asyncio
import logging
import os
from datetime import datetime
from typing import Callable, Optional

from flask import Flask, request, jsonify
from flask_cors import CORS

from playlist_scraper.browser_manager import BrowserEngine
from playlist_scraper.config import ScraperConfig, configure_logging, get_scraper_config
from playlist_scraper.errors import InvalidInputError, PlaylistScraperError
from playlist_scraper.orchestrator import PlaylistScrapeOrchestrator, scrape_playlist
from playlist_scraper.storage import SessionManager, create_store

# Configure logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

SCRAPE_ERROR_MESSAGE = "An error occurred while scraping the playlist"


def run_async(coro):
    """Helper function to run async code in Flask"""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def create_app(
    config: Optional[ScraperConfig] = None,
    session_manager: Optional[SessionManager] = None,
    engine_factory: Optional[Callable] = None,
) -> Flask:
    """
    Build the Flask app.

    Args:
        config: scraper settings (environment when omitted)
        session_manager: shared session manager (built from config on first use)
        engine_factory: returns an async-context-manager browser engine; a new
            engine is started for every request since each request runs on its
            own event loop
    """
    app = Flask(__name__)
    CORS(app)  # Enable CORS for all routes

    state = {
        'config': config,
        'session_manager': session_manager,
    }

    def get_config() -> ScraperConfig:
        if state['config'] is None:
            state['config'] = get_scraper_config()
        return state['config']

    def get_session_manager() -> SessionManager:
        """Get or create the session manager"""
        if state['session_manager'] is None:
            cfg = get_config()
            state['session_manager'] = SessionManager(create_store(
                cfg.storage_backend,
                storage_path=cfg.storage_path,
                mongodb_uri=cfg.mongodb_uri,
                mongodb_database=cfg.mongodb_database,
            ))
        return state['session_manager']

    def make_engine():
        if engine_factory is not None:
            return engine_factory()
        cfg = get_config()
        return BrowserEngine(headless=cfg.headless, navigation_timeout_ms=cfg.selector_timeout_ms)

    async def scrape(payload):
        PlaylistScrapeOrchestrator.validate(payload)
        async with make_engine() as engine:
            return await scrape_playlist(payload, engine, get_session_manager(), get_config())

    @app.route('/health', methods=['GET'])
    def health_check():
        """Health check endpoint"""
        return jsonify({
            "status": "healthy",
            "timestamp": datetime.now().isoformat(),
            "service": "YouTube Playlist Scraper"
        })

    @app.route('/api/scrape-playlist', methods=['POST'])
    def scrape_playlist_route():
        """
        Scrape a YouTube playlist

        Expected payload:
        {
            "playlistUrl": "https://www.youtube.com/playlist?list=..."
        }
        """
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            data = {}

        try:
            result = run_async(scrape(data))
        except InvalidInputError as e:
            return jsonify({"error": e.public_message}), 400
        except PlaylistScraperError as e:
            logger.error(f"Scrape failed ({e.error_type.value}): {e}")
            return jsonify({"error": SCRAPE_ERROR_MESSAGE}), 500
        except Exception as e:
            logger.error(f"Unexpected error while scraping: {e}")
            return jsonify({"error": SCRAPE_ERROR_MESSAGE}), 500

        return jsonify(result.to_response())

    @app.errorhandler(404)
    def not_found(error):
        """Handle 404 errors"""
        return jsonify({
            "error": "Endpoint not found",
            "available_endpoints": [
                "GET /health - Health check",
                "POST /api/scrape-playlist - Scrape a YouTube playlist",
            ]
        }), 404

    return app


app = create_app()

if __name__ == '__main__':
    configure_logging()
    app.run(
        host='0.0.0.0',
        port=int(os.environ.get('PORT', 5000)),
        debug=os.environ.get('FLASK_ENV') == 'development'
    )
