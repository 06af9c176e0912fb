"""
Transient dataset storage for playlist scrape sessions
"""

from .session_manager import ScrapeSession, SessionManager
from .store import DatasetStore, FileDatasetStore, MemoryDatasetStore, MongoDatasetStore, create_store

__all__ = [
    'DatasetStore',
    'FileDatasetStore',
    'MemoryDatasetStore',
    'MongoDatasetStore',
    'ScrapeSession',
    'SessionManager',
    'create_store',
]
