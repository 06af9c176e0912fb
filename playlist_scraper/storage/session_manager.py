"""
Scrape session management - one uniquely keyed dataset per request,
always dropped when the request finishes
"""

from __future__ import annotations

import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, List, Sequence

from loguru import logger

from playlist_scraper.data_models.models import RawVideoRecord
from playlist_scraper.errors import InfrastructureFailureError
from playlist_scraper.storage.store import DatasetStore


@dataclass
class ScrapeSession:
    session_id: str
    dataset_name: str
    disposed: bool = False


class SessionManager:
    """Opens, fills, reads back and disposes scrape sessions"""

    def __init__(self, store: DatasetStore):
        self.store = store

    def open(self) -> ScrapeSession:
        """Allocate a fresh session id and its dataset"""
        session_id = uuid.uuid4().hex
        session = ScrapeSession(session_id=session_id, dataset_name=f"playlist-{session_id}")
        try:
            self.store.open_area(session.dataset_name)
        except Exception as e:
            logger.error(f"Failed to open dataset {session.dataset_name}: {e}")
            self._drop_quietly(session)
            raise InfrastructureFailureError(f"Could not open scrape session: {e}") from e

        logger.debug(f"Opened scrape session {session_id}")
        return session

    def commit(self, session: ScrapeSession, records: Sequence[RawVideoRecord]) -> None:
        """Write one crawl attempt's records as a single batch"""
        self._ensure_open(session)
        self.store.append_batch(session.dataset_name, [record.to_row() for record in records])
        logger.debug(f"Committed {len(records)} records to session {session.session_id}")

    def read_all(self, session: ScrapeSession) -> List[RawVideoRecord]:
        """Read every committed record back in commit order"""
        self._ensure_open(session)
        records: List[RawVideoRecord] = []
        for batch in self.store.read_batches(session.dataset_name):
            records.extend(RawVideoRecord.from_row(row) for row in batch)
        return records

    def dispose(self, session: ScrapeSession) -> None:
        """Drop the session's dataset. Safe to call more than once."""
        if session.disposed:
            logger.debug(f"Session {session.session_id} already disposed")
            return
        try:
            self.store.drop_area(session.dataset_name)
        except Exception as e:
            logger.error(f"Failed to drop dataset {session.dataset_name}: {e}")
            raise InfrastructureFailureError(f"Could not dispose scrape session: {e}") from e
        session.disposed = True
        logger.debug(f"Disposed scrape session {session.session_id}")

    @asynccontextmanager
    async def session(self) -> AsyncIterator[ScrapeSession]:
        """Open a session for the duration of the block and dispose it on exit"""
        session = self.open()
        try:
            yield session
        except Exception:
            try:
                self.dispose(session)
            except InfrastructureFailureError as e:
                logger.warning(f"Keeping the original error; {e}")
            raise
        self.dispose(session)

    def _ensure_open(self, session: ScrapeSession) -> None:
        if session.disposed:
            raise InfrastructureFailureError(f"Session {session.session_id} has been disposed")

    def _drop_quietly(self, session: ScrapeSession) -> None:
        try:
            self.store.drop_area(session.dataset_name)
        except Exception as e:
            logger.warning(f"Cleanup of half-open dataset {session.dataset_name} failed: {e}")
