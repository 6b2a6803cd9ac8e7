# src/kzrate/application/history_service.py
"""
History Service - Read and Maintenance Use Cases

Thin use cases over the history store for the bot's /latest, /history and
/clear commands. Failures are logged and re-raised for the caller to report.
"""
from __future__ import annotations

import logging
from typing import Optional

from kzrate.application.ports import HistoryStore
from kzrate.domain.models import HistoryRecord

log = logging.getLogger(__name__)


class HistoryService:
    def __init__(self, store: HistoryStore):
        self.store = store

    def latest(self) -> Optional[HistoryRecord]:
        log.info("Fetching latest currency rate...")
        record = self.store.latest()
        if record is None:
            log.info("History is empty")
        return record

    def history(self, limit: Optional[int] = None) -> list[HistoryRecord]:
        """
        Get stored records, newest first.

        Args:
            limit: Return at most this many records (all if None)
        """
        log.info("Fetching currency history...")
        try:
            records = self.store.all_records()
        except Exception as e:
            log.error("Failed to fetch currency history: %s", e)
            raise
        log.info("Successfully fetched %d history records", len(records))
        if limit is not None:
            return records[:limit]
        return records

    def delete_all(self) -> int:
        log.info("Deleting all currency history records...")
        try:
            deleted = self.store.delete_all()
        except Exception as e:
            log.error("Failed to delete currency history: %s", e)
            raise
        log.info("Successfully deleted %d history records", deleted)
        return deleted
