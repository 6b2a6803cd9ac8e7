# src/kzrate/adapters/persistence/history_store.py
"""
History Store - SQLite Time Series of Canonical Rates

This module persists every observed canonical rate in an embedded SQLite
database and answers the time-based queries the threshold detector needs.

Timestamps are stored as integer microseconds since the Unix epoch (UTC) so
that ordering and ``<=`` comparisons are exact. One lock guards the shared
connection: the scheduled job and manual /trigger runs may use the store from
different executor threads at the same time.

Files that USE this module:
- kzrate.app (creates SqliteHistoryStore from settings.database_path)
- tests.test_history_store (unit tests)

Files that this module USES:
- kzrate.domain.models (CanonicalRate, ExchangeQuote, HistoryRecord)
- kzrate.domain.errors (StorageUnavailableError)
- kzrate.shared.clock (utc_now)
"""
from __future__ import annotations

import logging
import sqlite3
import threading
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional, Union

from kzrate.domain.errors import StorageUnavailableError
from kzrate.domain.models import CanonicalRate, ExchangeQuote, HistoryRecord
from kzrate.shared.clock import Clock, utc_now

log = logging.getLogger(__name__)

MEMORY_DATABASE = ":memory:"

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_MICROSECOND = timedelta(microseconds=1)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS currency_history (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    timestamp INTEGER NOT NULL,
    usd_buy REAL NOT NULL,
    usd_sell REAL NOT NULL,
    rub_buy REAL NOT NULL,
    rub_sell REAL NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_currency_history_timestamp ON currency_history(timestamp);
"""

_COLUMNS = "timestamp, usd_buy, usd_sell, rub_buy, rub_sell"


def _to_micros(ts: datetime) -> int:
    """Convert a datetime to epoch microseconds. Naive datetimes are taken as UTC."""
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return (ts - _EPOCH) // _MICROSECOND


def _from_micros(value: int) -> datetime:
    return _EPOCH + timedelta(microseconds=value)


def _row_to_record(row: sqlite3.Row) -> HistoryRecord:
    return HistoryRecord(
        timestamp=_from_micros(row["timestamp"]),
        rate=CanonicalRate(
            usd_to_kzt=ExchangeQuote(buy=row["usd_buy"], sell=row["usd_sell"]),
            rub_to_kzt=ExchangeQuote(buy=row["rub_buy"], sell=row["rub_sell"]),
        ),
    )


class SqliteHistoryStore:
    """Append-only history of canonical rates backed by SQLite."""

    def __init__(
        self,
        database_path: Union[str, Path] = MEMORY_DATABASE,
        clock: Clock = utc_now,
    ):
        """
        Open (and create if needed) the history database.

        Args:
            database_path: Path to the SQLite file, or ":memory:"
            clock: Source of "now" for look-back and retention queries

        Raises:
            StorageUnavailableError: If the database cannot be opened
        """
        self.database_path = str(database_path)
        self.clock = clock
        self._lock = threading.Lock()

        if self.database_path != MEMORY_DATABASE:
            Path(self.database_path).parent.mkdir(parents=True, exist_ok=True)

        try:
            self._conn = sqlite3.connect(self.database_path, check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            self._conn.executescript(_SCHEMA)
        except sqlite3.Error as e:
            raise StorageUnavailableError(
                f"Failed to open history database {self.database_path}: {e}"
            ) from e

        log.info("History database initialized at: %s", self.database_path)

    def _query(self, sql: str, params: tuple = ()) -> list[sqlite3.Row]:
        """Run a SELECT under the store lock and materialize its rows."""
        try:
            with self._lock:
                return self._conn.execute(sql, params).fetchall()
        except sqlite3.Error as e:
            log.error("History database query failed: %s", e)
            raise StorageUnavailableError(f"History database query failed: {e}") from e

    def _modify(self, sql: str, params: tuple = ()) -> int:
        """Run one write statement in its own transaction; return affected rows."""
        try:
            with self._lock, self._conn:
                return self._conn.execute(sql, params).rowcount
        except sqlite3.Error as e:
            log.error("History database write failed: %s", e)
            raise StorageUnavailableError(f"History database write failed: {e}") from e

    def insert(self, rate: CanonicalRate, timestamp: datetime) -> None:
        """
        Append a record. Duplicate timestamps are kept as separate records.

        Args:
            rate: Canonical rate to store
            timestamp: Observation time
        """
        self._modify(
            f"INSERT INTO currency_history ({_COLUMNS}) VALUES (?, ?, ?, ?, ?)",
            (
                _to_micros(timestamp),
                rate.usd_to_kzt.buy,
                rate.usd_to_kzt.sell,
                rate.rub_to_kzt.buy,
                rate.rub_to_kzt.sell,
            ),
        )
        log.info("Currency rates saved at %s", timestamp.isoformat())

    def nearest_before(self, duration: timedelta) -> Optional[HistoryRecord]:
        """
        Find the freshest record that is at least ``duration`` old.

        Args:
            duration: Look-back duration

        Returns:
            Record with the largest timestamp <= now - duration, or None
        """
        target = self.clock() - duration
        rows = self._query(
            f"SELECT {_COLUMNS} FROM currency_history WHERE timestamp <= ? "
            "ORDER BY timestamp DESC, id DESC LIMIT 1",
            (_to_micros(target),),
        )
        if not rows:
            log.debug("No record found before %s", duration)
            return None
        record = _row_to_record(rows[0])
        log.debug("Found record at %s for look-back %s", record.timestamp.isoformat(), duration)
        return record

    def latest(self) -> Optional[HistoryRecord]:
        """Return the most recent record, or None if the store is empty."""
        rows = self._query(
            f"SELECT {_COLUMNS} FROM currency_history ORDER BY timestamp DESC, id DESC LIMIT 1"
        )
        return _row_to_record(rows[0]) if rows else None

    def all_records(self) -> list[HistoryRecord]:
        """Return every record, newest first."""
        rows = self._query(
            f"SELECT {_COLUMNS} FROM currency_history ORDER BY timestamp DESC, id DESC"
        )
        return [_row_to_record(row) for row in rows]

    def count(self) -> int:
        return self._query("SELECT COUNT(*) FROM currency_history")[0][0]

    def delete_older_than(self, days: int) -> int:
        """
        Remove records with timestamp <= now - days.

        Args:
            days: Retention period in days

        Returns:
            Number of records removed
        """
        cutoff = self.clock() - timedelta(days=days)
        removed = self._modify(
            "DELETE FROM currency_history WHERE timestamp <= ?",
            (_to_micros(cutoff),),
        )
        if removed > 0:
            log.info("Cleaned %d records older than %d days", removed, days)
        else:
            log.debug("No records older than %d days", days)
        return removed

    def delete_all(self) -> int:
        """Remove every record and return how many were removed."""
        removed = self._modify("DELETE FROM currency_history")
        log.info("Deleted %d history records", removed)
        return removed

    def close(self) -> None:
        with self._lock:
            self._conn.close()
