# src/kzrate/application/ports.py
"""
Ports - Collaborator Protocols for the Application Layer

The application services depend only on these protocols; adapters provide
the implementations (kurs.kz crawler, SQLite store, Telegram notifier).
"""
from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional, Protocol

from kzrate.domain.models import CanonicalRate, HistoryRecord, RawQuote


class QuoteSource(Protocol):
    """Yields raw per-exchanger quotes. Raises FetchFailedError."""
    def fetch_quotes(self) -> list[RawQuote]:
        ...


class HistoryStore(Protocol):
    """Time series of canonical rates. Every method may raise StorageUnavailableError."""

    def insert(self, rate: CanonicalRate, timestamp: datetime) -> None:
        ...

    def nearest_before(self, duration: timedelta) -> Optional[HistoryRecord]:
        ...

    def latest(self) -> Optional[HistoryRecord]:
        ...

    def all_records(self) -> list[HistoryRecord]:
        ...

    def delete_older_than(self, days: int) -> int:
        ...

    def delete_all(self) -> int:
        ...


class Notifier(Protocol):
    """Outbound message transport. Raises NotifyFailedError."""
    async def send(self, destination: str, text: str) -> None:
        ...
