"""
Persistence Adapters - Data Storage

This package contains adapters for persisting data:
- SQLite history of canonical rates
"""

from kzrate.adapters.persistence.history_store import SqliteHistoryStore

__all__ = ["SqliteHistoryStore"]
