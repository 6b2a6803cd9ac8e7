# src/kzrate/shared/clock.py
"""
Clock - Injectable Source of "Now"

Services and stores take a ``clock`` callable so tests can pin time.
"""
from datetime import datetime, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)
