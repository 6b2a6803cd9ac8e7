# tests/conftest.py
"""
Shared Test Helpers

Builders for canonical rates and a controllable clock used across the
history store, detector and monitoring service tests.
"""
from datetime import datetime, timezone

import pytest

from kzrate.adapters.persistence.history_store import SqliteHistoryStore
from kzrate.domain.models import CanonicalRate, ExchangeQuote

NOW = datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)


def make_rate(usd_sell=485.0, rub_sell=5.2, usd_buy=None, rub_buy=None):
    """Canonical rate with buy legs slightly below sell unless given."""
    return CanonicalRate(
        usd_to_kzt=ExchangeQuote(buy=usd_buy if usd_buy is not None else usd_sell - 3.0, sell=usd_sell),
        rub_to_kzt=ExchangeQuote(buy=rub_buy if rub_buy is not None else rub_sell - 0.2, sell=rub_sell),
    )


class FakeClock:
    def __init__(self, now=NOW):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    s = SqliteHistoryStore(clock=clock)
    yield s
    s.close()
