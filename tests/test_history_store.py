# tests/test_history_store.py
"""
History Store Tests - Unit Tests for SQLite Rate History

Covers the look-back query boundary, ordering, retention pruning and error
wrapping of the SQLite-backed store.

Files that USE this module:
- pytest (test runner executes these tests)

Files that this module USES:
- kzrate.adapters.persistence.history_store (SqliteHistoryStore)
- kzrate.domain.errors (StorageUnavailableError)
- pytest (testing framework, tmp_path fixture)
"""
from datetime import datetime, timedelta, timezone

import pytest

from conftest import NOW, FakeClock, make_rate
from kzrate.adapters.persistence.history_store import SqliteHistoryStore
from kzrate.domain.errors import StorageUnavailableError


class TestInsertAndRead:
    def test_empty_store(self, store):
        assert store.latest() is None
        assert store.all_records() == []
        assert store.count() == 0
        assert store.nearest_before(timedelta(hours=1)) is None

    def test_insert_round_trip(self, store):
        rate = make_rate(usd_sell=487.85, rub_sell=5.31)
        store.insert(rate, NOW - timedelta(minutes=5))

        record = store.latest()
        assert record.rate == rate
        assert record.timestamp == NOW - timedelta(minutes=5)
        assert record.timestamp.tzinfo is not None

    def test_naive_timestamp_is_treated_as_utc(self, store):
        store.insert(make_rate(), datetime(2025, 3, 10, 11, 0))
        assert store.latest().timestamp == datetime(2025, 3, 10, 11, 0, tzinfo=timezone.utc)

    def test_all_records_newest_first(self, store):
        for hours in (3, 1, 2):
            store.insert(make_rate(usd_sell=480.0 + hours), NOW - timedelta(hours=hours))

        timestamps = [r.timestamp for r in store.all_records()]
        assert timestamps == [NOW - timedelta(hours=h) for h in (1, 2, 3)]

    def test_duplicate_timestamps_are_kept(self, store):
        ts = NOW - timedelta(hours=1)
        store.insert(make_rate(usd_sell=480.0), ts)
        store.insert(make_rate(usd_sell=481.0), ts)

        assert store.count() == 2
        # last inserted wins among equal timestamps
        assert store.latest().rate.usd_to_kzt.sell == 481.0


class TestNearestBefore:
    def test_returns_freshest_record_old_enough(self, store):
        store.insert(make_rate(usd_sell=470.0), NOW - timedelta(hours=30))
        store.insert(make_rate(usd_sell=480.0), NOW - timedelta(hours=25))
        store.insert(make_rate(usd_sell=490.0), NOW - timedelta(minutes=30))

        record = store.nearest_before(timedelta(hours=24))

        assert record.rate.usd_to_kzt.sell == 480.0

    def test_picks_newest_of_several_older_records(self, store):
        store.insert(make_rate(usd_sell=481.0), NOW - timedelta(hours=10))
        store.insert(make_rate(usd_sell=482.0), NOW - timedelta(hours=6))
        store.insert(make_rate(usd_sell=483.0), NOW - timedelta(hours=4))

        record = store.nearest_before(timedelta(hours=5))

        assert record.timestamp == NOW - timedelta(hours=6)
        assert record.rate.usd_to_kzt.sell == 482.0

    def test_record_exactly_at_boundary_qualifies(self, store):
        store.insert(make_rate(usd_sell=480.0), NOW - timedelta(hours=1))

        record = store.nearest_before(timedelta(hours=1))

        assert record is not None
        assert record.timestamp == NOW - timedelta(hours=1)

    def test_record_one_microsecond_too_new_is_ignored(self, store):
        store.insert(make_rate(), NOW - timedelta(hours=1) + timedelta(microseconds=1))
        assert store.nearest_before(timedelta(hours=1)) is None

    def test_two_hour_old_record_is_hour_baseline_not_day(self, store):
        store.insert(make_rate(usd_sell=485.0), NOW - timedelta(hours=2))

        assert store.nearest_before(timedelta(hours=1)) is not None
        assert store.nearest_before(timedelta(hours=24)) is None

    def test_uses_injected_clock(self, clock, store):
        store.insert(make_rate(), NOW - timedelta(minutes=30))
        assert store.nearest_before(timedelta(hours=1)) is None

        clock.now = NOW + timedelta(hours=1)
        assert store.nearest_before(timedelta(hours=1)) is not None


class TestRetention:
    def test_delete_older_than_removes_boundary_and_older(self, store):
        store.insert(make_rate(), NOW - timedelta(days=31))
        store.insert(make_rate(), NOW - timedelta(days=30))
        store.insert(make_rate(), NOW - timedelta(days=29))

        removed = store.delete_older_than(30)

        assert removed == 2
        assert [r.timestamp for r in store.all_records()] == [NOW - timedelta(days=29)]

    def test_delete_older_than_nothing_to_remove(self, store):
        store.insert(make_rate(), NOW)
        assert store.delete_older_than(30) == 0
        assert store.count() == 1

    def test_delete_all(self, store):
        store.insert(make_rate(), NOW - timedelta(hours=1))
        store.insert(make_rate(), NOW)

        assert store.delete_all() == 2
        assert store.latest() is None
        assert store.delete_all() == 0


class TestFileDatabase:
    def test_creates_parent_directory_and_persists(self, tmp_path):
        db_path = tmp_path / "nested" / "history.db"
        clock = FakeClock()

        first = SqliteHistoryStore(db_path, clock=clock)
        first.insert(make_rate(usd_sell=486.5), NOW)
        first.close()

        second = SqliteHistoryStore(db_path, clock=clock)
        try:
            assert db_path.exists()
            assert second.latest().rate.usd_to_kzt.sell == 486.5
        finally:
            second.close()

    def test_unopenable_path_raises_storage_error(self, tmp_path):
        # a directory cannot be opened as a database file
        with pytest.raises(StorageUnavailableError):
            SqliteHistoryStore(tmp_path, clock=FakeClock())

    def test_closed_store_raises_storage_error(self):
        s = SqliteHistoryStore(clock=FakeClock())
        s.close()

        with pytest.raises(StorageUnavailableError):
            s.latest()
        with pytest.raises(StorageUnavailableError):
            s.insert(make_rate(), NOW)
