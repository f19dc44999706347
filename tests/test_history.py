"""
Tests for the history store.

Uses real temporary SQLite databases via the tmp_db fixture.
"""

import sqlite3

import pytest

from picksift.services.frecency import SECONDS_PER_DAY, FrecencyCalculator
from picksift.services.history import HistoryRecord, HistoryStore, MemoryHistoryStore


class TestMemoryHistoryStore:
    """Test the in-memory store."""

    def test_unknown_identity(self, memory_history):
        assert memory_history.get("firefox.desktop") is None

    def test_record_use_creates_and_increments(self, memory_history, now):
        first = memory_history.record_use("firefox.desktop", now)
        second = memory_history.record_use("firefox.desktop", now + 10)
        assert first == HistoryRecord(use_count=1, last_used=now, pinned=False)
        assert second.use_count == 2
        assert second.last_used == now + 10
        assert memory_history.get("firefox.desktop") == second

    def test_pin_independent_of_uses(self, memory_history, now):
        memory_history.set_pinned("code.desktop", True)
        assert memory_history.get("code.desktop") == HistoryRecord(0, None, True)

        memory_history.record_use("code.desktop", now)
        record = memory_history.get("code.desktop")
        assert record.pinned
        assert record.use_count == 1

    def test_unpin_keeps_uses(self, memory_history, now):
        memory_history.record_use("code.desktop", now)
        memory_history.set_pinned("code.desktop", True)
        memory_history.set_pinned("code.desktop", False)
        assert memory_history.get("code.desktop") == HistoryRecord(1, now, False)

    def test_toggle_pin(self, memory_history):
        assert memory_history.toggle_pin("a") is True
        assert memory_history.toggle_pin("a") is False
        assert memory_history.get("a").pinned is False

    def test_forget(self, memory_history, now):
        memory_history.record_use("a", now)
        memory_history.forget("a")
        memory_history.forget("never-seen")
        assert memory_history.get("a") is None

    def test_clear_all(self, memory_history, now):
        memory_history.record_use("a", now)
        memory_history.set_pinned("b", True)
        memory_history.clear_all()
        assert len(memory_history) == 0

    def test_total_uses(self, memory_history, now):
        memory_history.record_use("a", now)
        memory_history.record_use("a", now)
        memory_history.record_use("b", now)
        memory_history.set_pinned("c", True)
        assert memory_history.total_uses() == 3

    def test_records_snapshot(self, memory_history, now):
        memory_history.record_use("a", now)
        memory_history.record_use("b", now)
        pairs = memory_history.records()
        memory_history.forget("a")
        assert [identity for identity, _ in pairs] == ["a", "b"]


class TestGetTop:
    """Test get_top() ordering and filtering."""

    def test_sorted_by_frecency(self, memory_history, now):
        memory_history.record_use("old", now - 30 * SECONDS_PER_DAY)
        for _ in range(5):
            memory_history.record_use("busy", now - SECONDS_PER_DAY)
        memory_history.record_use("fresh", now)

        top = memory_history.get_top(now=now)
        assert [identity for identity, _, _ in top] == ["busy", "fresh", "old"]
        scores = [score for _, score, _ in top]
        assert scores == sorted(scores, reverse=True)

    def test_limit(self, memory_history, now):
        for i in range(20):
            memory_history.record_use(f"app{i}", now)
        assert len(memory_history.get_top(limit=5, now=now)) == 5

    def test_min_uses_filters(self, memory_history, now):
        memory_history.record_use("once", now)
        memory_history.record_use("twice", now)
        memory_history.record_use("twice", now)
        memory_history.set_pinned("pinned-only", True)

        assert [i for i, _, _ in memory_history.get_top(min_uses=2, now=now)] == ["twice"]
        assert len(memory_history.get_top(min_uses=0, now=now)) == 3

    def test_custom_calculator(self, memory_history, now):
        memory_history.record_use("a", now)
        top = memory_history.get_top(now=now, calculator=FrecencyCalculator(weight=1.0))
        assert top[0][1] == pytest.approx(1.0)


class TestHistoryStore:
    """Test the SQLite-backed store."""

    def test_creates_database_and_parent_dir(self, tmp_db):
        with HistoryStore(tmp_db) as store:
            assert not store.degraded
        assert tmp_db.exists()

    def test_persists_across_instances(self, tmp_db, now):
        with HistoryStore(tmp_db) as store:
            store.record_use("firefox.desktop", now)
            store.record_use("firefox.desktop", now + 60)
            store.set_pinned("code.desktop", True)

        with HistoryStore(tmp_db) as store:
            assert store.get("firefox.desktop") == HistoryRecord(2, now + 60, False)
            assert store.get("code.desktop") == HistoryRecord(0, None, True)

    def test_pin_then_use_persists_both(self, tmp_db, now):
        with HistoryStore(tmp_db) as store:
            store.set_pinned("code.desktop", True)
            store.record_use("code.desktop", now)

        with HistoryStore(tmp_db) as store:
            assert store.get("code.desktop") == HistoryRecord(1, now, True)

    def test_namespaces_are_isolated(self, tmp_db, now):
        with HistoryStore(tmp_db, namespace="apps") as apps:
            apps.record_use("firefox", now)
        with HistoryStore(tmp_db, namespace="dmenu") as dmenu:
            assert dmenu.get("firefox") is None
            dmenu.record_use("firefox", now)
            dmenu.clear_all()
        with HistoryStore(tmp_db, namespace="apps") as apps:
            assert apps.get("firefox").use_count == 1

    def test_forget_persists(self, tmp_db, now):
        with HistoryStore(tmp_db) as store:
            store.record_use("a", now)
            store.record_use("b", now)
            store.forget("a")
        with HistoryStore(tmp_db) as store:
            assert store.get("a") is None
            assert store.get("b") is not None

    def test_clear_all_persists(self, tmp_db, now):
        with HistoryStore(tmp_db) as store:
            store.record_use("a", now)
            store.set_pinned("b", True)
            store.clear_all()
        with HistoryStore(tmp_db) as store:
            assert len(store) == 0

    def test_writes_are_committed_immediately(self, tmp_db, now):
        store = HistoryStore(tmp_db)
        store.record_use("a", now)

        conn = sqlite3.connect(str(tmp_db))
        row = conn.execute(
            "SELECT use_count FROM history WHERE namespace = 'apps' AND identity = 'a'"
        ).fetchone()
        conn.close()
        store.close()
        assert row == (1,)

    def test_loads_in_insertion_order(self, tmp_db, now):
        with HistoryStore(tmp_db) as store:
            for identity in ("c", "a", "b"):
                store.record_use(identity, now)
        with HistoryStore(tmp_db) as store:
            assert [identity for identity, _ in store.records()] == ["c", "a", "b"]

    def test_close_is_idempotent(self, tmp_db):
        store = HistoryStore(tmp_db)
        store.close()
        store.close()
