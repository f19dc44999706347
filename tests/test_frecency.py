"""
Tests for the frecency calculator.

Pure arithmetic over HistoryRecords with a fixed clock, so no database
is involved here (see test_history.py for persistence).
"""

import math
import time

import pytest

from picksift.config import EngineConfig
from picksift.services.frecency import SECONDS_PER_DAY, FrecencyCalculator, frecency_boost
from picksift.services.history import HistoryRecord


def _days_ago(now, days):
    return now - days * SECONDS_PER_DAY


class TestFrecencyBoost:
    """Test frecency_boost()."""

    def test_no_record_scores_zero(self, now):
        assert frecency_boost(None, now) == 0.0

    def test_never_used_scores_zero(self, now):
        assert frecency_boost(HistoryRecord(use_count=0, last_used=None, pinned=True), now) == 0.0

    def test_single_use_now(self, now):
        record = HistoryRecord(use_count=1, last_used=now)
        assert frecency_boost(record, now) == pytest.approx(100.0)

    def test_half_life(self, now):
        record = HistoryRecord(use_count=1, last_used=_days_ago(now, 3))
        assert frecency_boost(record, now, half_life_days=3.0) == pytest.approx(50.0)

    def test_frequency_is_logarithmic(self, now):
        record = HistoryRecord(use_count=7, last_used=now)
        assert frecency_boost(record, now) == pytest.approx(100.0 * math.log2(8))

    def test_weight_scales_linearly(self, now):
        record = HistoryRecord(use_count=3, last_used=_days_ago(now, 1))
        assert frecency_boost(record, now, weight=10.0) == pytest.approx(
            frecency_boost(record, now, weight=100.0) / 10
        )

    def test_future_timestamp_counts_as_now(self, now):
        future = HistoryRecord(use_count=2, last_used=now + 3600)
        current = HistoryRecord(use_count=2, last_used=now)
        assert frecency_boost(future, now) == frecency_boost(current, now)

    def test_never_negative(self, now):
        record = HistoryRecord(use_count=1, last_used=_days_ago(now, 10_000))
        assert frecency_boost(record, now) >= 0.0


class TestMonotonicity:
    """More recent or more frequent never scores lower."""

    @pytest.mark.parametrize("count", [1, 2, 10, 500])
    def test_more_recent_not_lower(self, now, count):
        ages = [0, 0.5, 1, 3, 10, 100]
        boosts = [
            frecency_boost(HistoryRecord(count, _days_ago(now, age)), now) for age in ages
        ]
        assert boosts == sorted(boosts, reverse=True)

    @pytest.mark.parametrize("age", [0, 1, 7, 60])
    def test_more_uses_not_lower(self, now, age):
        counts = [1, 2, 3, 10, 100, 10_000]
        boosts = [
            frecency_boost(HistoryRecord(count, _days_ago(now, age)), now) for count in counts
        ]
        assert boosts == sorted(boosts)

    def test_recent_single_use_beats_old_heavy_use(self, now):
        old = HistoryRecord(use_count=1000, last_used=_days_ago(now, 30))
        recent = HistoryRecord(use_count=1, last_used=now)
        assert frecency_boost(recent, now) > frecency_boost(old, now)


class TestFrecencyCalculator:
    """Test FrecencyCalculator."""

    def test_defaults_match_function(self, now):
        record = HistoryRecord(use_count=4, last_used=_days_ago(now, 2))
        assert FrecencyCalculator().boost(record, now) == frecency_boost(record, now)

    def test_from_config(self, now):
        calculator = FrecencyCalculator.from_config(
            EngineConfig(half_life_days=1.0, frecency_weight=10.0)
        )
        record = HistoryRecord(use_count=1, last_used=_days_ago(now, 1))
        assert calculator.boost(record, now) == pytest.approx(5.0)

    def test_uses_wall_clock_by_default(self):
        record = HistoryRecord(use_count=1, last_used=time.time())
        assert FrecencyCalculator().boost(record) == pytest.approx(100.0, rel=1e-3)
