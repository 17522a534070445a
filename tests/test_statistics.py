"""Tests for lazily generated per-cell statistics and field-wise merging."""

import random

from roadsense.models.schemas import (
    DayCountsUpdate,
    RainDaysUpdate,
    StatisticsUpdate,
    TemperatureExtremesUpdate,
    TemperatureReading,
)
from roadsense.services.statistics import (
    StatisticsCache,
    empty_statistics,
    generate_statistics,
    merge_statistics,
)
from tests.conftest import PRAGUE_CELL, REFERENCE_TIME, make_cell


class TestGenerateStatistics:
    """Plausible history around the live summary."""

    def test_extremes_bracket_current_temperature(self):
        cell = make_cell(temperature=4.0)
        for seed in range(30):
            stats = generate_statistics(cell, random.Random(seed), REFERENCE_TIME)
            assert -16.0 <= stats.temperature.lowest.value <= -1.0
            assert 14.0 <= stats.temperature.highest.value <= 29.0

    def test_timestamps_are_whole_days_back(self):
        stats = generate_statistics(make_cell(), random.Random(1), REFERENCE_TIME)
        assert stats.temperature.lowest.timestamp.endswith("T12:00:00.000Z")
        assert stats.temperature.highest.timestamp.endswith("T12:00:00.000Z")

    def test_day_counts_bounded_by_base_days(self):
        """base_days = max(1, round(total_count / 10))."""
        cell = make_cell(total_count=200)
        for seed in range(30):
            counts = generate_statistics(cell, random.Random(seed), REFERENCE_TIME).day_counts
            assert 0 <= counts.rain.low <= 20
            assert 0 <= counts.rain.medium <= 6
            assert 0 <= counts.rain.high <= 1
            assert 0 <= counts.cross_wind <= 2

    def test_frost_raises_slippery_days(self):
        warm = make_cell(temperature=10.0, total_count=1000)
        cold = make_cell(temperature=-3.0, total_count=1000)
        warm_total = sum(
            generate_statistics(warm, random.Random(s), REFERENCE_TIME).day_counts.slippery_road
            for s in range(30)
        )
        cold_total = sum(
            generate_statistics(cold, random.Random(s), REFERENCE_TIME).day_counts.slippery_road
            for s in range(30)
        )
        assert cold_total > warm_total


class TestMergeStatistics:
    """Present fields replace, omitted fields keep their value."""

    def test_merge_into_empty_placeholder(self):
        update = StatisticsUpdate(day_counts=DayCountsUpdate(fog=4))
        merged = merge_statistics(empty_statistics(), update)
        assert merged.day_counts.fog == 4
        assert merged.day_counts.slippery_road == 0
        assert merged.temperature.lowest is None

    def test_nested_partial_update(self):
        base = generate_statistics(make_cell(), random.Random(3), REFERENCE_TIME)
        reading = TemperatureReading(value=-20.5, timestamp="2025-01-01T00:00:00.000Z")
        update = StatisticsUpdate(
            temperature=TemperatureExtremesUpdate(lowest=reading),
            day_counts=DayCountsUpdate(rain=RainDaysUpdate(high=9)),
        )
        merged = merge_statistics(base, update)
        assert merged.temperature.lowest == reading
        assert merged.temperature.highest == base.temperature.highest
        assert merged.day_counts.rain.high == 9
        assert merged.day_counts.rain.low == base.day_counts.rain.low
        assert merged.day_counts.fog == base.day_counts.fog

    def test_zero_overrides(self):
        """Zero is a value, not an omission."""
        base = merge_statistics(empty_statistics(), StatisticsUpdate(day_counts=DayCountsUpdate(fog=5)))
        merged = merge_statistics(base, StatisticsUpdate(day_counts=DayCountsUpdate(fog=0)))
        assert merged.day_counts.fog == 0

    def test_empty_update_is_identity(self):
        base = generate_statistics(make_cell(), random.Random(4), REFERENCE_TIME)
        assert merge_statistics(base, StatisticsUpdate()) == base


class TestStatisticsCache:
    """Generated once per cell, reproducible under the seed."""

    def test_generated_once(self):
        cache = StatisticsCache(seed=42)
        first = cache.get_or_create(make_cell(), now=REFERENCE_TIME)
        again = cache.get_or_create(make_cell(temperature=30.0), now=REFERENCE_TIME)
        assert again is first
        assert len(cache) == 1

    def test_reproducible_for_seed(self):
        a = StatisticsCache(seed=42).get_or_create(make_cell(), now=REFERENCE_TIME)
        b = StatisticsCache(seed=42).get_or_create(make_cell(), now=REFERENCE_TIME)
        assert a == b

    def test_merge_creates_record(self):
        cache = StatisticsCache(seed=1)
        assert cache.get(PRAGUE_CELL) is None
        merged = cache.merge(PRAGUE_CELL, StatisticsUpdate(day_counts=DayCountsUpdate(cross_wind=3)))
        assert cache.get(PRAGUE_CELL) == merged
        assert merged.day_counts.cross_wind == 3

    def test_merge_then_get_or_create_keeps_merged(self):
        cache = StatisticsCache(seed=1)
        merged = cache.merge(PRAGUE_CELL, StatisticsUpdate(day_counts=DayCountsUpdate(fog=2)))
        assert cache.get_or_create(make_cell(), now=REFERENCE_TIME) is merged
