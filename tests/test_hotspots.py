"""Tests for road-risk hotspot generation."""

import random
import uuid
from datetime import datetime

import pytest

from roadsense.models.schemas import WEEKDAY_CODES, RiskType
from roadsense.services.hotspots import (
    TIME_BUCKETS,
    generate_distribution,
    generate_hotspot,
    generate_hotspots,
    hotspot_id,
)
from tests.conftest import REFERENCE_TIME


@pytest.fixture(scope="module")
def hotspots():
    return generate_hotspots(200, seed=42, now=REFERENCE_TIME)


class TestDistribution:
    """Every occurrence lands in exactly one week, weekday and half-hour slot."""

    @pytest.mark.parametrize("total,impact", [(5, 1), (37, 3), (505, 5)])
    def test_conservation(self, total, impact):
        dist = generate_distribution(random.Random(total), total, impact)
        assert sum(dist.by_week.values()) == total
        assert sum(dist.by_day.values()) == total
        assert sum(dist.by_time.values()) == total

    def test_all_days_and_buckets_present(self):
        dist = generate_distribution(random.Random(1), 5, 1)
        assert list(dist.by_day) == list(WEEKDAY_CODES)
        assert list(dist.by_time) == list(TIME_BUCKETS)
        assert len(dist.by_time) == 48

    def test_weeks_only_where_used(self):
        dist = generate_distribution(random.Random(2), 10, 1)
        assert all(1 <= week <= 52 for week in dist.by_week)
        assert all(count > 0 for count in dist.by_week.values())
        assert list(dist.by_week) == sorted(dist.by_week)

    def test_weekdays_dominate(self):
        dist = generate_distribution(random.Random(3), 5000, 1)
        weekdays = sum(dist.by_day[code] for code in WEEKDAY_CODES[:5])
        assert 0.65 < weekdays / 5000 < 0.75

    def test_high_time_impact_leans_to_rush_hour(self):
        dist = generate_distribution(random.Random(4), 5000, 3)
        rush = sum(dist.by_time[f"{h:02d}:{m:02d}"] for h in (7, 8, 16, 17, 18) for m in (0, 30))
        # uniform would put ~10 % of occurrences in these five hours
        assert rush / 5000 > 0.5


class TestGenerateHotspots:
    """Hotspot set properties."""

    def test_conservation_for_every_hotspot(self, hotspots):
        for hotspot in hotspots.values():
            total = hotspot.metadata.total_count
            dist = hotspot.statistics.distribution
            assert sum(dist.by_week.values()) == total
            assert sum(dist.by_day.values()) == total
            assert sum(dist.by_time.values()) == total

    def test_ranges(self, hotspots):
        for hotspot in hotspots.values():
            meta = hotspot.metadata
            assert 5 <= meta.total_count <= 505
            assert 50 <= meta.risk.confidence <= 99
            assert 10 <= meta.risk.residual_confidence <= 89
            assert 1 <= meta.risk.importance <= 5
            assert 1 <= meta.weather_impact <= 5
            assert 1 <= meta.time_of_day_impact <= 5
            assert 0 <= hotspot.vehicle.heading.avg < 360
            assert 5 <= hotspot.location.std_dev <= 30

    def test_keys_match_coordinates(self, hotspots):
        for key, hotspot in hotspots.items():
            assert key == hotspot_id(hotspot.location.latitude, hotspot.location.longitude)

    def test_deterministic_for_seed_and_time(self, hotspots):
        again = generate_hotspots(200, seed=42, now=REFERENCE_TIME)
        assert again == hotspots

    def test_seed_changes_output(self, hotspots):
        other = generate_hotspots(200, seed=43, now=REFERENCE_TIME)
        assert set(other) != set(hotspots)

    def test_metadata_id_is_uuid(self, hotspots):
        for hotspot in hotspots.values():
            assert uuid.UUID(hotspot.metadata.id).version == 4

    def test_timeframe_before_reference_time(self, hotspots):
        for hotspot in hotspots.values():
            first = datetime.fromisoformat(hotspot.timeframe.first.replace("Z", "+00:00"))
            last = datetime.fromisoformat(hotspot.timeframe.last.replace("Z", "+00:00"))
            assert first < last <= REFERENCE_TIME
            assert (REFERENCE_TIME - last).days <= 30

    def test_condition_presence_matches_count(self, hotspots):
        for hotspot in hotspots.values():
            conditions = hotspot.environment.conditions
            for presence in (conditions.dry_road, conditions.wet_road, conditions.rain, conditions.fog):
                assert presence.is_present == (presence.count > 0)
            assert conditions.rain.count <= conditions.wet_road.count

    def test_risk_types_from_code_list(self, hotspots):
        assert {h.metadata.risk.type for h in hotspots.values()} <= set(RiskType)

    def test_single_hotspot_regenerates(self):
        """Item i can be rebuilt on its own."""
        key, hotspot = generate_hotspot(17, 42, REFERENCE_TIME)
        assert generate_hotspots(18, seed=42, now=REFERENCE_TIME)[key] == hotspot

    def test_wire_shape(self, hotspots):
        data = next(iter(hotspots.values())).model_dump(mode="json")
        assert set(data) == {"location", "metadata", "timeframe", "vehicle", "environment", "statistics"}
        assert set(data["environment"]["conditions"]) == {
            "dry_road", "wet_road", "rain", "slippery_road", "fog", "crosswind",
        }
        assert data["timeframe"]["last"].endswith("Z")
