"""Tests for the environment model."""

from datetime import datetime, timezone

import pytest

from roadsense.models.schemas import RainIntensity, RoadCondition
from roadsense.pipeline.environment import (
    classify_rain,
    classify_road,
    generate_environment,
    is_night_at,
    local_hour,
)
from tests.conftest import PRAGUE_LAT, PRAGUE_LNG, REFERENCE_TIME


class TestNight:
    """Local time is UTC+1; night is [21:00, 06:00)."""

    @pytest.mark.parametrize(
        "utc_hour,expected",
        [(4, True), (5, False), (12, False), (19, False), (20, True), (23, True)],
    )
    def test_is_night_at(self, utc_hour, expected):
        moment = datetime(2025, 1, 15, utc_hour, 0, tzinfo=timezone.utc)
        assert is_night_at(moment) is expected

    def test_local_hour_wraps(self):
        assert local_hour(datetime(2025, 1, 15, 23, 30, tzinfo=timezone.utc)) == 0


class TestClassification:
    """Rain and road classification tables."""

    @pytest.mark.parametrize(
        "roll,expected",
        [
            (0.0, RainIntensity.LOW),
            (0.069, RainIntensity.LOW),
            (0.08, RainIntensity.MEDIUM),
            (0.095, RainIntensity.HIGH),
            (0.1, RainIntensity.NONE),
            (0.9, RainIntensity.NONE),
        ],
    )
    def test_classify_rain(self, roll, expected):
        assert classify_rain(roll, 0.1) is expected

    @pytest.mark.parametrize(
        "rain,temperature,expected",
        [
            (RainIntensity.HIGH, -6.0, RoadCondition.SLIPPERY_ICE),
            (RainIntensity.MEDIUM, -5.0, RoadCondition.SLIPPERY_ICE),
            (RainIntensity.MEDIUM, 0.0, RoadCondition.SLIPPERY),
            (RainIntensity.HIGH, 3.0, RoadCondition.SLIPPERY_WET),
            (RainIntensity.MEDIUM, 3.0, RoadCondition.WET),
            (RainIntensity.LOW, 3.0, RoadCondition.DRY),
            (RainIntensity.NONE, -8.0, RoadCondition.SLIPPERY_ICE),
            (RainIntensity.NONE, -7.9, RoadCondition.DRY),
        ],
    )
    def test_classify_road(self, rain, temperature, expected):
        assert classify_road(rain, temperature) is expected


class TestGenerateEnvironment:
    """The environment is a pure function of its inputs."""

    def test_same_inputs_same_output(self):
        a = generate_environment(PRAGUE_LAT, PRAGUE_LNG, REFERENCE_TIME, 1234)
        b = generate_environment(PRAGUE_LAT, PRAGUE_LNG, REFERENCE_TIME, 1234)
        assert a == b

    def test_temperature_rounded_to_one_decimal(self):
        env = generate_environment(PRAGUE_LAT, PRAGUE_LNG, REFERENCE_TIME, 5)
        assert env.temperature == round(env.temperature, 1)

    def test_temperature_within_model_range(self):
        """Baseline 3..6 °C ± 12 seasonal ± 2 noise."""
        for seed in range(50):
            env = generate_environment(PRAGUE_LAT, PRAGUE_LNG, REFERENCE_TIME, seed)
            assert -11.0 <= env.temperature <= 20.0

    def test_night_follows_moment(self):
        night = datetime(2025, 1, 15, 23, 0, tzinfo=timezone.utc)
        assert generate_environment(PRAGUE_LAT, PRAGUE_LNG, night, 1).is_night is True
        assert generate_environment(PRAGUE_LAT, PRAGUE_LNG, REFERENCE_TIME, 1).is_night is False

    def test_road_consistent_with_rain(self):
        for seed in range(100):
            env = generate_environment(PRAGUE_LAT, PRAGUE_LNG, REFERENCE_TIME, seed)
            conditions = env.conditions
            assert conditions.road_condition is classify_road(
                conditions.rain_intensity, env.temperature
            )
