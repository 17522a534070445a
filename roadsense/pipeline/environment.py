"""Plausible weather for a location and moment.

``generate_environment`` is a pure function of (lat, lng, moment, seed): the
same inputs always produce the same observation, and no generator state is
shared between calls.

- Temperature: latitude gradient across the country (6 °C in the south,
  3 °C in the north) + seasonal sine (amplitude 12 °C over the year) +
  uniform noise within ±2 °C, rounded to 0.1 °C.
- Night: local hour (UTC+1) in [0, 6) or [21, 24).
- Rain: a season-scaled base chance split 70/20/10 into LOW/MEDIUM/HIGH.
- Road: derived from rain intensity and temperature.
- Fog: 8 % on cold nights plus a 1 % background; crosswind: 5 %.
"""

from __future__ import annotations

import math
import random
from datetime import datetime, timezone

from roadsense.models.schemas import (
    CellConditions,
    CellEnvironment,
    RainIntensity,
    RoadCondition,
)
from roadsense.pipeline.geography import BOUNDS

LOCAL_UTC_OFFSET_HOURS = 1
SEASONAL_AMPLITUDE = 12.0
NOISE_RANGE = 4.0

FOG_NIGHT_PROBABILITY = 0.08
FOG_NIGHT_MAX_TEMPERATURE = 6.0
FOG_BACKGROUND_PROBABILITY = 0.01
CROSSWIND_PROBABILITY = 0.05


def day_of_year(moment: datetime) -> int:
    return moment.astimezone(timezone.utc).timetuple().tm_yday


def local_hour(moment: datetime) -> int:
    return (moment.astimezone(timezone.utc).hour + LOCAL_UTC_OFFSET_HOURS) % 24


def is_night_at(moment: datetime) -> bool:
    hour = local_hour(moment)
    return hour < 6 or hour >= 21


def seasonal_term(moment: datetime) -> float:
    return math.sin(2 * math.pi * (day_of_year(moment) / 365)) * SEASONAL_AMPLITUDE


def classify_rain(roll: float, base_chance: float) -> RainIntensity:
    if roll < base_chance * 0.7:
        return RainIntensity.LOW
    if roll < base_chance * 0.9:
        return RainIntensity.MEDIUM
    if roll < base_chance:
        return RainIntensity.HIGH
    return RainIntensity.NONE


def classify_road(rain: RainIntensity, temperature: float) -> RoadCondition:
    """Road surface implied by current rain and air temperature."""
    if rain in (RainIntensity.MEDIUM, RainIntensity.HIGH):
        if temperature <= -5:
            return RoadCondition.SLIPPERY_ICE
        if temperature <= 0:
            return RoadCondition.SLIPPERY
        if rain is RainIntensity.HIGH:
            return RoadCondition.SLIPPERY_WET
        return RoadCondition.WET
    if temperature <= -8:
        return RoadCondition.SLIPPERY_ICE
    return RoadCondition.DRY


def generate_environment(lat: float, lng: float, moment: datetime, seed: int) -> CellEnvironment:
    """Derive a weather observation for (lat, lng) at ``moment``.

    ``lng`` is accepted for symmetry with the grid API; the model currently
    varies only with latitude.
    """
    rng = random.Random(seed)
    noise_draw, rain_roll, fog_night_roll, fog_background_roll, crosswind_roll = (
        rng.random() for _ in range(5)
    )

    lat_factor = (lat - BOUNDS.min_lat) / (BOUNDS.max_lat - BOUNDS.min_lat)
    seasonal = seasonal_term(moment)
    baseline = 6 - lat_factor * 3
    noise = (noise_draw - 0.5) * NOISE_RANGE
    temperature = round(baseline + seasonal + noise, 1)

    is_night = is_night_at(moment)

    rain_chance = 0.15 + 0.1 * max(0.0, seasonal / SEASONAL_AMPLITUDE)
    rain = classify_rain(rain_roll, rain_chance)
    road = classify_road(rain, temperature)

    fog = (
        is_night
        and temperature < FOG_NIGHT_MAX_TEMPERATURE
        and fog_night_roll < FOG_NIGHT_PROBABILITY
    ) or fog_background_roll < FOG_BACKGROUND_PROBABILITY
    cross_wind = crosswind_roll < CROSSWIND_PROBABILITY

    return CellEnvironment(
        temperature=temperature,
        is_night=is_night,
        conditions=CellConditions(
            rain_intensity=rain,
            road_condition=road,
            fog=fog,
            cross_wind=cross_wind,
        ),
    )
