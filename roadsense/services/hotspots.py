"""One-shot generation of synthetic road-risk hotspots along the motorways.

Each hotspot draws from its own stream (``i ^ seed ^ HOTSPOT_SALT``), so the
set is reproducible for a given seed and reference time. Occurrence counts
are long-tailed (``5 + floor(u³ · 500)``) and every occurrence is assigned to
exactly one (ISO week, weekday, half-hour) slot, so each of the three
distributions sums to ``total_count``.

Hotspots are keyed by ``"{lat:.5f}_{lng:.5f}"``; two hotspots rounding to the
same key collapse into the later one.
"""

from __future__ import annotations

import logging
import math
import random
import uuid
from collections import Counter
from collections.abc import Sequence
from datetime import datetime, timedelta, timezone

from roadsense.core.seeding import stream
from roadsense.models.schemas import (
    WEEKDAY_CODES,
    ConditionPresence,
    HotspotConditions,
    HotspotEnvironment,
    HotspotLocation,
    HotspotMetadata,
    HotspotStatistics,
    HotspotTimeframe,
    MeanSpread,
    RiskClassification,
    RiskHotspot,
    RiskType,
    TemporalDistribution,
    VehicleStats,
    isoformat_z,
)
from roadsense.pipeline.geography import HIGHWAYS, Polyline
from roadsense.pipeline.sampler import sample_highway_point

logger = logging.getLogger(__name__)

HOTSPOT_SALT = 0xABCDEF
POSITION_JITTER = 0.001
MIN_OCCURRENCES = 5
OCCURRENCE_SCALE = 500
LAST_SEEN_WINDOW_DAYS = 30

RISK_TYPES: tuple[RiskType, ...] = tuple(RiskType)
TIME_BUCKETS: tuple[str, ...] = tuple(f"{h:02d}:{m:02d}" for h in range(24) for m in (0, 30))


def hotspot_id(latitude: float, longitude: float) -> str:
    return f"{latitude:.5f}_{longitude:.5f}"


def _pick_hour(rng: random.Random, time_of_day_impact: int) -> int:
    roll = rng.random()
    if time_of_day_impact >= 3 and roll < 0.6:
        # rush hour
        return 7 + rng.randrange(2) if rng.random() < 0.5 else 16 + rng.randrange(3)
    if time_of_day_impact >= 4 and roll < 0.8:
        # night
        return (22 + rng.randrange(6)) % 24
    return rng.randrange(24)


def generate_distribution(
    rng: random.Random, total_count: int, time_of_day_impact: int
) -> TemporalDistribution:
    """Spread ``total_count`` occurrences over week, weekday and half-hour.

    Weekdays get 70 % of occurrences. When the time-of-day impact is high the
    half-hour buckets lean toward rush hour (≥ 3) and night (≥ 4), otherwise
    they are uniform over the 48 slots.
    """
    by_week: Counter[int] = Counter()
    by_day = dict.fromkeys(WEEKDAY_CODES, 0)
    by_time = dict.fromkeys(TIME_BUCKETS, 0)

    for _ in range(total_count):
        by_week[1 + rng.randrange(52)] += 1

        day_index = rng.randrange(5) if rng.random() < 0.7 else 5 + rng.randrange(2)
        by_day[WEEKDAY_CODES[day_index]] += 1

        hour = _pick_hour(rng, time_of_day_impact)
        minute = 0 if rng.random() < 0.5 else 30
        by_time[f"{hour:02d}:{minute:02d}"] += 1

    return TemporalDistribution(
        by_week=dict(sorted(by_week.items())),
        by_day=by_day,
        by_time=by_time,
    )


def generate_hotspot(
    index: int,
    seed: int,
    now: datetime,
    highways: Sequence[Polyline] = HIGHWAYS,
) -> tuple[str, RiskHotspot]:
    """Build hotspot ``index`` and return it with its id."""
    rng = stream(seed, index, HOTSPOT_SALT)

    base = sample_highway_point(highways, rng)
    latitude = round(base.lat + (rng.random() - 0.5) * POSITION_JITTER, 6)
    longitude = round(base.lng + (rng.random() - 0.5) * POSITION_JITTER, 6)

    total_count = MIN_OCCURRENCES + math.floor(rng.random() ** 3 * OCCURRENCE_SCALE)
    last_seen = now - timedelta(milliseconds=math.floor(rng.random() * LAST_SEEN_WINDOW_DAYS * 86_400_000))
    first_seen = last_seen - timedelta(milliseconds=math.floor((30 + rng.random() * 300) * 86_400_000))

    weather_impact = 1 + rng.randrange(5)
    time_of_day_impact = 1 + rng.randrange(5)

    dry_road = math.floor(total_count * (0.8 if weather_impact <= 2 else 0.3) * rng.random())
    wet_road = math.floor(total_count * (0.7 if weather_impact >= 3 else 0.2) * rng.random())
    rain = math.floor(wet_road * (0.8 if weather_impact >= 3 else 0.3) * rng.random())
    slippery_road = math.floor(total_count * (0.5 if weather_impact >= 4 else 0.1) * rng.random())
    fog = math.floor(total_count * (0.3 if weather_impact >= 4 else 0.05) * rng.random())
    crosswind = math.floor(total_count * 0.1 * rng.random())

    location = HotspotLocation(latitude=latitude, longitude=longitude, std_dev=5 + rng.random() * 25)
    metadata = HotspotMetadata(
        id=str(uuid.UUID(int=rng.getrandbits(128), version=4)),
        risk=RiskClassification(
            type=rng.choice(RISK_TYPES),
            importance=1 + rng.randrange(5),
            confidence=50 + rng.randrange(50),
            residual_confidence=10 + rng.randrange(80),
        ),
        total_count=total_count,
        weather_impact=weather_impact,
        time_of_day_impact=time_of_day_impact,
    )
    vehicle = VehicleStats(
        heading=MeanSpread(
            avg=round(base.heading + (rng.random() - 0.5) * 10) % 360,
            std_dev=2 + rng.random() * 15,
        )
    )
    environment = HotspotEnvironment(
        air_temperature=MeanSpread(avg=-5 + rng.random() * 25, std_dev=1 + rng.random() * 5),
        sun_position=MeanSpread(avg=rng.random() * 360, std_dev=10 + rng.random() * 40),
        conditions=HotspotConditions(
            dry_road=ConditionPresence.of(dry_road),
            wet_road=ConditionPresence.of(wet_road),
            rain=ConditionPresence.of(rain),
            slippery_road=ConditionPresence.of(slippery_road),
            fog=ConditionPresence.of(fog),
            crosswind=ConditionPresence.of(crosswind),
        ),
    )
    statistics = HotspotStatistics(
        distribution=generate_distribution(rng, total_count, time_of_day_impact)
    )

    hotspot = RiskHotspot(
        location=location,
        metadata=metadata,
        timeframe=HotspotTimeframe(first=isoformat_z(first_seen), last=isoformat_z(last_seen)),
        vehicle=vehicle,
        environment=environment,
        statistics=statistics,
    )
    return hotspot_id(latitude, longitude), hotspot


def generate_hotspots(
    count: int,
    seed: int,
    now: datetime | None = None,
    highways: Sequence[Polyline] = HIGHWAYS,
) -> dict[str, RiskHotspot]:
    """Generate ``count`` hotspots keyed by their coordinate id.

    Args:
        count: Number of hotspots to draw (the result can be smaller when ids collide).
        seed: Global seed (unsigned 32-bit).
        now: Reference time for the first/last-seen window; defaults to now (UTC).
        highways: Motorway polylines to anchor hotspots to.
    """
    now = now or datetime.now(timezone.utc)
    hotspots: dict[str, RiskHotspot] = {}
    for i in range(count):
        key, hotspot = generate_hotspot(i, seed, now, highways)
        hotspots[key] = hotspot

    if len(hotspots) < count:
        logger.info("Hotspot id collisions: %d generated, %d kept", count, len(hotspots))
    return hotspots
