"""Long-term per-cell statistics, generated lazily and cached.

A cell's record is generated from its live summary the first time it is
requested and then kept for the rest of the process lifetime; flushes do not
invalidate it. The record describes historical context (extremes, day
counts) rather than current weather, so it is allowed to drift from the
live summary. External integrations can overwrite individual fields with
``merge``.
"""

from __future__ import annotations

import logging
import math
import random
import threading
from datetime import datetime, timedelta, timezone

from roadsense.core.seeding import derive_seed, stable_hash
from roadsense.models.schemas import (
    Cell,
    CellStatistics,
    DayCounts,
    RainDays,
    StatisticsUpdate,
    TemperatureExtremes,
    TemperatureReading,
    isoformat_z,
)

logger = logging.getLogger(__name__)

STATISTICS_SALT = 0x5747A7


def empty_statistics() -> CellStatistics:
    return CellStatistics(
        temperature=TemperatureExtremes(lowest=None, highest=None),
        day_counts=DayCounts(
            rain=RainDays(low=0, medium=0, high=0),
            slippery_road=0,
            fog=0,
            cross_wind=0,
        ),
    )


def generate_statistics(cell: Cell, rng: random.Random, now: datetime) -> CellStatistics:
    """Plausible history around a cell's current temperature and counts."""
    t = cell.environment.temperature
    lowest = round(t - (5 + rng.random() * 15), 1)
    highest = round(t + (10 + rng.random() * 15), 1)
    lowest_at = now - timedelta(days=math.floor(rng.random() * 365))
    highest_at = now - timedelta(days=math.floor(rng.random() * 200))

    base_days = max(1, round(cell.metadata.total_count / 10))
    rain_low = round(base_days * min(1, rng.random() * 0.6))
    rain_medium = round(base_days * min(1, rng.random() * 0.3))
    rain_high = round(base_days * min(1, rng.random() * 0.05))
    slippery = round(base_days * (0.4 if t <= 0 else 0.05) * rng.random())
    fog = round(base_days * (0.6 if cell.environment.conditions.fog else 0.05) * rng.random())
    cross_wind = round(base_days * 0.1 * rng.random())

    return CellStatistics(
        temperature=TemperatureExtremes(
            lowest=TemperatureReading(value=lowest, timestamp=isoformat_z(lowest_at)),
            highest=TemperatureReading(value=highest, timestamp=isoformat_z(highest_at)),
        ),
        day_counts=DayCounts(
            rain=RainDays(low=rain_low, medium=rain_medium, high=rain_high),
            slippery_road=slippery,
            fog=fog,
            cross_wind=cross_wind,
        ),
    )


def _pick(new, old):
    return old if new is None else new


def merge_statistics(previous: CellStatistics, update: StatisticsUpdate) -> CellStatistics:
    """Field-wise override: present fields replace, omitted fields are kept."""
    temperature = update.temperature
    day_counts = update.day_counts
    rain = day_counts.rain if day_counts else None
    prev_days = previous.day_counts

    return CellStatistics(
        temperature=TemperatureExtremes(
            lowest=_pick(temperature and temperature.lowest, previous.temperature.lowest),
            highest=_pick(temperature and temperature.highest, previous.temperature.highest),
        ),
        day_counts=DayCounts(
            rain=RainDays(
                low=_pick(rain and rain.low, prev_days.rain.low),
                medium=_pick(rain and rain.medium, prev_days.rain.medium),
                high=_pick(rain and rain.high, prev_days.rain.high),
            ),
            slippery_road=_pick(day_counts and day_counts.slippery_road, prev_days.slippery_road),
            fog=_pick(day_counts and day_counts.fog, prev_days.fog),
            cross_wind=_pick(day_counts and day_counts.cross_wind, prev_days.cross_wind),
        ),
    )


class StatisticsCache:
    """cell id → CellStatistics; the first record stored for a cell wins."""

    def __init__(self, seed: int) -> None:
        self._seed = seed
        self._records: dict[str, CellStatistics] = {}
        self._lock = threading.Lock()

    def get(self, h3_index: str) -> CellStatistics | None:
        return self._records.get(h3_index)

    def get_or_create(self, cell: Cell, now: datetime | None = None) -> CellStatistics:
        h3_index = cell.location.h3_index
        cached = self._records.get(h3_index)
        if cached is not None:
            return cached

        rng = random.Random(derive_seed(self._seed, stable_hash(h3_index), STATISTICS_SALT))
        generated = generate_statistics(cell, rng, now or datetime.now(timezone.utc))
        with self._lock:
            return self._records.setdefault(h3_index, generated)

    def merge(self, h3_index: str, update: StatisticsUpdate) -> CellStatistics:
        with self._lock:
            previous = self._records.get(h3_index) or empty_statistics()
            merged = merge_statistics(previous, update)
            self._records[h3_index] = merged
        logger.debug("Merged statistics for %s", h3_index)
        return merged

    def __len__(self) -> int:
        return len(self._records)
