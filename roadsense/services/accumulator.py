"""Per-cell running totals of raw observations between snapshot flushes.

Ingestion only ever grows a cell's totals. The flush cycle reads all totals
under the ingestion lock, publishes a new snapshot from them and then clears
the accumulator before releasing the lock, so an event is either part of
the snapshot being built or lands in the fresh accumulator afterwards.

Categorical fields are folded into ordinal scores so they can be averaged:

    rain   NONE 0 · LOW 1 · MEDIUM 2 · HIGH 4
    road   DRY 0 · WET 1 · SLIPPERY 2 · SLIPPERY_ICE 3 · SLIPPERY_WET 2

and mapped back on flush by mean score:

    rain   ≥ 3.0 HIGH · ≥ 1.2 MEDIUM · ≥ 0.6 LOW · else NONE
    road   ≥ 2.5 SLIPPERY_ICE · ≥ 1.8 SLIPPERY · ≥ 0.8 WET · else DRY
"""

from __future__ import annotations

import threading
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from types import MappingProxyType

from roadsense.models.schemas import (
    Cell,
    CellConditions,
    CellEnvironment,
    CellLocation,
    CellMetadata,
    CellTimeframe,
    RainIntensity,
    RawEvent,
    RoadCondition,
    isoformat_z,
)

RAIN_SCORES: dict[RainIntensity, int] = {
    RainIntensity.NONE: 0,
    RainIntensity.LOW: 1,
    RainIntensity.MEDIUM: 2,
    RainIntensity.HIGH: 4,
    RainIntensity.UNRECOGNIZED: 0,
}

ROAD_SCORES: dict[RoadCondition, int] = {
    RoadCondition.DRY: 0,
    RoadCondition.WET: 1,
    RoadCondition.SLIPPERY: 2,
    RoadCondition.SLIPPERY_ICE: 3,
    RoadCondition.SLIPPERY_WET: 2,
    RoadCondition.UNRECOGNIZED: 0,
}

FOG_VOTE_RATIO = 0.5
CROSSWIND_VOTE_RATIO = 0.2


def rain_from_score(mean_score: float) -> RainIntensity:
    if mean_score >= 3.0:
        return RainIntensity.HIGH
    if mean_score >= 1.2:
        return RainIntensity.MEDIUM
    if mean_score >= 0.6:
        return RainIntensity.LOW
    return RainIntensity.NONE


def road_from_score(mean_score: float) -> RoadCondition:
    if mean_score >= 2.5:
        return RoadCondition.SLIPPERY_ICE
    if mean_score >= 1.8:
        return RoadCondition.SLIPPERY
    if mean_score >= 0.8:
        return RoadCondition.WET
    return RoadCondition.DRY


@dataclass
class CellAccumulator:
    """Raw running totals for one cell."""

    sum_temp: float = 0.0
    count: int = 0
    last_ts: datetime | None = None
    sum_confidence: float = 0.0
    sum_counts: float = 0.0
    fog_votes: int = 0
    crosswind_votes: int = 0
    rain_score: float = 0.0
    road_score: float = 0.0

    def add(self, event: RawEvent, timestamp: datetime) -> None:
        self.sum_temp += event.temperature
        self.count += 1
        self.last_ts = timestamp if self.last_ts is None else max(self.last_ts, timestamp)
        self.sum_confidence += event.confidence
        self.sum_counts += event.count
        self.fog_votes += int(event.fog)
        self.crosswind_votes += int(event.cross_wind)
        self.rain_score += RAIN_SCORES[event.rain_intensity]
        self.road_score += ROAD_SCORES[event.road_condition]


def summarize_cell(
    h3_index: str,
    totals: CellAccumulator,
    *,
    is_night: bool,
    now: datetime,
) -> Cell:
    """Collapse one cell's totals into its published summary."""
    n = max(1, totals.count)

    return Cell(
        location=CellLocation(h3_index=h3_index),
        timeframe=CellTimeframe(last=isoformat_z(totals.last_ts or now)),
        metadata=CellMetadata(
            confidence=max(0, min(100, round(totals.sum_confidence / n))),
            total_count=max(1, round(totals.sum_counts)),
        ),
        environment=CellEnvironment(
            temperature=round(totals.sum_temp / n, 1),
            is_night=is_night,
            conditions=CellConditions(
                rain_intensity=rain_from_score(totals.rain_score / n),
                road_condition=road_from_score(totals.road_score / n),
                fog=totals.fog_votes / n >= FOG_VOTE_RATIO,
                cross_wind=totals.crosswind_votes / n >= CROSSWIND_VOTE_RATIO,
            ),
        ),
    )


class RawEventAccumulator:
    """Thread-safe map of cell id → running totals."""

    def __init__(self) -> None:
        self._cells: dict[str, CellAccumulator] = {}
        self._lock = threading.Lock()

    def ingest(self, h3_index: str, event: RawEvent) -> None:
        """Merge one observation into the cell's totals (timestamp defaults to now)."""
        timestamp = event.timestamp or datetime.now(timezone.utc)
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)

        with self._lock:
            totals = self._cells.get(h3_index)
            if totals is None:
                totals = self._cells[h3_index] = CellAccumulator()
            totals.add(event, timestamp)

    def totals(self, h3_index: str) -> CellAccumulator | None:
        """Copy of one cell's current totals."""
        with self._lock:
            totals = self._cells.get(h3_index)
            return replace(totals) if totals is not None else None

    @contextmanager
    def draining(self) -> Iterator[Mapping[str, CellAccumulator]]:
        """Hold ingestion and expose the current totals read-only.

        The accumulator is cleared when the block exits normally; if the block
        raises, the totals are kept for the next attempt.
        """
        with self._lock:
            yield MappingProxyType(self._cells)
            self._cells = {}

    def clear(self) -> None:
        with self._lock:
            self._cells = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._cells)

    def __contains__(self, h3_index: object) -> bool:
        with self._lock:
            return h3_index in self._cells
