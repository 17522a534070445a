"""Simulation engine — owns every store behind the map-data API.

Lifecycle: construct → ``generate_initial_data()`` → ``await start()`` →
``await stop()``. Between start and stop two background activities run on
the event loop:

1. An ingestion tick (sub-second) pushing a small batch of synthetic raw
   events into the accumulator, exactly like an external integration would
   through ``push_raw_event``.
2. A flush tick (15 min by default) that rebuilds the whole snapshot from
   the accumulator, publishes it with a single reference swap and clears the
   accumulator.

Reads never touch the accumulator: they take one reference to the current
snapshot version and work from that, so a read racing a flush sees either
the old version or the new one, never a mixture.
"""

from __future__ import annotations

import asyncio
import logging
import math
import time
from collections.abc import Callable, Mapping, Sequence
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Union

from roadsense.core.seeding import derive_seed, normalize_seed, stream
from roadsense.models.schemas import (
    BoundingBox,
    Cell,
    CellLocation,
    CellMetadata,
    CellStatistics,
    CellTimeframe,
    RainIntensity,
    RawEvent,
    RiskHotspot,
    RoadCondition,
    StatisticsUpdate,
    isoformat_z,
)
from roadsense.pipeline.environment import generate_environment, is_night_at
from roadsense.pipeline.h3_indexer import GridIndexer
from roadsense.pipeline.sampler import SampledLocation, sample_locations
from roadsense.services.accumulator import RawEventAccumulator, summarize_cell
from roadsense.services.hotspots import generate_hotspots
from roadsense.services.snapshot_store import SnapshotStore, SnapshotVersion
from roadsense.services.statistics import StatisticsCache

logger = logging.getLogger(__name__)

ENVIRONMENT_SALT = 0xE17
BASELINE_SALT = 0xBA5E
PRODUCER_SALT = 0x9E3779B9

BboxLike = Union[BoundingBox, str, Sequence[Any]]


class Simulation:
    """Synthetic weather cells and road-risk hotspots behind one service object."""

    def __init__(
        self,
        *,
        target_cell_count: int = 250_000,
        target_hotspot_count: int = 5_000,
        snapshot_interval_seconds: float = 900.0,
        ingest_interval_seconds: float = 0.2,
        seed: int | None = None,
        resolution: int = 9,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.target_cell_count = target_cell_count
        self.target_hotspot_count = target_hotspot_count
        self.snapshot_interval_seconds = snapshot_interval_seconds
        self.ingest_interval_seconds = ingest_interval_seconds
        self.seed = normalize_seed(seed if seed is not None else time.time_ns())
        self.indexer = GridIndexer(resolution)
        self._clock = clock or (lambda: datetime.now(timezone.utc))

        self._accumulator = RawEventAccumulator()
        self._snapshot = SnapshotStore()
        self._statistics = StatisticsCache(self.seed)
        self._hotspots: Mapping[str, RiskHotspot] = MappingProxyType({})
        self._locations: list[SampledLocation] = []

        self._producer_rng = stream(self.seed, 0, PRODUCER_SALT)
        self._running = False
        self._tasks: list[asyncio.Task] = []

    @property
    def resolution(self) -> int:
        return self.indexer.resolution

    @property
    def locations(self) -> list[SampledLocation]:
        return list(self._locations)

    @property
    def accumulator(self) -> RawEventAccumulator:
        return self._accumulator

    @property
    def snapshot_version(self) -> SnapshotVersion:
        return self._snapshot.current()

    @property
    def running(self) -> bool:
        return self._running

    # ── Setup ─────────────────────────────────────────────────────────────────

    def generate_initial_data(self) -> None:
        """Populate the baseline cells and the hotspot ledger."""
        self.generate_initial_cells()
        self.generate_initial_hotspots()

    def generate_initial_cells(self, count: int | None = None) -> int:
        """Sample locations, publish the initial snapshot and seed the accumulator.

        Each location gets one environment observation at the current time.
        The snapshot is published immediately; the same observation is also
        pushed into the accumulator so the first flush produces a comparable
        snapshot. Locations sharing a cell collapse into one snapshot entry.

        Returns:
            The number of sampled locations.
        """
        count = self.target_cell_count if count is None else count
        started = time.monotonic()
        now = self._clock()

        self._locations = sample_locations(count, self.seed, self.indexer)
        self._accumulator.clear()

        cells: dict[str, Cell] = {}
        for i, loc in enumerate(self._locations):
            environment = generate_environment(
                loc.lat, loc.lng, now, derive_seed(self.seed, i, ENVIRONMENT_SALT)
            )
            rng = stream(self.seed, i, BASELINE_SALT)
            confidence = math.floor(70 + rng.random() * 30)
            total_count = max(1, math.floor(1 + rng.random() * 200))

            cells[loc.h3_index] = Cell(
                location=CellLocation(h3_index=loc.h3_index),
                timeframe=CellTimeframe(last=isoformat_z(now)),
                metadata=CellMetadata(confidence=confidence, total_count=total_count),
                environment=environment,
            )
            self._accumulator.ingest(
                loc.h3_index,
                RawEvent(
                    temperature=environment.temperature,
                    confidence=confidence,
                    count=total_count,
                    fog=environment.conditions.fog,
                    cross_wind=environment.conditions.cross_wind,
                    rain_intensity=environment.conditions.rain_intensity,
                    road_condition=environment.conditions.road_condition,
                    timestamp=now,
                ),
            )

        self._snapshot.publish(cells, published_at=now)
        logger.info(
            "Generated %d initial locations → %d cells (seed=%d, res=%d) in %.1fs",
            len(self._locations),
            len(cells),
            self.seed,
            self.resolution,
            time.monotonic() - started,
        )
        return len(self._locations)

    def generate_initial_hotspots(self, count: int | None = None) -> int:
        """Replace the hotspot ledger with a freshly generated set."""
        count = self.target_hotspot_count if count is None else count
        hotspots = generate_hotspots(count, self.seed, now=self._clock())
        self._hotspots = MappingProxyType(hotspots)
        logger.info("Generated %d hotspots (seed=%d)", len(hotspots), self.seed)
        return len(hotspots)

    # ── Lifecycle ─────────────────────────────────────────────────────────────

    async def start(self) -> None:
        """Start the ingestion and flush loops on the running event loop."""
        if self._running:
            return
        self._running = True
        self._tasks = [
            asyncio.create_task(
                self._periodic("ingest", self.ingest_interval_seconds, self.produce_random_events)
            ),
            asyncio.create_task(
                self._periodic("flush", self.snapshot_interval_seconds, self.flush)
            ),
        ]
        logger.info(
            "Simulation started (ingest every %.2fs, flush every %.0fs)",
            self.ingest_interval_seconds,
            self.snapshot_interval_seconds,
        )

    async def stop(self) -> None:
        """Halt both loops and wait for them to exit. Safe to call twice."""
        self._running = False
        tasks, self._tasks = self._tasks, []
        for task in tasks:
            task.cancel()
        for task in tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass
        if tasks:
            logger.info("Simulation stopped")

    async def _periodic(self, name: str, interval: float, action: Callable[[], object]) -> None:
        logger.debug("%s loop started (interval=%.2fs)", name, interval)
        while self._running:
            try:
                await asyncio.sleep(interval)
            except asyncio.CancelledError:
                break
            try:
                action()
            except Exception:
                logger.exception("%s tick failed", name)
        logger.debug("%s loop stopped", name)

    # ── Ingestion ─────────────────────────────────────────────────────────────

    def push_raw_event(self, h3_index: str, event: RawEvent | Mapping[str, Any]) -> None:
        """Add one observation to a cell's accumulator (the snapshot is untouched).

        Raises:
            GridIndexError: ``h3_index`` is not a valid H3 cell.
            pydantic.ValidationError: ``temperature`` missing or a field malformed.
        """
        if not isinstance(event, RawEvent):
            event = RawEvent.model_validate(event)
        self.indexer.latlng_for(h3_index)
        self._accumulator.ingest(h3_index, event)

    def add_or_merge_statistics(
        self, h3_index: str, update: StatisticsUpdate | Mapping[str, Any]
    ) -> CellStatistics:
        if not isinstance(update, StatisticsUpdate):
            update = StatisticsUpdate.model_validate(update)
        return self._statistics.merge(h3_index, update)

    def produce_random_events(self, batch_size: int | None = None) -> int:
        """Push a batch of synthetic events for random known locations."""
        if not self._locations:
            return 0
        if batch_size is None:
            batch_size = max(1, math.floor(math.sqrt(self.target_cell_count) / 50))
        for _ in range(batch_size):
            self._produce_random_event()
        return batch_size

    def _produce_random_event(self) -> None:
        rng = self._producer_rng
        loc = self._locations[rng.randrange(len(self._locations))]
        current = self._snapshot.get(loc.h3_index)

        temperature = current.environment.temperature if current else 5 + rng.random() * 15
        temperature = round(temperature + (rng.random() - 0.5) * 0.6, 1)
        fog = rng.random() < 0.01
        cross_wind = rng.random() < 0.02
        heavy = rng.random() < 0.002
        rain_roll = rng.random()
        if heavy:
            rain = RainIntensity.HIGH if rain_roll < 0.7 else RainIntensity.MEDIUM
        else:
            rain = RainIntensity.LOW if rain_roll < 0.02 else RainIntensity.NONE

        if rain is not RainIntensity.NONE:
            road = RoadCondition.SLIPPERY if temperature <= 0 else RoadCondition.WET
        else:
            road = RoadCondition.SLIPPERY_ICE if temperature <= -8 else RoadCondition.DRY

        self._accumulator.ingest(
            loc.h3_index,
            RawEvent(
                temperature=temperature,
                confidence=math.floor(60 + rng.random() * 40),
                count=1,
                fog=fog,
                cross_wind=cross_wind,
                rain_intensity=rain,
                road_condition=road,
                timestamp=self._clock(),
            ),
        )

    # ── Flush ─────────────────────────────────────────────────────────────────

    def flush(self) -> SnapshotVersion:
        """Replace the snapshot with one summary per accumulated cell.

        Cells without events since the previous flush are dropped. ``is_night``
        carries over from the previous snapshot entry when there is one,
        otherwise it is taken from the current local hour.
        """
        started = time.monotonic()
        now = self._clock()
        previous = self._snapshot.current().cells
        night_now = is_night_at(now)

        with self._accumulator.draining() as pending:
            cells: dict[str, Cell] = {}
            for h3_index, totals in pending.items():
                prior = previous.get(h3_index)
                is_night = prior.environment.is_night if prior is not None else night_now
                cells[h3_index] = summarize_cell(h3_index, totals, is_night=is_night, now=now)
            published = self._snapshot.publish(cells, published_at=now)

        logger.info(
            "Published snapshot v%d: %d cells in %.1fms",
            published.version,
            len(published),
            (time.monotonic() - started) * 1000,
        )
        return published

    # ── Reads ─────────────────────────────────────────────────────────────────

    def get_snapshot(self) -> dict[str, Cell]:
        """Copy of the current snapshot (entries are immutable models)."""
        return dict(self._snapshot.current().cells)

    def get_hotspots(self) -> dict[str, RiskHotspot]:
        return {key: hotspot.model_copy(deep=True) for key, hotspot in self._hotspots.items()}

    def get_cell(self, h3_index: str, *, include_statistics: bool = False) -> Cell | None:
        """One cell's summary, optionally with its long-term statistics attached."""
        cell = self._snapshot.get(h3_index)
        if cell is None:
            return None
        if not include_statistics:
            return cell.model_copy()
        statistics = self._statistics.get(h3_index) or self._statistics.get_or_create(
            cell, now=self._clock()
        )
        return cell.model_copy(update={"statistics": statistics})

    def get_snapshot_in_bbox(self, bbox: BboxLike) -> dict[str, Cell]:
        """Cells whose centroid lies inside ``bbox`` (bounds inclusive).

        Raises:
            InvalidBoundingBoxError: before any cell is scanned.
        """
        box = bbox if isinstance(bbox, BoundingBox) else BoundingBox.parse(bbox)
        cells = self._snapshot.current().cells

        out: dict[str, Cell] = {}
        for h3_index, cell in cells.items():
            lat, lng = self.indexer.latlng_for(h3_index)
            if box.contains(lat, lng):
                out[h3_index] = cell
        return out

    def get_hotspots_in_bbox(self, bbox: BboxLike) -> dict[str, RiskHotspot]:
        """Hotspots whose stored coordinate lies inside ``bbox`` (bounds inclusive)."""
        box = bbox if isinstance(bbox, BoundingBox) else BoundingBox.parse(bbox)
        return {
            key: hotspot.model_copy(deep=True)
            for key, hotspot in self._hotspots.items()
            if box.contains(hotspot.location.latitude, hotspot.location.longitude)
        }
