"""Shared test fixtures for the roadsense test suite.

Everything runs in-process: the engine is built with small target counts, a
fixed seed and a pinned clock so generated data is reproducible, and route
tests inject that engine through ``app.dependency_overrides``.
"""

from datetime import datetime, timezone

import h3
import pytest

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
)
from roadsense.services.simulation import Simulation

REFERENCE_TIME = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)

PRAGUE_LAT, PRAGUE_LNG = 50.0755, 14.4378
PRAGUE_CELL = h3.latlng_to_cell(PRAGUE_LAT, PRAGUE_LNG, 9)


# ── Factory helpers ───────────────────────────────────────────────────────────


def make_cell(
    h3_index: str = PRAGUE_CELL,
    temperature: float = 4.2,
    confidence: int = 85,
    total_count: int = 40,
    is_night: bool = False,
    fog: bool = False,
    rain_intensity: RainIntensity = RainIntensity.NONE,
    road_condition: RoadCondition = RoadCondition.DRY,
) -> Cell:
    """Create a snapshot Cell for testing."""
    return Cell(
        location=CellLocation(h3_index=h3_index),
        timeframe=CellTimeframe(last="2025-01-15T12:00:00.000Z"),
        metadata=CellMetadata(confidence=confidence, total_count=total_count),
        environment=CellEnvironment(
            temperature=temperature,
            is_night=is_night,
            conditions=CellConditions(
                rain_intensity=rain_intensity,
                road_condition=road_condition,
                fog=fog,
                cross_wind=False,
            ),
        ),
    )


def make_event(temperature: float = 10.0, **overrides) -> RawEvent:
    """Create a RawEvent for testing (defaults apply to omitted fields)."""
    return RawEvent(temperature=temperature, **overrides)


def make_simulation(
    seed: int = 42,
    cells: int = 100,
    hotspots: int = 20,
    **options,
) -> Simulation:
    """Create a Simulation with a pinned clock and small target counts."""
    return Simulation(
        target_cell_count=cells,
        target_hotspot_count=hotspots,
        seed=seed,
        clock=lambda: REFERENCE_TIME,
        **options,
    )


# ── Fixtures ──────────────────────────────────────────────────────────────────


@pytest.fixture
def simulation() -> Simulation:
    """An engine with no generated data yet."""
    return make_simulation()


@pytest.fixture
def seeded_simulation() -> Simulation:
    """An engine after generate_initial_data (seed 42, 100 cells, 20 hotspots)."""
    sim = make_simulation()
    sim.generate_initial_data()
    return sim
