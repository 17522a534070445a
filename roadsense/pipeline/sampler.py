"""Biased spatial sampling of baseline weather-cell locations.

Sample ``i`` draws from its own stream seeded with ``i ^ seed``, so the
whole location set (and any single location in it) is exactly
reproducible. One uniform draw per sample picks a band:

    [0.00, 0.50)  near a city           normal(city, spread)
    [0.50, 0.75)  city outskirts        normal(city, 5 × spread)
    [0.75, 0.80)  on a motorway         point on polyline + 0.01° jitter
    [0.80, 0.92)  motorway corridor     point on polyline + 0.05° jitter
    [0.92, 1.00)  regional background   normal(city, 10 × spread)

City spread is ``sigma`` in latitude and ``2 × sigma`` in longitude.
"""

from __future__ import annotations

import logging
import math
import random
from collections.abc import Sequence
from dataclasses import dataclass

from roadsense.core.seeding import stream, weighted_choice
from roadsense.pipeline.geography import CITIES, HIGHWAYS, City, Polyline
from roadsense.pipeline.h3_indexer import GridIndexer

logger = logging.getLogger(__name__)

P_CITY = 0.50
P_OUTSKIRTS = 0.75
P_HIGHWAY = 0.80
P_ROADS = 0.92

OUTSKIRTS_SPREAD = 5
BACKGROUND_SPREAD = 10
HIGHWAY_JITTER = 0.01
CORRIDOR_JITTER = 0.05


@dataclass(frozen=True)
class PolylinePoint:
    lat: float
    lng: float
    heading: float  # degrees in [0, 360), direction of travel along the segment


@dataclass(frozen=True)
class SampledLocation:
    lat: float
    lng: float
    h3_index: str


def _heading(a: tuple[float, float], b: tuple[float, float]) -> float:
    return (math.degrees(math.atan2(b[1] - a[1], b[0] - a[0])) + 360) % 360


def sample_along_polyline(polyline: Polyline, rng: random.Random) -> PolylinePoint:
    """Pick a point on a polyline uniformly by (planar) length.

    Segment lengths are Euclidean in lat/lng degrees, which is good enough at
    the scale of a single country. The point is linearly interpolated inside
    the chosen segment and inherits that segment's heading.
    """
    if len(polyline) < 2:
        raise ValueError("polyline needs at least two vertices")

    lengths = [math.dist(a, b) for a, b in zip(polyline, polyline[1:])]
    remaining = rng.random() * sum(lengths)

    for i, length in enumerate(lengths):
        if remaining <= length:
            a, b = polyline[i], polyline[i + 1]
            frac = remaining / length if length > 0 else 0.0
            return PolylinePoint(
                lat=a[0] + (b[0] - a[0]) * frac,
                lng=a[1] + (b[1] - a[1]) * frac,
                heading=_heading(a, b),
            )
        remaining -= length

    # float drift past the final bound
    last, prev = polyline[-1], polyline[-2]
    return PolylinePoint(lat=last[0], lng=last[1], heading=_heading(prev, last))


def sample_highway_point(highways: Sequence[Polyline], rng: random.Random) -> PolylinePoint:
    """Choose a motorway uniformly, then a point along it."""
    polyline = highways[math.floor(rng.random() * len(highways))]
    return sample_along_polyline(polyline, rng)


def sample_coordinate(
    rng: random.Random,
    city_pairs: Sequence[tuple[City, float]],
    highways: Sequence[Polyline],
) -> tuple[float, float]:
    """Draw one (lat, lng) from the banded mixture described above."""
    choice = rng.random()

    if choice < P_CITY:
        city = weighted_choice(rng, city_pairs)
        return rng.gauss(city.lat, city.sigma), rng.gauss(city.lng, city.sigma * 2)
    if choice < P_OUTSKIRTS:
        city = weighted_choice(rng, city_pairs)
        spread = city.sigma * OUTSKIRTS_SPREAD
        return rng.gauss(city.lat, spread), rng.gauss(city.lng, spread * 2)
    if choice < P_HIGHWAY:
        base = sample_highway_point(highways, rng)
        return rng.gauss(base.lat, HIGHWAY_JITTER), rng.gauss(base.lng, HIGHWAY_JITTER)
    if choice < P_ROADS:
        base = sample_highway_point(highways, rng)
        return rng.gauss(base.lat, CORRIDOR_JITTER), rng.gauss(base.lng, CORRIDOR_JITTER)

    city = weighted_choice(rng, city_pairs)
    spread = city.sigma * BACKGROUND_SPREAD
    return rng.gauss(city.lat, spread), rng.gauss(city.lng, spread * 2)


def sample_locations(
    count: int,
    seed: int,
    indexer: GridIndexer,
    cities: Sequence[City] = CITIES,
    highways: Sequence[Polyline] = HIGHWAYS,
) -> list[SampledLocation]:
    """Generate ``count`` biased sample locations with their H3 cells.

    Args:
        count: Number of samples; exactly this many are returned (distinct
            samples may share a cell).
        seed: Global seed (unsigned 32-bit).
        indexer: Grid indexer fixing the cell resolution.
        cities: Weighted city list.
        highways: Motorway polylines.

    Raises:
        GridIndexError: if a sampled coordinate cannot be indexed.
    """
    city_pairs = [(city, city.weight) for city in cities]
    locations: list[SampledLocation] = []

    for i in range(count):
        rng = stream(seed, i)
        lat, lng = sample_coordinate(rng, city_pairs, highways)
        locations.append(SampledLocation(lat=lat, lng=lng, h3_index=indexer.cell_for(lat, lng)))

    logger.info(
        "Sampled %d locations into %d H3 cells (res %d)",
        len(locations),
        len({loc.h3_index for loc in locations}),
        indexer.resolution,
    )
    return locations
