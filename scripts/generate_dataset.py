#!/usr/bin/env python3
"""CLI script to generate a reproducible cells + hotspots dataset.

Usage:
    python scripts/generate_dataset.py --seed 42 --cells 1000 --hotspots 200 \
        --reference-time 2025-01-15T12:00:00Z --output dataset.json

This script:
1. Builds a simulation with the given seed and sizes (no background activity).
2. Generates the initial cells and hotspots at the reference time.
3. Prints summary statistics (locations, distinct cells, condition breakdown).
4. Optionally writes ``{"cells": [...], "hotspots": [...]}`` as JSON.

The same seed, sizes and reference time always produce the same file.
"""

import argparse
import json
from collections import Counter
from datetime import datetime, timezone
from pathlib import Path

from roadsense.services.simulation import Simulation


def parse_reference_time(value: str) -> datetime:
    moment = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def build_dataset(simulation: Simulation) -> dict:
    return {
        "cells": [cell.to_wire() for cell in simulation.get_snapshot().values()],
        "hotspots": [hotspot.model_dump(mode="json") for hotspot in simulation.get_hotspots().values()],
    }


def main(argv=None):
    parser = argparse.ArgumentParser(description="Generate a synthetic weather/hotspot dataset")
    parser.add_argument("--seed", type=int, required=True, help="Global simulation seed")
    parser.add_argument("--cells", type=int, default=1000, help="Number of sampled cell locations")
    parser.add_argument("--hotspots", type=int, default=200, help="Number of hotspots")
    parser.add_argument("--resolution", type=int, default=9, help="H3 resolution (0-15)")
    parser.add_argument("--output", default=None, help="Write the dataset as JSON to this file")
    parser.add_argument(
        "--reference-time",
        type=parse_reference_time,
        default=None,
        help="Reference time, ISO 8601 (default: now)",
    )
    args = parser.parse_args(argv)

    reference_time = args.reference_time or datetime.now(timezone.utc)
    simulation = Simulation(
        target_cell_count=args.cells,
        target_hotspot_count=args.hotspots,
        seed=args.seed,
        resolution=args.resolution,
        clock=lambda: reference_time,
    )

    print(f"Generating dataset: seed={simulation.seed} cells={args.cells} "
          f"hotspots={args.hotspots} res={args.resolution}")
    simulation.generate_initial_data()

    snapshot = simulation.get_snapshot()
    rain = Counter(cell.environment.conditions.rain_intensity.value for cell in snapshot.values())
    road = Counter(cell.environment.conditions.road_condition.value for cell in snapshot.values())

    print(f"  Locations:      {len(simulation.locations)}")
    print(f"  Distinct cells: {len(snapshot)}")
    print(f"  Hotspots:       {len(simulation.get_hotspots())}")
    print(f"  Rain:           {dict(sorted(rain.items()))}")
    print(f"  Road:           {dict(sorted(road.items()))}")

    if args.output:
        path = Path(args.output)
        path.write_text(json.dumps(build_dataset(simulation), indent=2))
        print(f"\n  Wrote {path}")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
