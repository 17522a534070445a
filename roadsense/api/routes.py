"""Map-data routes — weather cells and road-risk hotspots.

Every handler reads through the ``Simulation`` stored on ``app.state``.
Snapshot and id lookups return JSON arrays; the bbox cell query returns the
engine result as-is, an object keyed by H3 cell id.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from roadsense.models.schemas import (
    CellStatistics,
    RawEvent,
    StatisticsUpdate,
    split_list,
)
from roadsense.services.simulation import Simulation

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/mock/v1")


def get_simulation(request: Request) -> Simulation:
    return request.app.state.simulation


# ── Road safety ───────────────────────────────────────────────────────────────


@router.get(
    "/road-safety/hotspots",
    tags=["road-safety"],
    summary="Hotspots inside a bounding box",
)
async def get_hotspots(
    bbox: str = Query(description="minLng,minLat,maxLng,maxLat"),
    min_confidence: int = Query(0, ge=0, le=100, description="Keep risks with confidence above this"),
    type: str | None = Query(None, description="Comma-separated risk type codes"),
    simulation: Simulation = Depends(get_simulation),
) -> list[dict[str, Any]]:
    hotspots = simulation.get_hotspots_in_bbox(bbox)
    types = set(split_list(type)) if type else None

    return [
        hotspot.model_dump(mode="json")
        for hotspot in hotspots.values()
        if hotspot.metadata.risk.confidence > min_confidence
        and (types is None or hotspot.metadata.risk.type.value in types)
    ]


@router.get("/road-safety/snapshot", tags=["road-safety"], summary="All hotspots")
async def get_hotspot_snapshot(
    simulation: Simulation = Depends(get_simulation),
) -> list[dict[str, Any]]:
    return [hotspot.model_dump(mode="json") for hotspot in simulation.get_hotspots().values()]


# ── Weather ───────────────────────────────────────────────────────────────────


@router.get("/weather/snapshot", tags=["weather"], summary="All cells of the current snapshot")
async def get_weather_snapshot(
    simulation: Simulation = Depends(get_simulation),
) -> list[dict[str, Any]]:
    return [cell.to_wire() for cell in simulation.get_snapshot().values()]


@router.get(
    "/weather/cells",
    tags=["weather"],
    summary="Cells by id (with statistics) or by bounding box",
)
async def get_weather_cells(
    bbox: str | None = Query(None, description="minLng,minLat,maxLng,maxLat"),
    h3_indexes: str | None = Query(None, description="Comma-separated H3 cell ids"),
    simulation: Simulation = Depends(get_simulation),
) -> list[dict[str, Any]] | dict[str, dict[str, Any]]:
    if not bbox and not h3_indexes:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Either bbox or h3_indexes must be provided",
        )

    if h3_indexes:
        cells = (
            simulation.get_cell(h3_index, include_statistics=True)
            for h3_index in split_list(h3_indexes)
        )
        return [cell.to_wire() for cell in cells if cell is not None]

    return {
        h3_index: cell.to_wire()
        for h3_index, cell in simulation.get_snapshot_in_bbox(bbox).items()
    }


@router.post(
    "/weather/cells/{h3_index}/events",
    tags=["weather"],
    status_code=status.HTTP_202_ACCEPTED,
    summary="Push one raw observation into a cell's accumulator",
    description=(
        "The observation is folded into the cell's running totals and becomes "
        "visible in the snapshot after the next flush."
    ),
)
async def push_event(
    h3_index: str,
    body: RawEvent,
    simulation: Simulation = Depends(get_simulation),
) -> dict[str, Any]:
    simulation.push_raw_event(h3_index, body)
    return {"accepted": True, "h3_index": h3_index}


@router.put(
    "/weather/cells/{h3_index}/statistics",
    response_model=CellStatistics,
    tags=["weather"],
    summary="Add or merge a cell's long-term statistics",
)
async def put_statistics(
    h3_index: str,
    body: StatisticsUpdate,
    simulation: Simulation = Depends(get_simulation),
) -> CellStatistics:
    merged = simulation.add_or_merge_statistics(h3_index, body)
    logger.info("Statistics updated for %s", h3_index)
    return merged
