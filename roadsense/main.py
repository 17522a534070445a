"""Roadsense — synthetic weather cells and road-risk hotspots for map clients.

On start-up the application samples its baseline locations and hotspots,
publishes the first snapshot and (unless disabled) starts the background
ingestion and flush activities. Clients read the current snapshot, query by
bounding box or cell id, and may push their own observations and statistics.
"""

import asyncio
import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from roadsense.api.routes import router as mock_router
from roadsense.core.config import settings
from roadsense.core.errors import register_error_handlers
from roadsense.core.middleware import RequestLoggingMiddleware
from roadsense.services.simulation import Simulation

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)

logger = logging.getLogger(__name__)


TAGS_METADATA = [
    {
        "name": "weather",
        "description": "H3 weather cells: snapshot, bbox/id queries, raw events and statistics.",
    },
    {
        "name": "road-safety",
        "description": "Road-risk hotspots along the motorway network.",
    },
    {
        "name": "ops",
        "description": "Health checks and route discovery.",
    },
]


def build_simulation() -> Simulation:
    return Simulation(
        target_cell_count=settings.target_cell_count,
        target_hotspot_count=settings.target_hotspot_count,
        snapshot_interval_seconds=settings.snapshot_interval_seconds,
        ingest_interval_seconds=settings.ingest_interval_seconds,
        seed=settings.simulation_seed,
        resolution=settings.h3_resolution,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    simulation = build_simulation()
    app.state.simulation = simulation

    started = time.monotonic()
    await asyncio.to_thread(simulation.generate_initial_data)
    logger.info("Initial data ready in %.1fs", time.monotonic() - started)

    if settings.simulation_enabled:
        await simulation.start()
    yield
    await simulation.stop()


app = FastAPI(
    title="Roadsense Map Data API",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_tags=TAGS_METADATA,
    lifespan=lifespan,
)

register_error_handlers(app)

app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(mock_router)


@app.get("/health", tags=["ops"])
async def health() -> dict[str, str]:
    return {"status": "ok", "service": "roadsense"}


@app.get("/{path:path}", tags=["ops"], include_in_schema=False)
async def index(path: str, request: Request) -> dict:
    routes = sorted(
        {
            route.path
            for route in request.app.routes
            if getattr(route, "include_in_schema", False) and route.path != "/{path:path}"
        }
    )
    return {"online": True, "routes": routes}
