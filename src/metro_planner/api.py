"""FastAPI web interface for the metro route planner."""

import logging
import os
from functools import lru_cache
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from .config import STATION_SEARCH_LIMIT, TOP_ROUTES, Settings
from .errors import DatasetUnavailable, InvalidStationCode, MalformedDataset
from .metro_data import load_dataset, load_dataset_from_env
from .routing import Route, RoutePlanner, SearchBounds

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Metro Route Planner",
    description="Interchange-aware route planning over a metro network",
    version="0.1.0"
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class RouteRequest(BaseModel):
    from_station: str
    to_station: str
    max_routes: Optional[int] = Field(default=None, ge=1)
    max_interchanges: Optional[int] = Field(default=None, ge=0)
    limit: int = Field(default=TOP_ROUTES, ge=1)


@lru_cache
def get_settings() -> Settings:
    return Settings.from_env()


@lru_cache
def _build_planner() -> RoutePlanner:
    settings = get_settings()
    bounds = SearchBounds(
        max_routes=settings.max_routes,
        max_path_length=settings.max_path_length,
        max_interchanges=settings.max_interchanges,
        timeout=settings.search_timeout,
    )
    return RoutePlanner(load_dataset(settings), bounds=bounds)


def get_planner() -> RoutePlanner:
    """Planner dependency; the graph is built on first use and then reused."""
    try:
        return _build_planner()
    except DatasetUnavailable as e:
        logger.error("Metro data unavailable: %s", e)
        raise HTTPException(status_code=503, detail=str(e))
    except MalformedDataset as e:
        logger.error("Metro data is malformed: %s", e)
        raise HTTPException(status_code=500, detail=f"Malformed metro data: {e}")


def route_to_dict(route: Route) -> dict:
    return {
        "total_stations": route.total_stations,
        "interchanges": route.interchanges,
        "path": [
            {
                "code": stop.code,
                "name": stop.name,
                "line": stop.line_id,
            }
            for stop in route.path
        ],
        "lines": [
            {
                "id": seg.line_id,
                "name": seg.line_name,
                "color": seg.line_color,
                "stations": [stop.code for stop in seg.stations],
            }
            for seg in route.lines
        ],
    }


def _resolve_station(planner: RoutePlanner, query: str) -> str:
    if planner.get_station(query):
        return query
    station = planner.find_station(query)
    if not station:
        raise HTTPException(status_code=404, detail=f"Station not found: {query}")
    return station.code


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "Metro Route Planner"}


@app.get("/api/metro-data")
async def metro_data():
    """Serve the raw dataset from the environment."""
    var = get_settings().data_env
    if not os.getenv(var):
        raise HTTPException(status_code=404, detail="Metro data not found in environment")
    try:
        return load_dataset_from_env(var)
    except DatasetUnavailable as e:
        logger.error("Error loading metro data: %s", e)
        raise HTTPException(status_code=500, detail="Failed to load metro data")


@app.get("/stations")
async def list_stations(
    q: str = "",
    limit: int = Query(STATION_SEARCH_LIMIT, ge=1),
    planner: RoutePlanner = Depends(get_planner),
):
    """Search stations by name or code."""
    matches = planner.search_stations(q, limit)
    return {
        "count": len(matches),
        "stations": [
            {
                "code": m.station.code,
                "name": m.station.name,
                "line": m.line_name,
                "color": m.line_color,
                "position": {"lat": m.station.position.lat, "lng": m.station.position.lng},
                "is_interchange": m.station.is_interchange,
            }
            for m in matches
        ]
    }


@app.post("/route")
def get_route_endpoint(request: RouteRequest, planner: RoutePlanner = Depends(get_planner)):
    """Get ranked routes between two stations."""
    from_code = _resolve_station(planner, request.from_station)
    to_code = _resolve_station(planner, request.to_station)

    bounds = SearchBounds(
        max_routes=request.max_routes or planner.bounds.max_routes,
        max_path_length=planner.bounds.max_path_length,
        max_interchanges=(
            request.max_interchanges
            if request.max_interchanges is not None
            else planner.bounds.max_interchanges
        ),
        timeout=planner.bounds.timeout,
    )
    try:
        routes = planner.find_routes(from_code, to_code, bounds=bounds, limit=request.limit)
    except InvalidStationCode as e:
        raise HTTPException(status_code=404, detail=str(e))

    return {
        "from": planner.get_station(from_code).name,
        "to": planner.get_station(to_code).name,
        "routes": [route_to_dict(r) for r in routes],
    }


def run_server(host: str = "0.0.0.0", port: int = 8000):
    """Run the FastAPI server."""
    import uvicorn
    logging.basicConfig(level=get_settings().log_level)
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    run_server()
