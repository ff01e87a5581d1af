"""Route enumeration and ranking over the metro graph."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Optional, Union

from .config import (
    DEFAULT_MAX_INTERCHANGES,
    DEFAULT_MAX_PATH_LENGTH,
    DEFAULT_MAX_ROUTES,
    STATION_SEARCH_LIMIT,
    TOP_ROUTES,
)
from .errors import InvalidStationCode
from .graph import MetroGraph, StationNode, build_graph
from .stations import MetroDataset, Station, StationMatch, find_station, parse_dataset, search_stations

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PathStop:
    """A station on a route and the line used to reach it (None at the origin)."""
    node: StationNode
    line_id: Optional[str] = None
    line_name: Optional[str] = None
    line_color: Optional[str] = None

    @property
    def code(self) -> str:
        return self.node.code

    @property
    def name(self) -> str:
        return self.node.name


@dataclass
class RouteSegment:
    """A run of consecutive stations travelled on one line."""
    line_id: str
    line_name: str
    line_color: str
    stations: list[PathStop]

    def __str__(self):
        return f"Take {self.line_name} to {self.stations[-1].name} ({len(self.stations)} stops)"


@dataclass
class Route:
    """A complete route with possible interchanges."""
    path: list[PathStop]
    total_stations: int
    interchanges: int
    lines: list[RouteSegment]

    def __str__(self):
        result = [f"Board at {self.path[0].name}"]
        for i, seg in enumerate(self.lines):
            result.append(f"{i+1}. {seg}")
        result.append(f"\nTotal: {self.total_stations} stations, {self.interchanges} interchange(s)")
        return "\n".join(result)


@dataclass(frozen=True)
class SearchBounds:
    """Limits that guarantee the route search halts."""
    max_routes: int = DEFAULT_MAX_ROUTES
    max_path_length: int = DEFAULT_MAX_PATH_LENGTH
    max_interchanges: int = DEFAULT_MAX_INTERCHANGES
    timeout: Optional[float] = None  # seconds of wall-clock time, None for no cutoff


def segment_path(path: list[PathStop]) -> list[RouteSegment]:
    """Split a path into runs of stations sharing one line.

    The origin (index 0) has no line and belongs to no segment.
    """
    segments: list[RouteSegment] = []
    for stop in path[1:]:
        if not segments or stop.line_id != segments[-1].line_id:
            segments.append(RouteSegment(
                line_id=stop.line_id,
                line_name=stop.line_name,
                line_color=stop.line_color,
                stations=[],
            ))
        segments[-1].stations.append(stop)
    return segments


def rank_routes(routes: list[Route], limit: Optional[int] = None) -> list[Route]:
    """Order routes by interchanges, then stations; ties keep discovery order."""
    ranked = sorted(routes, key=lambda r: (r.interchanges, r.total_stations))
    return ranked if limit is None else ranked[:limit]


def search_routes(
    graph: MetroGraph,
    from_code: str,
    to_code: str,
    bounds: Optional[SearchBounds] = None,
) -> list[Route]:
    """Enumerate simple paths between two stations, in discovery order.

    Depth-first over the graph's neighbor order. A branch may not board a
    line it has already left, and is abandoned once it exceeds the path
    length or interchange bounds. The whole search stops after
    ``bounds.max_routes`` routes or when ``bounds.timeout`` runs out.

    Raises:
        InvalidStationCode: if either code is not in the station registry.
    """
    bounds = bounds or SearchBounds()
    for code in (from_code, to_code):
        if code not in graph:
            raise InvalidStationCode(code)

    routes: list[Route] = []
    deadline = time.monotonic() + bounds.timeout if bounds.timeout is not None else None
    timed_out = False

    def dfs(current: str, path: list[PathStop], visited_nodes: frozenset[str],
            visited_lines: frozenset[str], current_line: Optional[str], interchanges: int):
        nonlocal timed_out
        if len(routes) >= bounds.max_routes or timed_out:
            return
        if deadline is not None and time.monotonic() > deadline:
            timed_out = True
            return

        if current == to_code:
            routes.append(Route(
                path=list(path),
                total_stations=len(path),
                interchanges=interchanges,
                lines=segment_path(path),
            ))
            return

        if len(path) > bounds.max_path_length or interchanges > bounds.max_interchanges:
            return

        for edge in graph.neighbors(current):
            if edge.to_code in visited_nodes:
                continue

            is_interchange = current_line is not None and current_line != edge.line_id
            # Re-boarding a line already left only produces loops
            if is_interchange and edge.line_id in visited_lines:
                continue

            stop = PathStop(
                node=graph.nodes[edge.to_code],
                line_id=edge.line_id,
                line_name=edge.line_name,
                line_color=edge.line_color,
            )
            dfs(
                edge.to_code,
                path + [stop],
                visited_nodes | {edge.to_code},
                visited_lines | {edge.line_id} if edge.line_id is not None else visited_lines,
                edge.line_id,
                interchanges + 1 if is_interchange else interchanges,
            )

    dfs(from_code, [PathStop(node=graph.nodes[from_code])], frozenset([from_code]), frozenset(), None, 0)

    if timed_out:
        logger.warning("Route search %s -> %s hit the %.2fs cutoff after %d route(s)",
                       from_code, to_code, bounds.timeout, len(routes))
    logger.debug("Found %d route(s) from %s to %s", len(routes), from_code, to_code)
    return routes


def find_routes(
    graph: MetroGraph,
    from_code: str,
    to_code: str,
    bounds: Optional[SearchBounds] = None,
    limit: Optional[int] = None,
) -> list[Route]:
    """Find routes between two stations, best first.

    An empty list means no route exists within the bounds.
    """
    return rank_routes(search_routes(graph, from_code, to_code, bounds), limit)


class RoutePlanner:
    """A dataset and its graph, built once and reused for every request."""

    def __init__(self, dataset: Union[MetroDataset, dict[str, Any]],
                 bounds: Optional[SearchBounds] = None):
        self.dataset = parse_dataset(dataset)
        self.graph = build_graph(self.dataset)
        self.bounds = bounds or SearchBounds()

    def get_station(self, code: str) -> Optional[StationNode]:
        return self.graph.nodes.get(code)

    def find_station(self, query: str) -> Optional[Station]:
        return find_station(self.dataset, query)

    def search_stations(self, query: str, limit: int = STATION_SEARCH_LIMIT) -> list[StationMatch]:
        return search_stations(self.dataset, query, limit)

    def find_routes(self, from_code: str, to_code: str,
                    bounds: Optional[SearchBounds] = None,
                    limit: Optional[int] = TOP_ROUTES) -> list[Route]:
        """Ranked routes, truncated to ``limit`` (top 3 by default)."""
        return find_routes(self.graph, from_code, to_code, bounds or self.bounds, limit)

    def best_route(self, from_code: str, to_code: str) -> Optional[Route]:
        routes = self.find_routes(from_code, to_code, limit=1)
        return routes[0] if routes else None
