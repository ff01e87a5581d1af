"""Multi-line network graph built from the metro dataset."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from .stations import Line, MetroDataset, Position, Station, parse_dataset

logger = logging.getLogger(__name__)

MAIN_SUBROUTE = "main"


@dataclass(frozen=True)
class LineRef:
    """A line a station belongs to."""
    id: str
    name: str
    color: str


@dataclass(frozen=True)
class Edge:
    """One direction of a connection between adjacent stations on a line."""
    to_code: str
    line_id: str
    line_name: str
    line_color: str
    subroute: Optional[str] = None
    weight: int = 1


@dataclass
class StationNode:
    """Registry entry: a station's base attributes plus every line serving it."""
    code: str
    name: str
    position: Position
    depth: str
    is_interchange: bool
    interchange_lines: tuple[str, ...] = ()
    lines: list[LineRef] = field(default_factory=list)

    @classmethod
    def from_station(cls, station: Station) -> "StationNode":
        return cls(
            code=station.code,
            name=station.name,
            position=station.position,
            depth=station.depth,
            is_interchange=station.is_interchange,
            interchange_lines=station.interchange_lines,
        )


@dataclass
class MetroGraph:
    """Adjacency lists keyed by station code, and the station registry."""
    adjacency: dict[str, list[Edge]]
    nodes: dict[str, StationNode]

    def neighbors(self, code: str) -> list[Edge]:
        return self.adjacency.get(code, [])

    def __contains__(self, code: str) -> bool:
        return code in self.nodes

    @property
    def edge_count(self) -> int:
        return sum(len(edges) for edges in self.adjacency.values())


def _partition_by_subroute(line: Line) -> dict[Optional[str], list[Station]]:
    """Group a line's stations by branch, keeping first-seen branch order."""
    if not line.has_subroutes:
        return {None: list(line.stations)}

    groups: dict[Optional[str], list[Station]] = {}
    for station in line.stations:
        groups.setdefault(station.subroute or MAIN_SUBROUTE, []).append(station)
    return groups


def _add_edge(adjacency: dict[str, list[Edge]], from_code: str, to_code: str,
              line: Line, subroute: Optional[str]):
    """Add an edge in both directions."""
    for a, b in ((from_code, to_code), (to_code, from_code)):
        adjacency[a].append(Edge(
            to_code=b,
            line_id=line.id,
            line_name=line.name,
            line_color=line.color,
            subroute=subroute,
        ))


def build_graph(dataset: Union[MetroDataset, dict[str, Any]]) -> MetroGraph:
    """Build adjacency lists and the station registry from a dataset.

    Stations on each line (or each branch of it) are connected in ``order``
    sequence; stations without an order sort as 0 and keep their dataset
    position among equals. Edge insertion order follows line order, then
    branch order, then station order, which fixes the neighbor order seen by
    route search.

    Raises:
        MalformedDataset: if a raw mapping fails validation.
    """
    dataset = parse_dataset(dataset)

    nodes: dict[str, StationNode] = {}
    adjacency: dict[str, list[Edge]] = {}

    for line, station in dataset.iter_stations():
        if station.code not in nodes:
            nodes[station.code] = StationNode.from_station(station)
            adjacency[station.code] = []
        nodes[station.code].lines.append(LineRef(id=line.id, name=line.name, color=line.color))

    for line in dataset.lines:
        for subroute, stations in _partition_by_subroute(line).items():
            ordered = sorted(stations, key=lambda s: s.order or 0)
            for current, following in zip(ordered, ordered[1:]):
                if current.code == following.code:
                    continue
                _add_edge(adjacency, current.code, following.code, line, subroute)

    graph = MetroGraph(adjacency=adjacency, nodes=nodes)
    logger.debug("Built metro graph: %d stations, %d edges, %d lines",
                 len(nodes), graph.edge_count, len(dataset.lines))
    return graph
