"""Metro station data, dataset parsing and station lookup."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NamedTuple, Optional

from .config import STATION_SEARCH_LIMIT
from .errors import MalformedDataset


class Position(NamedTuple):
    lat: float
    lng: float


@dataclass(frozen=True)
class Station:
    """Represents a metro station as listed on one line."""
    code: str
    name: str
    position: Position
    depth: str = "underground"  # "underground" or "elevated"
    is_interchange: bool = False
    interchange_lines: tuple[str, ...] = ()
    subroute: Optional[str] = None
    order: Optional[float] = None


@dataclass(frozen=True)
class Line:
    """A named, colored line and its stations in dataset order."""
    id: str
    name: str
    color: str
    stations: tuple[Station, ...]

    @property
    def has_subroutes(self) -> bool:
        return any(station.subroute for station in self.stations)


@dataclass(frozen=True)
class MetroDataset:
    """The whole network as loaded once from the data source."""
    lines: tuple[Line, ...]

    def iter_stations(self):
        """Yield (line, station) pairs in dataset order."""
        for line in self.lines:
            for station in line.stations:
                yield line, station


@dataclass(frozen=True)
class StationMatch:
    """A station search hit and the line it was first found on."""
    station: Station
    line_name: str
    line_color: str


def _parse_position(raw: Any, code: str) -> Position:
    if not isinstance(raw, dict):
        raise MalformedDataset(f"Station {code!r} has no position")
    try:
        return Position(lat=float(raw["lat"]), lng=float(raw["lng"]))
    except (KeyError, TypeError, ValueError) as e:
        raise MalformedDataset(f"Station {code!r} has an invalid position: {raw!r}") from e


def _parse_station(raw: Any, line_id: str) -> Station:
    if not isinstance(raw, dict):
        raise MalformedDataset(f"Line {line_id!r} has a station that is not an object")
    code = raw.get("code")
    if not code:
        raise MalformedDataset(f"Line {line_id!r} has a station without a code")
    code = str(code)
    if raw.get("position") is None:
        raise MalformedDataset(f"Station {code!r} has no position")

    order = raw.get("order")
    if order is not None:
        try:
            order = float(order)
        except (TypeError, ValueError) as e:
            raise MalformedDataset(f"Station {code!r} has an invalid order: {order!r}") from e

    return Station(
        code=code,
        name=str(raw.get("name") or code),
        position=_parse_position(raw["position"], code),
        depth=raw.get("depth") or "underground",
        is_interchange=bool(raw.get("is_interchange", False)),
        interchange_lines=tuple(raw.get("interchange_lines") or ()),
        subroute=raw.get("subroute") or None,
        order=order,
    )


def parse_dataset(raw: Any) -> MetroDataset:
    """Validate a raw ``{"lines": [...]}`` mapping and build a MetroDataset.

    Raises:
        MalformedDataset: if a line has no stations or a station lacks a
            code or position.
    """
    if isinstance(raw, MetroDataset):
        return raw
    if not isinstance(raw, dict) or not isinstance(raw.get("lines"), list):
        raise MalformedDataset("Dataset must be an object with a 'lines' list")

    lines = []
    for raw_line in raw["lines"]:
        if not isinstance(raw_line, dict) or raw_line.get("id") is None:
            raise MalformedDataset("Every line needs an 'id'")
        line_id = str(raw_line["id"])
        raw_stations = raw_line.get("stations")
        if not raw_stations:
            raise MalformedDataset(f"Line {line_id!r} has no stations")

        lines.append(Line(
            id=line_id,
            name=raw_line.get("name") or line_id,
            color=raw_line.get("color") or "",
            stations=tuple(_parse_station(s, line_id) for s in raw_stations),
        ))

    return MetroDataset(lines=tuple(lines))


def search_stations(
    dataset: MetroDataset, query: str, limit: int = STATION_SEARCH_LIMIT
) -> list[StationMatch]:
    """Find stations whose name or code contains the query (case-insensitive).

    Results follow dataset order, one per station code.
    """
    query_lower = query.lower().strip()
    if not query_lower or limit <= 0:
        return []

    matches = []
    seen = set()
    for line, station in dataset.iter_stations():
        if station.code in seen:
            continue
        if query_lower in station.name.lower() or query_lower in station.code.lower():
            seen.add(station.code)
            matches.append(StationMatch(station=station, line_name=line.name, line_color=line.color))
            if len(matches) >= limit:
                break
    return matches


def find_station(dataset: MetroDataset, query: str) -> Optional[Station]:
    """Find a station by code or name (fuzzy match)."""
    query_lower = query.lower().strip()
    if not query_lower:
        return None

    stations: dict[str, Station] = {}
    for _, station in dataset.iter_stations():
        stations.setdefault(station.code, station)

    # Exact code
    for code, station in stations.items():
        if code.lower() == query_lower:
            return station

    # Exact name
    for station in stations.values():
        if station.name.lower() == query_lower:
            return station

    # Partial match - prefer shorter station names (more specific)
    matches = [
        (len(station.name), station)
        for station in stations.values()
        if query_lower in station.name.lower()
    ]
    if matches:
        matches.sort(key=lambda x: x[0])
        return matches[0][1]

    return None
