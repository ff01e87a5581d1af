"""Tests for route search, segmentation and ranking."""

import itertools

import pytest

from conftest import line, station
from metro_planner import routing
from metro_planner.errors import InvalidStationCode
from metro_planner.graph import build_graph
from metro_planner.routing import (
    PathStop,
    Route,
    RoutePlanner,
    SearchBounds,
    find_routes,
    rank_routes,
    search_routes,
    segment_path,
)


def codes(route):
    return [stop.code for stop in route.path]


def assert_well_formed(routes, from_code, to_code):
    for route in routes:
        path = codes(route)
        assert path[0] == from_code
        assert path[-1] == to_code
        assert len(set(path)) == len(path)
        assert route.total_stations == len(route.path)
        assert len(route.lines) - 1 == route.interchanges
        assert route.path[0].line_id is None


def test_same_line_route(metro_graph):
    """Three stops apart on one line: one route, no interchange."""
    routes = find_routes(metro_graph, "A", "D")
    assert len(routes) == 1
    route = routes[0]
    assert codes(route) == ["A", "B", "C", "D"]
    assert route.interchanges == 0
    assert route.total_stations == 4
    assert [seg.line_id for seg in route.lines] == ["red"]
    assert [stop.code for stop in route.lines[0].stations] == ["B", "C", "D"]


def test_single_interchange_route(metro_graph):
    routes = find_routes(metro_graph, "A", "E")
    assert len(routes) == 1
    route = routes[0]
    assert codes(route) == ["A", "B", "C", "E"]
    assert route.interchanges == 1
    assert len(route.lines) == 2
    assert [seg.line_id for seg in route.lines] == ["red", "blue"]
    assert route.lines[1].line_color == "#0000ff"


def test_branches_of_one_line_are_one_segment(metro_graph):
    """Moving from the main branch onto the spur is not an interchange."""
    routes = find_routes(metro_graph, "A", "K")
    assert len(routes) == 1
    route = routes[0]
    assert codes(route) == ["A", "B", "C", "E", "F", "G", "K"]
    assert route.interchanges == 2
    assert [seg.line_id for seg in route.lines] == ["red", "blue", "green"]
    assert [stop.code for stop in route.lines[2].stations] == ["G", "K"]


def test_cyclic_line_terminates(metro_graph):
    routes = find_routes(metro_graph, "A", "P")
    assert [codes(r) for r in routes] == [["A", "P"], ["A", "Q", "P"]]
    assert_well_formed(routes, "A", "P")


def test_large_ring_terminates():
    ring = [station(f"R{i}", i) for i in range(40)] + [station("R0", 40)]
    spokes = [station(f"R{i}", 1) for i in range(0, 40, 5)] + [station("HUB", 2)]
    graph = build_graph({"lines": [line("ring", ring)]})
    routes = find_routes(graph, "R0", "R20")
    assert len(routes) == 2
    assert_well_formed(routes, "R0", "R20")

    # Many small lines touching the ring, each one a possible interchange
    data = {"lines": [line("ring", ring)] + [
        line(f"spoke{i}", [spokes[i], spokes[-1]]) for i in range(len(spokes) - 1)
    ]}
    graph = build_graph(data)
    routes = search_routes(graph, "R0", "R20", SearchBounds(max_routes=1000))
    assert_well_formed(routes, "R0", "R20")
    assert all(r.total_stations <= 51 for r in routes)


def test_disconnected_returns_empty(metro_graph):
    assert find_routes(metro_graph, "A", "Y2") == []


def test_invalid_from_code(metro_graph):
    with pytest.raises(InvalidStationCode) as exc_info:
        find_routes(metro_graph, "NOPE", "A")
    assert exc_info.value.code == "NOPE"


def test_invalid_to_code(metro_graph):
    with pytest.raises(InvalidStationCode):
        search_routes(metro_graph, "A", "NOPE")


def test_same_station_route(metro_graph):
    """Origin equals destination: one single-station route, no segments."""
    routes = find_routes(metro_graph, "C", "C")
    assert len(routes) == 1
    route = routes[0]
    assert codes(route) == ["C"]
    assert route.total_stations == 1
    assert route.interchanges == 0
    assert route.lines == []


def test_discovery_order(mesh_graph):
    routes = search_routes(mesh_graph, "S", "T")
    assert [codes(r) for r in routes] == [
        ["S", "M1", "M2", "T"],
        ["S", "M1", "N1", "T"],
        ["S", "N1", "T"],
        ["S", "N1", "M1", "M2", "T"],
    ]
    assert [r.interchanges for r in routes] == [0, 2, 0, 2]
    assert_well_formed(routes, "S", "T")


def test_routes_are_ranked(mesh_graph):
    routes = find_routes(mesh_graph, "S", "T")
    assert [codes(r) for r in routes] == [
        ["S", "N1", "T"],
        ["S", "M1", "M2", "T"],
        ["S", "M1", "N1", "T"],
        ["S", "N1", "M1", "M2", "T"],
    ]
    for a, b in zip(routes, routes[1:]):
        assert (a.interchanges, a.total_stations) <= (b.interchanges, b.total_stations)


def test_search_is_deterministic(mesh_graph):
    first = [codes(r) for r in search_routes(mesh_graph, "S", "T")]
    second = [codes(r) for r in search_routes(mesh_graph, "S", "T")]
    assert first == second


def test_sibling_branches_are_isolated(mesh_graph):
    """Stations visited down one branch stay available to the next branch."""
    routes = search_routes(mesh_graph, "S", "T")
    # N1 is visited under the S-M1 branch and again directly from S
    assert sum("N1" in codes(r) for r in routes) == 3


def test_cannot_reboard_a_line():
    """Leaving red for blue and coming back onto red is not allowed."""
    data = {"lines": [
        line("red", [station("A", 1), station("B", 2), station("C", 3), station("D", 4)]),
        line("blue", [station("B", 1), station("X", 2), station("C", 3)]),
    ]}
    graph = build_graph(data)
    routes = search_routes(graph, "A", "D")
    assert [codes(r) for r in routes] == [["A", "B", "C", "D"]]


def test_max_routes_stops_search(mesh_graph):
    routes = search_routes(mesh_graph, "S", "T", SearchBounds(max_routes=2))
    assert [codes(r) for r in routes] == [["S", "M1", "M2", "T"], ["S", "M1", "N1", "T"]]


def test_max_routes_zero(mesh_graph):
    assert search_routes(mesh_graph, "S", "T", SearchBounds(max_routes=0)) == []


def test_max_interchanges_zero(mesh_graph):
    routes = search_routes(mesh_graph, "S", "T", SearchBounds(max_interchanges=0))
    assert [codes(r) for r in routes] == [["S", "M1", "M2", "T"], ["S", "N1", "T"]]


def test_max_path_length(mesh_graph):
    routes = search_routes(mesh_graph, "S", "T", SearchBounds(max_path_length=2))
    assert [codes(r) for r in routes] == [["S", "N1", "T"]]


def test_timeout_returns_partial_results(mesh_graph, monkeypatch):
    """The clock runs out after the first route is found."""
    clock = itertools.chain([0.0] * 5, itertools.repeat(100.0))

    class FakeTime:
        @staticmethod
        def monotonic():
            return next(clock)

    monkeypatch.setattr(routing, "time", FakeTime)
    routes = search_routes(mesh_graph, "S", "T", SearchBounds(timeout=1.0))
    assert [codes(r) for r in routes] == [["S", "M1", "M2", "T"]]
    assert_well_formed(routes, "S", "T")


def test_graph_not_mutated_by_search(mesh_graph, mesh_data):
    search_routes(mesh_graph, "S", "T")
    assert mesh_graph.adjacency == build_graph(mesh_data).adjacency


def test_segment_path(metro_graph):
    nodes = metro_graph.nodes
    path = [
        PathStop(nodes["A"]),
        PathStop(nodes["B"], "red", "Red Line", "#ff0000"),
        PathStop(nodes["C"], "red", "Red Line", "#ff0000"),
        PathStop(nodes["E"], "blue", "Blue Line", "#0000ff"),
    ]
    segments = segment_path(path)
    assert [(s.line_id, s.line_name, s.line_color) for s in segments] == [
        ("red", "Red Line", "#ff0000"),
        ("blue", "Blue Line", "#0000ff"),
    ]
    assert [[stop.code for stop in s.stations] for s in segments] == [["B", "C"], ["E"]]


def test_segment_single_station_path(metro_graph):
    assert segment_path([PathStop(metro_graph.nodes["A"])]) == []


def test_rank_routes_is_stable():
    def route(name, interchanges, total):
        return Route(path=[name] * total, total_stations=total, interchanges=interchanges, lines=[])

    routes = [route("a", 1, 5), route("b", 0, 6), route("c", 1, 3), route("d", 0, 6), route("e", 1, 3)]
    ranked = rank_routes(routes)
    assert [r.path[0] for r in ranked] == ["b", "d", "c", "e", "a"]
    assert [r.path[0] for r in rank_routes(routes, limit=3)] == ["b", "d", "c"]


def test_planner_top_routes(mesh_data):
    planner = RoutePlanner(mesh_data)
    routes = planner.find_routes("S", "T")
    assert len(routes) == 3
    assert codes(routes[0]) == ["S", "N1", "T"]
    assert codes(planner.best_route("S", "T")) == ["S", "N1", "T"]


def test_planner_lookups(metro_data):
    planner = RoutePlanner(metro_data)
    assert planner.get_station("C").name == "C Station"
    assert planner.get_station("ZZ") is None
    assert planner.find_station("e station").code == "E"
    assert [m.station.code for m in planner.search_stations("y")] == ["Y1", "Y2"]
    assert planner.best_route("A", "Y1") is None


def test_route_str(metro_graph):
    route = find_routes(metro_graph, "A", "E")[0]
    text = str(route)
    assert "Board at A Station" in text
    assert "Take Red Line to C Station (2 stops)" in text
    assert "1 interchange(s)" in text


def test_bundled_sample_network():
    """Kashmere Gate to Vaishali crosses from one blue branch onto the other."""
    from metro_planner.config import DEFAULT_DATA_FILE
    from metro_planner.metro_data import load_dataset_file

    planner = RoutePlanner(load_dataset_file(DEFAULT_DATA_FILE))
    routes = planner.find_routes("KSHG", "VSL")
    assert [codes(r) for r in routes] == [
        ["KSHG", "MDHS", "YBK", "ANVR", "VSL"],
        ["KSHG", "CWRD", "RCK", "MDHS", "YBK", "ANVR", "VSL"],
        ["KSHG", "CWRD", "RCK", "CTSC", "MDHS", "YBK", "ANVR", "VSL"],
    ]
    best = routes[0]
    assert best.interchanges == 1
    assert [seg.line_id for seg in best.lines] == ["violet", "blue"]
    assert_well_formed(routes, "KSHG", "VSL")
