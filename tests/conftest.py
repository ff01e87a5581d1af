"""Shared metro datasets for the test suite."""

import pytest

from metro_planner.graph import build_graph


def station(code, order=None, subroute=None, name=None, **extra):
    """Build a raw station record as served by the data endpoint."""
    data = {
        "code": code,
        "name": name or f"{code} Station",
        "position": {"lat": 28.6 + len(code) / 1000, "lng": 77.2},
        "depth": "underground",
        "is_interchange": False,
    }
    if order is not None:
        data["order"] = order
    if subroute is not None:
        data["subroute"] = subroute
    data.update(extra)
    return data


def line(line_id, stations, color="#000000"):
    return {"id": line_id, "name": f"{line_id.title()} Line", "color": color, "stations": stations}


@pytest.fixture
def metro_data():
    """A small network.

    red:    A - B - C - D
    blue:           C - E - F
    green:  F - G - H (main branch), G - K (spur branch)
    circle: A - P - Q - A
    yellow: Y1 - Y2 (not connected to anything else)
    """
    return {
        "lines": [
            line("red", [
                station("A", 1), station("B", 2), station("C", 3, is_interchange=True), station("D", 4),
            ], color="#ff0000"),
            line("blue", [
                station("C", 1, is_interchange=True), station("E", 2), station("F", 3, is_interchange=True),
            ], color="#0000ff"),
            line("green", [
                station("F", 1, subroute="main"), station("G", 2, subroute="main"),
                station("H", 3, subroute="main"),
                station("G", 1, subroute="spur"), station("K", 2, subroute="spur"),
            ], color="#00ff00"),
            line("circle", [
                station("A", 1), station("P", 2), station("Q", 3), station("A", 4),
            ], color="#999999"),
            line("yellow", [station("Y1", 1), station("Y2", 2)], color="#ffff00"),
        ]
    }


@pytest.fixture
def metro_graph(metro_data):
    return build_graph(metro_data)


@pytest.fixture
def mesh_data():
    """Several routes between S and T.

    L1: S - M1 - M2 - T
    L2: S - N1 - T
    L3: M1 - N1
    """
    return {
        "lines": [
            line("L1", [station("S", 1), station("M1", 2), station("M2", 3), station("T", 4)]),
            line("L2", [station("S", 1), station("N1", 2), station("T", 3)]),
            line("L3", [station("M1", 1), station("N1", 2)]),
        ]
    }


@pytest.fixture
def mesh_graph(mesh_data):
    return build_graph(mesh_data)
