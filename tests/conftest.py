from __future__ import annotations

from collections.abc import Callable

import pytest
from django.test import Client

from school_routes.services.addresses import AddressBook
from school_routes.services.graph import JunctionGraph
from school_routes.services.pathfinding import PathFinder

BASE_LAT = 37.76
BASE_LON = -122.43
LAT_STEP = 0.001
# Roughly the same number of miles as LAT_STEP at this latitude
LON_STEP = 0.001265


@pytest.fixture
def api_client() -> Client:
    return Client()


@pytest.fixture
def square_graph() -> JunctionGraph:
    # J1 -- J2
    #  |     |
    # J4 -- J3
    return JunctionGraph.from_records(
        [
            (1, BASE_LAT, BASE_LON, ["MAIN ST", "ELM ST"], [2, 4]),
            (2, BASE_LAT, BASE_LON + LON_STEP, ["MAIN ST", "PINE ST"], [1, 3]),
            (3, BASE_LAT + LAT_STEP, BASE_LON + LON_STEP, ["OAK ST", "PINE ST"], [2, 4]),
            (4, BASE_LAT + LAT_STEP, BASE_LON, ["OAK ST", "ELM ST"], [3, 1]),
            (5, BASE_LAT + 0.01, BASE_LON + 0.01, ["LONE ST"], []),
        ]
    )


@pytest.fixture
def square_addresses() -> AddressBook:
    return AddressBook.from_rows(
        [
            ("100", "MAIN ST", BASE_LAT, BASE_LON + 0.0001),
            ("300", "OAK ST", BASE_LAT + LAT_STEP, BASE_LON + LON_STEP - 0.0001),
            ("1", "LONE ST", BASE_LAT + 0.0101, BASE_LON + 0.0101),
            ("9", "NOWHERE ST", BASE_LAT + 0.0002, BASE_LON + 0.0002),
        ]
    )


@pytest.fixture
def square_finder(square_graph: JunctionGraph, square_addresses: AddressBook) -> PathFinder:
    return PathFinder(square_graph, square_addresses)



@pytest.fixture
def main_street_finder() -> PathFinder:
    """Six junctions in a row on Main St, one address beside each."""
    graph = JunctionGraph.from_records(
        (cnn, BASE_LAT + cnn * LAT_STEP, BASE_LON, ["MAIN ST"], [cnn + 1] if cnn < 6 else [])
        for cnn in range(1, 7)
    )
    addresses = AddressBook.from_rows(
        (f"{number}00", "MAIN ST", BASE_LAT + number * LAT_STEP, BASE_LON + 0.0001)
        for number in range(1, 7)
    )
    return PathFinder(graph, addresses)


@pytest.fixture
def long_street_finder() -> Callable[[int, int], PathFinder]:
    """Build a finder over ``count`` junctions in a line, addressed 1 and ``count`` Long St."""

    def build(count: int, max_visits: int) -> PathFinder:
        step = LAT_STEP / 10
        graph = JunctionGraph.from_records(
            (
                cnn,
                BASE_LAT + (cnn - 1) * step,
                BASE_LON,
                ["LONG ST"],
                [cnn + 1] if cnn < count else [],
            )
            for cnn in range(1, count + 1)
        )
        addresses = AddressBook.from_rows(
            [
                ("1", "LONG ST", BASE_LAT, BASE_LON),
                (str(count), "LONG ST", BASE_LAT + (count - 1) * step, BASE_LON),
            ]
        )
        return PathFinder(graph, addresses, max_visits=max_visits)

    return build


@pytest.fixture
def detour_finder() -> PathFinder:
    """Two ways from West St to East St where only one side's search sees the short one.

    Searching from West St, junction 4 looks closer to the destination, so a
    tight visit ceiling is spent on the 1-4-5-2 detour. Searching from East St,
    junction 3 looks closer and the 2-3-1 route is found first.
    """
    unit = LAT_STEP
    graph = JunctionGraph.from_records(
        [
            (1, BASE_LAT, BASE_LON, ["WEST ST"], [3, 4]),
            (2, BASE_LAT, BASE_LON + 10 * unit, ["EAST ST"], [3, 5]),
            (3, BASE_LAT - unit, BASE_LON + 5 * unit, ["LOW ST"], []),
            (4, BASE_LAT + 0.5 * unit, BASE_LON + 6 * unit, ["HIGH ST"], [5]),
            (5, BASE_LAT + 5 * unit, BASE_LON + 10 * unit, ["HIGH ST"], []),
        ]
    )
    addresses = AddressBook.from_rows(
        [
            ("10", "WEST ST", BASE_LAT, BASE_LON - 0.0001),
            ("20", "EAST ST", BASE_LAT, BASE_LON + 10 * unit + 0.0001),
        ]
    )
    return PathFinder(graph, addresses, max_visits=3)
