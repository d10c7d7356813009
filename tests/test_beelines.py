from __future__ import annotations

import pytest

from school_routes.services import beelines as beelines_module
from school_routes.services.beelines import BeelineCache
from school_routes.services.geo import beeline_miles
from school_routes.services.types import Coordinate

HOME = Coordinate(latitude=37.7599, longitude=-122.4148)
CORNER = Coordinate(latitude=37.7609, longitude=-122.4150)


def test_distance_is_computed_once_per_key_and_junction(mocker) -> None:
    spy = mocker.patch.object(beelines_module, "beeline_miles", wraps=beeline_miles)
    cache = BeelineCache()

    first = cache.distance_to("100 MAIN ST", 1, HOME, CORNER)
    second = cache.distance_to("100 MAIN ST", 1, HOME, CORNER)

    assert first == second == pytest.approx(beeline_miles(HOME, CORNER))
    assert spy.call_count == 1


def test_keys_are_kept_apart() -> None:
    cache = BeelineCache()

    cache.distance_to("100 MAIN ST", 1, HOME, CORNER)
    cache.distance_to("100 MAIN ST", 2, HOME, HOME)
    cache.distance_to("300 OAK ST", 1, CORNER, CORNER)

    assert len(cache) == 3
    assert "100 MAIN ST" in cache
    assert "1 LONE ST" not in cache
    assert cache.entries_for("100 MAIN ST") == 2
    assert cache.entries_for("300 OAK ST") == 1
    assert cache.distance_to("300 OAK ST", 1, HOME, CORNER) == 0.0
