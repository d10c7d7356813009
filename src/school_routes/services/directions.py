from __future__ import annotations

import math

from school_routes.services.addresses import prettify_address
from school_routes.services.geo import (
    BIKEABLE_MILES,
    FEET_PER_MILE,
    WALKABLE_MILES,
    azimuth_to_direction,
    beeline_miles,
    find_azimuth,
    is_bikeable,
    is_walkable,
)
from school_routes.services.graph import JunctionGraph
from school_routes.services.types import Coordinate, Route, RouteDescription, Turn


def describe_path(graph: JunctionGraph, route: Route) -> RouteDescription:
    """Collapse a route into the streets it follows, one ``Turn`` per street."""
    if not route.found:
        return RouteDescription(turns=[], destination=route.end.address, total_miles=math.inf)
    if route.distance_miles == 0.0:
        return RouteDescription(turns=[], destination=route.end.address, total_miles=0.0)

    legs = _legs(graph, route)
    turns: list[Turn] = []
    for junction, street, start, end in legs:
        distance = beeline_miles(start, end)
        if turns and turns[-1].street == street:
            last = turns[-1]
            turns[-1] = Turn(
                junction=last.junction,
                street=last.street,
                azimuth=last.azimuth,
                direction=last.direction,
                distance_miles=last.distance_miles + distance,
            )
            continue
        azimuth = find_azimuth(start, end)
        turns.append(
            Turn(
                junction=junction,
                street=street,
                azimuth=azimuth,
                direction=azimuth_to_direction(azimuth),
                distance_miles=distance,
            )
        )

    return RouteDescription(
        turns=turns,
        destination=route.end.address,
        total_miles=sum(turn.distance_miles for turn in turns),
    )


def _legs(
    graph: JunctionGraph, route: Route
) -> list[tuple[int | None, str, Coordinate, Coordinate]]:
    path = route.junctions
    legs = [(None, route.start.street, route.start.coordinate, graph.junction_coordinate(path[0]))]

    street = route.start.street
    for here, there in zip(path, path[1:]):
        common = graph.junction(here).streets & graph.junction(there).streets
        if street not in common and common:
            street = sorted(common)[0]
        legs.append(
            (here, street, graph.junction_coordinate(here), graph.junction_coordinate(there))
        )

    last = path[-1]
    legs.append((last, route.end.street, graph.junction_coordinate(last), route.end.coordinate))
    # Zero-length legs (an address sitting on its junction) say nothing useful.
    return [leg for leg in legs if leg[2] != leg[3]] or legs[:1]


def format_distance(
    miles: float,
    *,
    label: bool = False,
    walkable_miles: float = WALKABLE_MILES,
    bikeable_miles: float = BIKEABLE_MILES,
) -> str:
    """Show a short distance in feet and a longer one in miles."""
    if math.isnan(miles) or math.isinf(miles):
        return ""
    suffix = ""
    if label and is_walkable(miles, walkable_miles):
        suffix = " Walkable"
    elif label and is_bikeable(miles, bikeable_miles):
        suffix = " Bikeable"
    feet = miles * FEET_PER_MILE
    if feet <= 1000:
        return f"{feet:.0f} ft.{suffix}"
    return f"{miles:.1f} mi.{suffix}"


def direction_steps(description: RouteDescription) -> list[str]:
    steps = []
    for turn in description.turns:
        heading = f"{turn.direction} " if turn.direction else ""
        steps.append(
            f"Go {heading}on {prettify_address(turn.street)} {format_distance(turn.distance_miles)}"
        )
    steps.append(f"Arrive at {prettify_address(description.destination)}")
    return steps
