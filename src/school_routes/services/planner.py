from __future__ import annotations

import math

from django.conf import settings

from school_routes.exceptions import NoRouteFoundError, UnknownSchoolError
from school_routes.schemas import (
    Coordinate,
    JunctionResponse,
    RouteRequest,
    RouteResponse,
    RouteSummaryResponse,
    SchoolDistanceResponse,
    SchoolDistancesRequest,
    SchoolDistancesResponse,
)
from school_routes.services.addresses import AddressResolver, normalize_address
from school_routes.services.directions import describe_path, direction_steps, format_distance
from school_routes.services.geo import beeline_miles, is_bikeable, is_walkable
from school_routes.services.graph import JunctionGraph
from school_routes.services.loader import load_address_book, load_junction_graph, load_schools
from school_routes.services.pathfinding import PathFinder
from school_routes.services.types import SchoolRecord


class RoutePlannerService:
    def __init__(
        self,
        graph: JunctionGraph | None = None,
        address_book: AddressResolver | None = None,
        schools: list[SchoolRecord] | None = None,
        max_visits: int | None = None,
    ) -> None:
        self.graph = graph if graph is not None else load_junction_graph()
        self.address_book = address_book if address_book is not None else load_address_book()
        self.schools = schools if schools is not None else load_schools()
        self.path_finder = PathFinder(
            self.graph,
            self.address_book,
            max_visits=max_visits or int(settings.PATH_MAX_JUNCTION_VISITS),
        )

    def plan_route(self, request: RouteRequest) -> RouteResponse:
        route = self.path_finder.find_route(request.start_address, request.end_address)
        if not route.found:
            raise NoRouteFoundError(
                f"No route found from {route.start.address} to {route.end.address}"
            )

        directions: list[str] = []
        if request.include_directions:
            directions = direction_steps(describe_path(self.graph, route))

        junctions = []
        for cnn in route.junctions:
            coordinate = self.graph.junction_coordinate(cnn)
            junctions.append(
                JunctionResponse(
                    cnn=cnn,
                    name=self.graph.name_junction(cnn),
                    latitude=round(coordinate.latitude, 6),
                    longitude=round(coordinate.longitude, 6),
                )
            )

        distance = route.distance_miles
        summary = RouteSummaryResponse(
            distance_miles=round(distance, 3),
            beeline_miles=round(beeline_miles(route.start.coordinate, route.end.coordinate), 3),
            junction_count=len(route.junctions),
            walkable=is_walkable(distance, float(settings.WALKABLE_MILES)),
            bikeable=is_bikeable(distance, float(settings.BIKEABLE_MILES)),
            formatted_distance=self._format(distance),
        )

        return RouteResponse(
            start_address=route.start.address,
            end_address=route.end.address,
            start=Coordinate(
                latitude=round(route.start.coordinate.latitude, 6),
                longitude=round(route.start.coordinate.longitude, 6),
            ),
            end=Coordinate(
                latitude=round(route.end.coordinate.latitude, 6),
                longitude=round(route.end.coordinate.longitude, 6),
            ),
            junctions=junctions,
            directions=directions,
            summary=summary,
        )

    def school_distances(self, request: SchoolDistancesRequest) -> SchoolDistancesResponse:
        origin = self.address_book.resolve(request.origin_address)
        schools = self._select_schools(request)
        distances = self.path_finder.batch_distances(
            origin.address, [school.address for school in schools]
        )

        results = []
        for school in schools:
            distance = distances.get(normalize_address(school.address))
            results.append(
                SchoolDistanceResponse(
                    name=school.name,
                    types=list(school.types),
                    address=school.address,
                    distance_miles=None if distance is None else round(distance, 3),
                    formatted_distance="" if distance is None else self._format(distance),
                    walkable=distance is not None
                    and is_walkable(distance, float(settings.WALKABLE_MILES)),
                    bikeable=distance is not None
                    and is_bikeable(distance, float(settings.BIKEABLE_MILES)),
                )
            )

        results.sort(
            key=lambda result: (
                math.inf if result.distance_miles is None else result.distance_miles,
                result.name,
            )
        )
        return SchoolDistancesResponse(
            origin_address=origin.address,
            origin=Coordinate(
                latitude=round(origin.coordinate.latitude, 6),
                longitude=round(origin.coordinate.longitude, 6),
            ),
            schools=results,
        )

    def _select_schools(self, request: SchoolDistancesRequest) -> list[SchoolRecord]:
        schools = self.schools
        if request.school_names:
            known = {school.name for school in schools}
            unknown = sorted(set(request.school_names) - known)
            if unknown:
                raise UnknownSchoolError(f"Unknown schools: {', '.join(unknown)}")
            wanted = set(request.school_names)
            schools = [school for school in schools if school.name in wanted]
        if request.school_type:
            school_type = request.school_type.lower()
            schools = [
                school
                for school in schools
                if school_type in (kind.lower() for kind in school.types)
            ]
        return schools

    @staticmethod
    def _format(miles: float) -> str:
        return format_distance(
            miles,
            label=True,
            walkable_miles=float(settings.WALKABLE_MILES),
            bikeable_miles=float(settings.BIKEABLE_MILES),
        )
