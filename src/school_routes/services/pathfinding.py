"""Find walking routes between street addresses over the junction graph.

The search is a depth-first traversal that tries the neighbor closest to the
destination first, keeps every branch that reaches the destination and picks
the shortest of them. It is bounded by a total number of junction visits per
search, so it is fast and always terminates, but it is not guaranteed to find
the globally shortest route. Because neighbor ordering depends on where the
search is heading, searching from each end can give different routes; both
directions are tried and the shorter one wins.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Iterator

from school_routes.exceptions import AddressNotFoundError, EmptyGraphError
from school_routes.services.addresses import AddressResolver
from school_routes.services.beelines import BeelineCache
from school_routes.services.geo import beeline_miles
from school_routes.services.graph import JunctionGraph
from school_routes.services.types import ResolvedAddress, Route

logger = logging.getLogger(__name__)

DEFAULT_MAX_VISITS = 1000


class PathFinder:
    def __init__(
        self,
        graph: JunctionGraph,
        resolver: AddressResolver,
        max_visits: int = DEFAULT_MAX_VISITS,
    ) -> None:
        if max_visits < 1:
            raise ValueError("max_visits must be at least 1")
        self.graph = graph
        self.resolver = resolver
        self.max_visits = max_visits

    def find_path(
        self, start: str, end: str, beelines: BeelineCache | None = None
    ) -> list[int]:
        """Junction CNNs from ``start`` to ``end``, or an empty list if no route was found."""
        return self.find_route(start, end, beelines).junctions

    def find_route(self, start: str, end: str, beelines: BeelineCache | None = None) -> Route:
        start_address = self.resolver.resolve(start)
        end_address = self.resolver.resolve(end)
        if beelines is None:
            beelines = BeelineCache()
        path = self._best_path(start_address, end_address, beelines)
        return Route(
            start=start_address,
            end=end_address,
            junctions=path,
            distance_miles=self._found_miles(path, start_address, end_address),
        )

    def route_distance(self, path: list[int], start: str, end: str) -> float:
        """Miles from ``start`` through each junction of ``path`` to ``end``.

        An empty path means no route, which is infinitely far rather than zero.
        """
        return self._route_miles(path, self.resolver.resolve(start), self.resolver.resolve(end))

    def batch_distances(
        self,
        origin: str,
        destinations: Iterable[str],
        beelines: BeelineCache | None = None,
    ) -> dict[str, float]:
        """Route miles from one origin to each destination, keyed by normalized destination.

        Destinations that cannot be resolved or reached are logged and left out.
        """
        destinations = list(destinations)
        if beelines is None:
            beelines = BeelineCache()
        origin_address = self.resolver.resolve(origin)
        distances: dict[str, float] = {}
        for destination in destinations:
            try:
                destination_address = self.resolver.resolve(destination)
            except AddressNotFoundError as exc:
                logger.warning("Skipping destination %r: %s", destination, exc)
                continue

            path = self._best_path(origin_address, destination_address, beelines)
            if not path:
                logger.info(
                    "No route from %s to %s", origin_address.address, destination_address.address
                )
                continue
            distances[destination_address.address] = self._found_miles(
                path, origin_address, destination_address
            )

        logger.debug(
            "Computed %d of %d distances from %s with %d cached beelines",
            len(distances),
            len(destinations),
            origin_address.address,
            len(beelines),
        )
        return distances

    def _best_path(
        self, start: ResolvedAddress, end: ResolvedAddress, beelines: BeelineCache
    ) -> list[int]:
        forward = self._search(start, end, beelines)
        backward = self._search(end, start, beelines)
        backward.reverse()

        if not forward and not backward:
            logger.info("No route found between %s and %s", start.address, end.address)
            return []
        if not backward:
            return forward
        if not forward:
            return backward

        forward_miles = self._found_miles(forward, start, end)
        backward_miles = self._found_miles(backward, start, end)
        return forward if forward_miles < backward_miles else backward

    def _search(
        self, origin: ResolvedAddress, destination: ResolvedAddress, beelines: BeelineCache
    ) -> list[int]:
        entry = self._nearest_junction(origin, beelines)
        target = self._nearest_junction(destination, beelines)
        traversal = _Traversal(self.graph, beelines, destination, target, self.max_visits)
        path = traversal.run(
            entry,
            beelines.distance_to(
                origin.address,
                entry,
                origin.coordinate,
                self.graph.junction_coordinate(entry),
            ),
        )
        logger.debug(
            "Searched %s -> %s: %d visits, %d paths found",
            origin.address,
            destination.address,
            traversal.visits,
            traversal.candidates,
        )
        return path

    def _nearest_junction(self, address: ResolvedAddress, beelines: BeelineCache) -> int:
        if not self.graph:
            raise EmptyGraphError("Junction graph is empty")

        candidates: Iterable[int] = self.graph.junctions_on_street(address.street)
        if not candidates:
            logger.debug("No junctions on %s, scanning the whole graph", address.street)
            candidates = self.graph

        nearest: int | None = None
        shortest = math.inf
        for cnn in candidates:
            distance = beelines.distance_to(
                address.address, cnn, address.coordinate, self.graph.junction_coordinate(cnn)
            )
            if distance < shortest:
                nearest, shortest = cnn, distance

        if nearest is None:
            raise EmptyGraphError(f"No junction near {address.address}")
        return nearest

    def _found_miles(
        self, path: list[int], start: ResolvedAddress, end: ResolvedAddress
    ) -> float:
        # Start and end meet at one junction: the walk is already over.
        if start.address == end.address and len(path) == 1:
            return 0.0
        return self._route_miles(path, start, end)

    def _route_miles(
        self, path: list[int], start: ResolvedAddress, end: ResolvedAddress
    ) -> float:
        if not path:
            return math.inf

        miles = beeline_miles(start.coordinate, self.graph.junction_coordinate(path[0]))
        for previous, current in zip(path, path[1:]):
            miles += self.graph.distance_between(previous, current)
        miles += beeline_miles(self.graph.junction_coordinate(path[-1]), end.coordinate)
        return miles


class _Traversal:
    """One bounded depth-first search toward a single target junction.

    Branches live on an explicit stack, so the visit ceiling is not tied to
    the interpreter's recursion limit. Only the branch being explored and the
    best complete path are kept.
    """

    def __init__(
        self,
        graph: JunctionGraph,
        beelines: BeelineCache,
        destination: ResolvedAddress,
        target: int,
        max_visits: int,
    ) -> None:
        self._graph = graph
        self._beelines = beelines
        self._destination = destination
        self._target = target
        self._max_visits = max_visits

        self.visits = 0
        self.candidates = 0
        self.best_path: list[int] = []
        self.best_miles = math.inf

        self._path: list[int] = []
        self._on_path: set[int] = set()
        self._frames: list[tuple[int, float, Iterator[int]]] = []

    def run(self, entry: int, miles: float) -> list[int]:
        self._enter(entry, miles)
        while self._frames:
            here, miles_so_far, neighbors = self._frames[-1]
            neighbor = next(neighbors, None)
            if neighbor is None:
                self._frames.pop()
                self._on_path.discard(self._path.pop())
                continue
            self._enter(neighbor, miles_so_far + self._graph.distance_between(here, neighbor))
        return self.best_path

    def _enter(self, cnn: int, miles: float) -> None:
        # Never visit the same junction twice on one branch.
        if cnn in self._on_path:
            return

        if cnn == self._target:
            self.candidates += 1
            if miles < self.best_miles:
                self.best_miles = miles
                self.best_path = [*self._path, cnn]
            return

        if self.visits >= self._max_visits:
            return
        self.visits += 1

        self._path.append(cnn)
        self._on_path.add(cnn)
        self._frames.append((cnn, miles, iter(self._ordered_neighbors(cnn))))

    def _ordered_neighbors(self, cnn: int) -> list[int]:
        neighbors = []
        for neighbor in self._graph.junction_adjacency(cnn):
            if neighbor not in self._graph:
                logger.warning("Junction %s lists unknown neighbor %s, skipping", cnn, neighbor)
                continue
            neighbors.append(neighbor)

        destination = self._destination
        return sorted(
            neighbors,
            key=lambda neighbor: self._beelines.distance_to(
                destination.address,
                neighbor,
                destination.coordinate,
                self._graph.junction_coordinate(neighbor),
            ),
        )

