from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Iterator

from school_routes.exceptions import JunctionNotFoundError
from school_routes.services.addresses import prettify_address
from school_routes.services.geo import beeline_miles
from school_routes.services.types import Coordinate, Junction

logger = logging.getLogger(__name__)


class JunctionGraph:
    """Street intersections keyed by CNN, plus a street name -> intersections index.

    The graph is read-only once built, so one instance can back any number of
    searches. Adjacency is undirected: a block listed on only one of its
    junctions is still walkable from the other.
    """

    def __init__(self, junctions: Iterable[Junction]) -> None:
        self._junctions: dict[int, Junction] = {}
        for junction in junctions:
            self._junctions[junction.cnn] = junction
        self._adjacency = self._build_adjacency(self._junctions.values())
        self._street_index = self._build_street_index(self._junctions.values())

    @classmethod
    def from_records(
        cls,
        records: Iterable[tuple[int, float, float, Iterable[str], Iterable[int]]],
    ) -> JunctionGraph:
        return cls(
            Junction(
                cnn=int(cnn),
                coordinate=Coordinate(latitude=latitude, longitude=longitude),
                streets=frozenset(streets),
                adjacent=tuple(int(neighbor) for neighbor in adjacent),
            )
            for cnn, latitude, longitude, streets, adjacent in records
        )

    def __len__(self) -> int:
        return len(self._junctions)

    def __contains__(self, cnn: object) -> bool:
        return cnn in self._junctions

    def __iter__(self) -> Iterator[int]:
        return iter(self._junctions)

    def junction(self, cnn: int) -> Junction:
        try:
            return self._junctions[cnn]
        except KeyError as exc:
            raise JunctionNotFoundError(f"Junction {cnn} not found") from exc

    def junction_coordinate(self, cnn: int) -> Coordinate:
        return self.junction(cnn).coordinate

    def junction_adjacency(self, cnn: int) -> list[int]:
        return list(self._adjacency.get(cnn, ()))

    def junctions_on_street(self, street: str) -> list[int]:
        return list(self._street_index.get(street, ()))

    @property
    def streets(self) -> list[str]:
        return sorted(self._street_index)

    def distance_between(self, start: int, end: int) -> float:
        """Beeline miles between two junctions; infinite if either is unknown."""
        first = self._junctions.get(start)
        second = self._junctions.get(end)
        if first is None or second is None:
            return math.inf
        return beeline_miles(first.coordinate, second.coordinate)

    def name_junction(self, cnn: int) -> str:
        """Name an intersection, e.g. ``Castro St & 17th St``."""
        junction = self._junctions.get(cnn)
        if junction is None:
            return ""
        return prettify_address(" & ".join(sorted(junction.streets)))

    @staticmethod
    def _build_adjacency(junctions: Iterable[Junction]) -> dict[int, tuple[int, ...]]:
        # Neighbors listed on either end of a block count for both ends.
        adjacency: dict[int, dict[int, None]] = {}
        for junction in junctions:
            neighbors = adjacency.setdefault(junction.cnn, {})
            for neighbor in junction.adjacent:
                if neighbor == junction.cnn:
                    continue
                neighbors[neighbor] = None
                adjacency.setdefault(neighbor, {})[junction.cnn] = None
        return {cnn: tuple(neighbors) for cnn, neighbors in adjacency.items()}

    @staticmethod
    def _build_street_index(junctions: Iterable[Junction]) -> dict[str, tuple[int, ...]]:
        index: dict[str, list[int]] = {}
        for junction in junctions:
            for street in junction.streets:
                index.setdefault(street, []).append(junction.cnn)
        logger.debug("Indexed %d streets", len(index))
        return {street: tuple(cnns) for street, cnns in index.items()}
