from __future__ import annotations

from school_routes.services.geo import beeline_miles
from school_routes.services.types import Coordinate


class BeelineCache:
    """Memoized beeline miles from a reference address to junctions.

    Keyed by the reference's canonical address, then by junction CNN. Create
    one per batch of searches that share an origin and pass it down; it is not
    safe to share between threads.
    """

    def __init__(self) -> None:
        self._distances: dict[str, dict[int, float]] = {}

    def __len__(self) -> int:
        return sum(len(distances) for distances in self._distances.values())

    def __contains__(self, key: object) -> bool:
        return key in self._distances

    def distance_to(
        self, key: str, cnn: int, reference: Coordinate, junction: Coordinate
    ) -> float:
        distances = self._distances.setdefault(key, {})
        cached = distances.get(cnn)
        if cached is not None:
            return cached
        distance = beeline_miles(reference, junction)
        distances[cnn] = distance
        return distance

    def entries_for(self, key: str) -> int:
        return len(self._distances.get(key, {}))
