from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class Coordinate:
    latitude: float
    longitude: float


@dataclass(slots=True, frozen=True)
class ResolvedAddress:
    address: str
    number: str
    street: str
    coordinate: Coordinate


@dataclass(slots=True, frozen=True)
class Junction:
    cnn: int
    coordinate: Coordinate
    streets: frozenset[str]
    adjacent: tuple[int, ...]


@dataclass(slots=True, frozen=True)
class SchoolRecord:
    name: str
    types: tuple[str, ...]
    address: str


@dataclass(slots=True, frozen=True)
class Turn:
    junction: int | None
    street: str
    azimuth: float | None
    direction: str | None
    distance_miles: float


@dataclass(slots=True, frozen=True)
class RouteDescription:
    turns: list[Turn]
    destination: str
    total_miles: float


@dataclass(slots=True, frozen=True)
class Route:
    start: ResolvedAddress
    end: ResolvedAddress
    junctions: list[int]
    distance_miles: float

    @property
    def found(self) -> bool:
        return bool(self.junctions)
