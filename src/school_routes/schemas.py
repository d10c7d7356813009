from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class RouteRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    start_address: str = Field(min_length=3, max_length=300)
    end_address: str = Field(min_length=3, max_length=300)
    include_directions: bool = True


class SchoolDistancesRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    origin_address: str = Field(min_length=3, max_length=300)
    school_type: str | None = Field(default=None, max_length=50)
    school_names: list[str] | None = Field(default=None, max_length=500)


class Coordinate(BaseModel):
    latitude: float
    longitude: float


class JunctionResponse(BaseModel):
    cnn: int
    name: str
    latitude: float
    longitude: float


class RouteSummaryResponse(BaseModel):
    distance_miles: float
    beeline_miles: float
    junction_count: int
    walkable: bool
    bikeable: bool
    formatted_distance: str


class RouteResponse(BaseModel):
    start_address: str
    end_address: str
    start: Coordinate
    end: Coordinate
    junctions: list[JunctionResponse]
    directions: list[str]
    summary: RouteSummaryResponse


class SchoolDistanceResponse(BaseModel):
    name: str
    types: list[str]
    address: str
    distance_miles: float | None
    formatted_distance: str
    walkable: bool
    bikeable: bool


class SchoolDistancesResponse(BaseModel):
    origin_address: str
    origin: Coordinate
    schools: list[SchoolDistanceResponse]
