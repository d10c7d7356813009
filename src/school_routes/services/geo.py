from __future__ import annotations

import math

from school_routes.services.types import Coordinate

EARTH_RADIUS_MILES = 3958.7613
MILES_PER_DEGREE_LAT = 69.0
FEET_PER_MILE = 5280

# Most people walk 2-4 MPH and bike 5-10 MPH, so these are roughly 20 minutes.
WALKABLE_MILES = 1.0
BIKEABLE_MILES = 2.25

_DIRECTIONS = ("N", "NE", "E", "SE", "S", "SW", "W", "NW")


def haversine_miles(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    lat1_rad = math.radians(lat1)
    lon1_rad = math.radians(lon1)
    lat2_rad = math.radians(lat2)
    lon2_rad = math.radians(lon2)

    dlat = lat2_rad - lat1_rad
    dlon = lon2_rad - lon1_rad

    a = (
        math.sin(dlat / 2.0) ** 2
        + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(dlon / 2.0) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_MILES * c


def beeline_miles(start: Coordinate, end: Coordinate) -> float:
    """Distance between two coordinates, as the crow flies."""
    return haversine_miles(start.latitude, start.longitude, end.latitude, end.longitude)


def lon_lat_to_miles_xy(lon: float, lat: float, ref_lat: float) -> tuple[float, float]:
    miles_per_degree_lon = MILES_PER_DEGREE_LAT * math.cos(math.radians(ref_lat))
    return lon * miles_per_degree_lon, lat * MILES_PER_DEGREE_LAT


def find_azimuth(start: Coordinate, end: Coordinate) -> float | None:
    """Compass heading from ``start`` to ``end`` in degrees, 0 being north."""
    if start == end:
        return None
    ref_lat = (start.latitude + end.latitude) / 2.0
    x, y = lon_lat_to_miles_xy(
        end.longitude - start.longitude, end.latitude - start.latitude, ref_lat
    )
    return math.degrees(math.atan2(x, y)) % 360.0


def azimuth_to_direction(azimuth: float | None) -> str | None:
    if azimuth is None or math.isnan(azimuth):
        return None
    index = int(((azimuth % 360.0) + 22.5) // 45.0) % len(_DIRECTIONS)
    return _DIRECTIONS[index]


def is_walkable(miles: float, threshold: float = WALKABLE_MILES) -> bool:
    return miles <= threshold


def is_bikeable(miles: float, threshold: float = BIKEABLE_MILES) -> bool:
    return miles <= threshold
