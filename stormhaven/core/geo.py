"""Geographic calculations - Pure functions.

This module provides great-circle distance calculations between the user
and storms or relief facilities. All functions are pure with no side effects.
"""

import math
from dataclasses import dataclass


# Mean Earth radius in kilometers (IUGG)
EARTH_RADIUS_KM = 6371.0088

KM_TO_MILES = 0.621371


@dataclass(frozen=True)
class Coordinate:
    """Immutable latitude/longitude pair.

    Attributes:
        latitude: Degrees north, in [-90, 90]
        longitude: Degrees east, in [-180, 180]
    """
    latitude: float
    longitude: float

    @property
    def is_valid(self) -> bool:
        """Check that both components are finite and within range."""
        return (
            math.isfinite(self.latitude)
            and math.isfinite(self.longitude)
            and -90 <= self.latitude <= 90
            and -180 <= self.longitude <= 180
        )

    def as_query_value(self) -> str:
        """Return the "lat,lng" form used by place search APIs."""
        return f"{self.latitude},{self.longitude}"


def calculate_distance(
    lat1: float,
    lon1: float,
    lat2: float,
    lon2: float,
) -> float:
    """Calculate distance between two points using Haversine formula.

    Pure function.

    Args:
        lat1: Latitude of first point
        lon1: Longitude of first point
        lat2: Latitude of second point
        lon2: Longitude of second point

    Returns:
        Distance in kilometers
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lat = math.radians(lat2 - lat1)
    delta_lon = math.radians(lon2 - lon1)

    a = (
        math.sin(delta_lat / 2) ** 2
        + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(delta_lon / 2) ** 2
    )
    # Rounding can push antipodal points slightly past 1
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_KM * c


def distance(a: Coordinate, b: Coordinate) -> float:
    """Great-circle distance between two coordinates in kilometers.

    Pure function. Symmetric, and zero when both coordinates are equal.
    """
    return calculate_distance(a.latitude, a.longitude, b.latitude, b.longitude)


def km_to_miles(km: float) -> float:
    """Convert kilometers to statute miles."""
    return km * KM_TO_MILES


def miles_to_km(miles: float) -> float:
    """Convert statute miles to kilometers."""
    return miles / KM_TO_MILES


def is_within_radius(
    point: Coordinate,
    center: Coordinate,
    radius_km: float,
) -> bool:
    """Check if a point is within a radius of a center coordinate.

    Pure function.

    Args:
        point: Coordinate to check
        center: Center of the search circle
        radius_km: Radius in kilometers

    Returns:
        True if the point is within the radius (inclusive)
    """
    return distance(point, center) <= radius_km
