"""Proximity ranking - Pure functions.

Annotates hazards or facilities with their distance from an origin and
orders them nearest first.
"""

from dataclasses import dataclass
from typing import Generic, Iterable, TypeVar

from stormhaven.core.geo import Coordinate, distance, km_to_miles
from stormhaven.core.storm import FacilityRecord, HazardRecord


# Nearest-facility search surfaces at most this many results
FACILITY_RESULT_LIMIT = 3

R = TypeVar("R", HazardRecord, FacilityRecord)


@dataclass(frozen=True)
class RankedEntry(Generic[R]):
    """A record annotated with its distance from the origin.

    Attributes:
        record: The hazard or facility
        distance_km: Great-circle distance from the origin
    """
    record: R
    distance_km: float

    @property
    def distance_miles(self) -> float:
        """Distance in statute miles."""
        return km_to_miles(self.distance_km)


def rank(
    records: Iterable[R],
    origin: Coordinate,
    limit: int | None = None,
) -> list[RankedEntry[R]]:
    """Order records by distance from an origin.

    Pure function. The sort is stable, so records at exactly the same
    distance keep their input order.

    Args:
        records: Hazards or facilities to rank
        origin: The user's location
        limit: Maximum entries to return, None for all

    Returns:
        Distance-annotated entries, nearest first
    """
    entries = [
        RankedEntry(record=record, distance_km=distance(origin, record.coordinate))
        for record in records
    ]
    entries.sort(key=lambda e: e.distance_km)

    if limit is not None:
        return entries[:max(limit, 0)]

    return entries


def nearest(
    records: Iterable[R],
    origin: Coordinate,
) -> RankedEntry[R] | None:
    """Return the closest record, or None when there are none.

    Pure function.
    """
    ranked = rank(records, origin, limit=1)
    return ranked[0] if ranked else None
