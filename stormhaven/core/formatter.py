"""Display formatting - Pure functions.

This module turns engine output into the strings and JSON-ready dicts the
presentation layer shows. All functions are pure with no side effects.
"""

from typing import Any
from urllib.parse import urlencode

from stormhaven.core.errors import (
    EmptyResponseError,
    MalformedResponseError,
    NetworkError,
    StormHavenError,
)
from stormhaven.core.geo import Coordinate
from stormhaven.core.ranking import RankedEntry
from stormhaven.core.result import AdvisoryResult, Failure, PartialFailure
from stormhaven.core.storm import FacilityRecord, HazardRecord


MILES = "miles"
KILOMETERS = "km"


def format_distance(entry: RankedEntry, unit: str = MILES) -> str:
    """Format an entry's distance, e.g. "145.23 miles away".

    Pure function.
    """
    if unit == KILOMETERS:
        return f"{entry.distance_km:.2f} km away"
    return f"{entry.distance_miles:.2f} miles away"


def format_hazard_summary(entry: RankedEntry[HazardRecord]) -> str:
    """Format a one-line summary of a ranked storm.

    Pure function.

    Args:
        entry: Ranked hazard

    Returns:
        Summary such as "Ana - Type: Hurricane - Distance: 93.02 miles away"
    """
    hazard = entry.record
    return (
        f"{hazard.name} - Type: {hazard.status} - "
        f"Distance: {format_distance(entry, MILES)}"
    )


def format_facility_summary(entry: RankedEntry[FacilityRecord]) -> str:
    """Format a one-line summary of a ranked facility.

    Pure function.
    """
    facility = entry.record
    return f"{facility.name}, {facility.address} ({format_distance(entry, KILOMETERS)})"


def format_supplies(recommendations: list[str]) -> str:
    """Format recommendations as a bulleted list, one per line.

    Pure function.
    """
    return "\n".join(f"• {item}" for item in recommendations)


def maps_directions_url(destination: Coordinate) -> str:
    """Build a driving-directions link to a coordinate.

    Pure function.
    """
    params = {
        "api": "1",
        "destination": destination.as_query_value(),
        "travelmode": "driving",
    }
    return f"https://www.google.com/maps/dir/?{urlencode(params)}"


def format_failure_message(error: StormHavenError) -> str:
    """Render any engine error as a single human-readable line.

    Pure function.
    """
    if isinstance(error, NetworkError):
        return f"Error fetching data: {error}"
    if isinstance(error, EmptyResponseError):
        return "No data received from the server"
    if isinstance(error, MalformedResponseError):
        return f"Error parsing data: {error}"
    return str(error) or error.__class__.__name__


def _record_to_dict(record: Any) -> dict[str, Any]:
    coordinate = record.coordinate
    data: dict[str, Any] = {
        "name": record.name,
        "latitude": coordinate.latitude,
        "longitude": coordinate.longitude,
    }
    if isinstance(record, HazardRecord):
        data.update({
            "type": "hazard",
            "id": record.id,
            "classification": record.classification,
            "status": record.status,
            "intensity_knots": record.intensity_knots,
            "pressure_mb": record.pressure_mb,
        })
    else:
        data.update({
            "type": "facility",
            "address": record.address,
            "place_id": record.place_id,
            "directions_url": maps_directions_url(coordinate),
        })
    return data


def entry_to_dict(entry: Any) -> Any:
    """Convert a ranked entry to a JSON-serializable dict.

    Recommendation strings are passed through unchanged.

    Pure function.
    """
    if not isinstance(entry, RankedEntry):
        return entry

    data = _record_to_dict(entry.record)
    data["distance_km"] = round(entry.distance_km, 2)
    data["distance_miles"] = round(entry.distance_miles, 2)
    return data


def result_to_dict(result: AdvisoryResult) -> dict[str, Any]:
    """Convert an AdvisoryResult to a JSON-serializable dict.

    Pure function.

    Args:
        result: Result from an engine operation

    Returns:
        Dict with "status" and either "entries" or "error"
    """
    if isinstance(result, Failure):
        return {
            "status": result.status,
            "error": {
                "kind": result.error.kind,
                "message": format_failure_message(result.error),
            },
        }

    data: dict[str, Any] = {
        "status": result.status,
        "entries": [entry_to_dict(e) for e in result.entries],
        "count": len(result.entries),
    }

    if isinstance(result, PartialFailure):
        data["errors"] = [
            {"kind": e.kind, "message": format_failure_message(e)}
            for e in result.errors
        ]

    return data
