"""Storm and facility data models and parsing - Pure functions.

This module turns decoded feed JSON into typed records. Parsing is
best-effort per record: an entry that lacks a required field is dropped
and recorded as skipped, while the rest of the batch is kept. Only a wrong
top-level shape fails the whole feed.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar

from stormhaven.core.errors import MalformedResponseError
from stormhaven.core.geo import Coordinate


logger = logging.getLogger(__name__)


HAZARD_RECORDS_KEY = "activeStorms"
FACILITY_RECORDS_KEY = "results"

UNKNOWN_STATUS = "Unknown"

# NHC classification codes
CLASSIFICATIONS: dict[str, str] = {
    "HU": "Hurricane",
    "TD": "Tropical Depression",
    "TS": "Tropical Storm",
    "EX": "Extratropical Cyclone",
    "LO": "Low Pressure System",
    "DB": "Disturbance",
}


def get_readable_status(classification: str) -> str:
    """Map a raw classification code to a display status.

    Pure function. Total: unrecognised codes map to "Unknown".
    """
    return CLASSIFICATIONS.get(classification, UNKNOWN_STATUS)


@dataclass(frozen=True)
class HazardRecord:
    """Immutable active storm record.

    Attributes:
        id: Identifier, stable for the session (feed id or derived slug)
        name: Storm name as published
        classification: Raw feed code (e.g. "HU", "TS")
        coordinate: Storm center
        intensity_knots: Maximum sustained wind, when published
        pressure_mb: Minimum central pressure, when published
    """
    id: str
    name: str
    classification: str
    coordinate: Coordinate
    intensity_knots: int | None = None
    pressure_mb: int | None = None

    @property
    def status(self) -> str:
        """Human-readable classification."""
        return get_readable_status(self.classification)


@dataclass(frozen=True)
class FacilityRecord:
    """Immutable relief facility record.

    Attributes:
        name: Facility name
        address: Short address (the feed's "vicinity")
        coordinate: Facility location
        place_id: Provider place identifier, when published
    """
    name: str
    address: str
    coordinate: Coordinate
    place_id: str | None = None


class SkipReason(Enum):
    """Why a single feed entry was dropped."""
    MISSING_FIELD = "missing_field"
    INVALID_TYPE = "invalid_type"
    OUT_OF_RANGE = "out_of_range"


@dataclass(frozen=True)
class SkippedRecord:
    """A dropped feed entry.

    Attributes:
        index: Position of the entry in the feed array
        reason: Why it was dropped
        field: The offending field, if known
    """
    index: int
    reason: SkipReason
    field: str | None = None


T = TypeVar("T")


@dataclass(frozen=True)
class ParseOutcome(Generic[T]):
    """Result of parsing one feed entry: a record or a skip reason."""
    record: T | None = None
    skip_reason: SkipReason | None = None
    field: str | None = None

    @property
    def ok(self) -> bool:
        return self.record is not None


@dataclass(frozen=True)
class FeedResult(Generic[T]):
    """Validated records from one fetch.

    Attributes:
        records: Records that parsed, in feed order
        skipped: Entries dropped by the per-record filter
    """
    records: tuple[T, ...] = ()
    skipped: tuple[SkippedRecord, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.records)


class _Skip(Exception):
    def __init__(self, reason: SkipReason, field_name: str) -> None:
        super().__init__(field_name)
        self.reason = reason
        self.field_name = field_name


def _require_str(data: dict[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        raise _Skip(SkipReason.MISSING_FIELD, key)
    if not isinstance(value, str):
        raise _Skip(SkipReason.INVALID_TYPE, key)
    return value


def _require_number(data: dict[str, Any], key: str) -> float:
    value = data.get(key)
    if value is None:
        raise _Skip(SkipReason.MISSING_FIELD, key)
    # bool is an int subclass; JSON true is not a coordinate
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise _Skip(SkipReason.INVALID_TYPE, key)
    try:
        return float(value)
    except OverflowError:
        raise _Skip(SkipReason.OUT_OF_RANGE, key) from None


def _require_object(data: dict[str, Any], key: str) -> dict[str, Any]:
    value = data.get(key)
    if value is None:
        raise _Skip(SkipReason.MISSING_FIELD, key)
    if not isinstance(value, dict):
        raise _Skip(SkipReason.INVALID_TYPE, key)
    return value


def _optional_int(value: Any) -> int | None:
    """Parse an optional integer that feeds publish as number or string."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return None


def _make_coordinate(latitude: float, longitude: float, field_name: str) -> Coordinate:
    coordinate = Coordinate(latitude=latitude, longitude=longitude)
    if not coordinate.is_valid:
        raise _Skip(SkipReason.OUT_OF_RANGE, field_name)
    return coordinate


def derive_hazard_id(name: str, classification: str) -> str:
    """Build a deterministic identifier for a storm without a feed id.

    Pure function.
    """
    slug = re.sub(r"[^a-z0-9]+", "-", f"{classification} {name}".lower()).strip("-")
    return slug or "storm"


def parse_hazard(entry: Any) -> ParseOutcome[HazardRecord]:
    """Parse a single storm feed entry.

    Pure function: takes a raw dict, returns a ParseOutcome holding either a
    HazardRecord or the reason the entry was dropped.

    Args:
        entry: One element of the storm feed's "activeStorms" array

    Returns:
        ParseOutcome with a record or skip reason
    """
    if not isinstance(entry, dict):
        return ParseOutcome(skip_reason=SkipReason.INVALID_TYPE)

    try:
        name = _require_str(entry, "name")
        classification = _require_str(entry, "classification")
        latitude = _require_number(entry, "latitudeNumeric")
        longitude = _require_number(entry, "longitudeNumeric")
        coordinate = _make_coordinate(latitude, longitude, "latitudeNumeric")
    except _Skip as skip:
        return ParseOutcome(skip_reason=skip.reason, field=skip.field_name)

    feed_id = entry.get("id")
    if not isinstance(feed_id, str) or not feed_id:
        feed_id = derive_hazard_id(name, classification)

    return ParseOutcome(record=HazardRecord(
        id=feed_id,
        name=name,
        classification=classification,
        coordinate=coordinate,
        intensity_knots=_optional_int(entry.get("intensity")),
        pressure_mb=_optional_int(entry.get("pressure")),
    ))


def parse_facility(entry: Any) -> ParseOutcome[FacilityRecord]:
    """Parse a single place search result.

    Pure function.

    Args:
        entry: One element of the facility feed's "results" array

    Returns:
        ParseOutcome with a record or skip reason
    """
    if not isinstance(entry, dict):
        return ParseOutcome(skip_reason=SkipReason.INVALID_TYPE)

    try:
        name = _require_str(entry, "name")
        vicinity = _require_str(entry, "vicinity")
        geometry = _require_object(entry, "geometry")
        location = _require_object(geometry, "location")
        latitude = _require_number(location, "lat")
        longitude = _require_number(location, "lng")
        coordinate = _make_coordinate(latitude, longitude, "geometry.location")
    except _Skip as skip:
        return ParseOutcome(skip_reason=skip.reason, field=skip.field_name)

    place_id = entry.get("place_id")
    return ParseOutcome(record=FacilityRecord(
        name=name,
        address=vicinity,
        coordinate=coordinate,
        place_id=place_id if isinstance(place_id, str) else None,
    ))


def _records_array(payload: Any, key: str) -> list[Any]:
    if not isinstance(payload, dict):
        raise MalformedResponseError(
            f"Expected a JSON object, got {type(payload).__name__}"
        )
    entries = payload.get(key)
    if not isinstance(entries, list):
        raise MalformedResponseError(f"Response has no '{key}' array")
    return entries


def _collect(entries: list[Any], parse) -> FeedResult:
    records = []
    skipped = []

    for index, entry in enumerate(entries):
        outcome = parse(entry)
        if outcome.ok:
            records.append(outcome.record)
        else:
            logger.debug(
                "Skipping feed entry %d: %s (%s)",
                index,
                outcome.skip_reason.value,
                outcome.field,
            )
            skipped.append(SkippedRecord(
                index=index,
                reason=outcome.skip_reason,
                field=outcome.field,
            ))

    return FeedResult(records=tuple(records), skipped=tuple(skipped))


def parse_hazard_feed(payload: Any) -> FeedResult[HazardRecord]:
    """Parse a decoded storm feed into hazard records.

    Pure function: malformed entries are filtered out, feed order is kept.

    Args:
        payload: Decoded JSON body of the storm feed

    Returns:
        FeedResult with the valid hazards

    Raises:
        MalformedResponseError: If the top-level shape does not match
    """
    return _collect(_records_array(payload, HAZARD_RECORDS_KEY), parse_hazard)


def parse_facility_feed(payload: Any) -> FeedResult[FacilityRecord]:
    """Parse a decoded place search response into facility records.

    Pure function.

    Raises:
        MalformedResponseError: If the top-level shape does not match
    """
    return _collect(_records_array(payload, FACILITY_RECORDS_KEY), parse_facility)
