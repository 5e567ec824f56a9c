"""Functional Core - Pure functions with no side effects.

This module contains all business logic as pure functions:
- Great-circle distance
- Storm and facility feed parsing
- Proximity ranking
- Supply advisory rules
- Display formatting

All functions here are deterministic and have no I/O.
"""

from stormhaven.core.geo import Coordinate, calculate_distance, distance, km_to_miles
from stormhaven.core.storm import (
    FacilityRecord,
    FeedResult,
    HazardRecord,
    get_readable_status,
    parse_facility_feed,
    parse_hazard_feed,
)
from stormhaven.core.ranking import RankedEntry, rank
from stormhaven.core.rules import SupplyContext, evaluate, recommend
from stormhaven.core.result import AdvisoryResult, Failure, PartialFailure, Success
from stormhaven.core.formatter import format_failure_message, result_to_dict

__all__ = [
    # Geo
    "Coordinate",
    "calculate_distance",
    "distance",
    "km_to_miles",
    # Feeds
    "FacilityRecord",
    "FeedResult",
    "HazardRecord",
    "get_readable_status",
    "parse_facility_feed",
    "parse_hazard_feed",
    # Ranking
    "RankedEntry",
    "rank",
    # Rules
    "SupplyContext",
    "evaluate",
    "recommend",
    # Results
    "AdvisoryResult",
    "Failure",
    "PartialFailure",
    "Success",
    # Formatter
    "format_failure_message",
    "result_to_dict",
]
