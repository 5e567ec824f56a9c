"""Advisory Engine - Wires Functional Core and Imperative Shell.

This module coordinates the flow of data between the pure functional core
and the feed client. It is the single entry point the presentation layer
calls: one operation per screen, each returning a plain value.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Callable

from stormhaven.core.config import Config
from stormhaven.core.errors import (
    FeedError,
    LocationUnavailableError,
    MissingCredentialError,
)
from stormhaven.core.geo import Coordinate
from stormhaven.core.ranking import rank
from stormhaven.core.result import AdvisoryResult, Failure, PartialFailure, Success
from stormhaven.core.rules import recommend
from stormhaven.core.storm import FeedResult
from stormhaven.shell.feed_client import FeedClient


logger = logging.getLogger(__name__)


# Last-known-good slots, one per kind of query
HAZARDS = "hazards"
FACILITIES = "facilities"
SITUATION = "situation"
MODES = (HAZARDS, FACILITIES, SITUATION)


class AdvisoryEngine:
    """Hazard proximity advisory facade.

    Owns the last-known-good result cache, one slot per mode so a storm
    query never answers with facilities. Only successful fetches write a
    slot; writes are serialised by a lock and replace the whole value, so a
    concurrent reader sees either the previous or the new result.
    """

    def __init__(
        self,
        config: Config | None = None,
        feed_client: FeedClient | None = None,
    ) -> None:
        """Initialize engine with configuration.

        Args:
            config: Application configuration (defaults if not provided)
            feed_client: Feed client (created from config if not provided)
        """
        self.config = config or Config()
        self.feed_client = feed_client or FeedClient(
            storm_feed_url=self.config.storm_feed_url,
            places_url=self.config.places_url,
            places_api_key=self.config.places_api_key if self.config.has_places_credential else None,
            timeout=self.config.request_timeout_seconds,
        )
        self._cache_lock = threading.Lock()
        self._last_results: dict[str, Success] = {}

    def last_result(self, mode: str = HAZARDS) -> Success | None:
        """The most recent successful result for a mode, or None."""
        if mode not in MODES:
            raise ValueError(f"Unknown mode '{mode}', expected one of {list(MODES)}")
        with self._cache_lock:
            return self._last_results.get(mode)

    def _store(self, mode: str, result: Success, cancel: threading.Event | None) -> None:
        """Overwrite one cache slot unless the caller has gone away."""
        if cancel is not None and cancel.is_set():
            logger.debug("Caller cancelled; not caching %s result", mode)
            return
        with self._cache_lock:
            self._last_results[mode] = result

    def get_last_known(self, mode: str = HAZARDS) -> AdvisoryResult:
        """Answer a query issued before the user's location is known.

        Returns:
            The cached Success for this mode, or Failure(LocationUnavailableError)
        """
        cached = self.last_result(mode)
        if cached is not None:
            logger.info("Location unavailable; serving last known %s", mode)
            return cached
        return Failure(LocationUnavailableError())

    def _fetch_ranked(
        self,
        fetch: Callable[[], FeedResult],
        origin: Coordinate,
        limit: int | None,
        label: str,
    ) -> AdvisoryResult:
        try:
            feed = fetch()
        except FeedError as e:
            logger.error("Failed to fetch %s: %s", label, e)
            return Failure(e)

        ranked = rank(feed.records, origin, limit=limit)
        logger.info("Ranked %d %s", len(ranked), label)
        return Success(entries=tuple(ranked))

    def _require_places_credential(self) -> None:
        if not self.feed_client.has_places_credential:
            raise MissingCredentialError(
                "Facility search requires a place search API key; "
                "set PLACES_API_KEY or facilities.api_key"
            )

    def get_supply_advisory(self, distance_miles: float, category: int) -> list[str]:
        """Recommended actions and supplies for a storm.

        Synchronous, no I/O. An invalid category yields a single message.
        """
        return recommend(category, distance_miles)

    def get_hazard_proximity(
        self,
        origin: Coordinate | None,
        cancel: threading.Event | None = None,
    ) -> AdvisoryResult:
        """Active storms ranked by distance from the user.

        Args:
            origin: The user's location, None if not known yet
            cancel: Set by the caller to abandon the request

        Returns:
            Success with every storm (possibly none), or Failure
        """
        if origin is None:
            return self.get_last_known(HAZARDS)

        result = self._fetch_ranked(
            self.feed_client.fetch_hazards,
            origin,
            limit=None,
            label="storms",
        )
        if isinstance(result, Success):
            self._store(HAZARDS, result, cancel)
        return result

    def get_nearest_facilities(
        self,
        origin: Coordinate | None,
        keyword: str | None = None,
        cancel: threading.Event | None = None,
    ) -> AdvisoryResult:
        """Closest relief facilities matching a keyword.

        Args:
            origin: The user's location, None if not known yet
            keyword: Search keyword (configured default if omitted)
            cancel: Set by the caller to abandon the request

        Returns:
            Success with at most the configured number of facilities, or Failure

        Raises:
            MissingCredentialError: If no place search key is configured
        """
        if origin is None:
            return self.get_last_known(FACILITIES)

        self._require_places_credential()

        result = self._fetch_ranked(
            lambda: self.feed_client.fetch_facilities(
                origin,
                self.config.facility_radius_meters,
                keyword or self.config.facility_keyword,
            ),
            origin,
            limit=self.config.facility_limit,
            label="facilities",
        )
        if isinstance(result, Success):
            self._store(FACILITIES, result, cancel)
        return result

    def get_situation_report(
        self,
        origin: Coordinate | None,
        keyword: str | None = None,
        cancel: threading.Event | None = None,
    ) -> AdvisoryResult:
        """Storms and nearest facilities in one result.

        Both feeds are fetched concurrently. Entries are the ranked storms
        followed by the nearest facilities.

        Returns:
            Success if both feeds answered, PartialFailure if one did,
            Failure if neither did
        """
        if origin is None:
            return self.get_last_known(SITUATION)

        self._require_places_credential()

        with ThreadPoolExecutor(max_workers=2) as pool:
            hazards_future = pool.submit(
                self._fetch_ranked,
                self.feed_client.fetch_hazards,
                origin,
                None,
                "storms",
            )
            facilities_future = pool.submit(
                self._fetch_ranked,
                lambda: self.feed_client.fetch_facilities(
                    origin,
                    self.config.facility_radius_meters,
                    keyword or self.config.facility_keyword,
                ),
                origin,
                self.config.facility_limit,
                "facilities",
            )
            parts = [hazards_future.result(), facilities_future.result()]

        entries = tuple(e for part in parts for e in part.entries)
        errors = tuple(part.error for part in parts if isinstance(part, Failure))

        if not errors:
            result = Success(entries=entries)
            self._store(SITUATION, result, cancel)
            return result

        if len(errors) == len(parts):
            return Failure(errors[0])

        logger.warning("Situation report incomplete: %s", "; ".join(str(e) for e in errors))
        return PartialFailure(entries=entries, errors=errors)
