"""Feed Client - Imperative Shell.

This module handles HTTP communication with the active storm feed and the
nearby place search. All I/O is contained here; parsing is in the core module.
"""

import logging
from typing import Any

import requests

from stormhaven import __version__
from stormhaven.core.config import (
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
    PLACES_NEARBY_URL,
    STORM_FEED_URL,
)
from stormhaven.core.errors import (
    EmptyResponseError,
    MalformedResponseError,
    NetworkError,
)
from stormhaven.core.geo import Coordinate
from stormhaven.core.storm import (
    FacilityRecord,
    FeedResult,
    HazardRecord,
    parse_facility_feed,
    parse_hazard_feed,
)


logger = logging.getLogger(__name__)


USER_AGENT = f"stormhaven/{__version__}"


class FeedClient:
    """Client for fetching storm and facility feeds.

    This is part of the imperative shell - it handles HTTP I/O. Each fetch
    issues exactly one request; retry policy belongs to the caller.
    """

    def __init__(
        self,
        storm_feed_url: str = STORM_FEED_URL,
        places_url: str = PLACES_NEARBY_URL,
        places_api_key: str | None = None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
    ) -> None:
        """Initialize feed client.

        Args:
            storm_feed_url: Active storm feed endpoint
            places_url: Nearby place search endpoint
            places_api_key: Credential for the place search
            timeout: Request timeout in seconds
            session: Optional requests session (a new one is created if omitted)
        """
        self.storm_feed_url = storm_feed_url
        self.places_url = places_url
        self.places_api_key = places_api_key
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.setdefault("User-Agent", USER_AGENT)

    @property
    def has_places_credential(self) -> bool:
        return bool(self.places_api_key)

    def _get_json(self, url: str, params: dict[str, str] | None = None) -> Any:
        """GET a JSON document, mapping every failure onto the feed taxonomy.

        This method performs HTTP I/O.

        Raises:
            NetworkError: On connection failure or timeout
            EmptyResponseError: On a non-2xx status or empty body
            MalformedResponseError: If the body is not JSON
        """
        try:
            response = self.session.get(
                url,
                params=params,
                timeout=self.timeout,
                headers={"Accept": "application/json"},
            )
        except requests.Timeout as e:
            logger.error("Request to %s timed out", url)
            raise NetworkError(f"Request timed out: {e}") from e
        except requests.RequestException as e:
            logger.error("Request to %s failed: %s", url, e)
            raise NetworkError(str(e)) from e

        if not 200 <= response.status_code < 300:
            logger.warning("GET %s -> %d", url, response.status_code)
            raise EmptyResponseError(
                f"Feed returned HTTP {response.status_code}"
            )

        if not response.content or not response.content.strip():
            logger.warning("GET %s returned an empty body", url)
            raise EmptyResponseError("Feed returned an empty body")

        try:
            return response.json()
        except ValueError as e:
            logger.error("Failed to decode JSON from %s", url)
            raise MalformedResponseError(f"Response is not valid JSON: {e}") from e

    def fetch_hazards(self) -> FeedResult[HazardRecord]:
        """Fetch and parse the active storm feed.

        This method performs HTTP I/O.

        Returns:
            FeedResult with every well-formed storm (possibly none)

        Raises:
            FeedError: NetworkError, EmptyResponseError or MalformedResponseError
        """
        logger.info("Fetching active storms from %s", self.storm_feed_url)

        payload = self._get_json(self.storm_feed_url)
        result = parse_hazard_feed(payload)

        logger.info(
            "Fetched %d storms (%d malformed entries skipped)",
            len(result.records),
            len(result.skipped),
        )
        return result

    def fetch_facilities(
        self,
        center: Coordinate,
        radius_meters: int,
        keyword: str,
    ) -> FeedResult[FacilityRecord]:
        """Search for facilities near a coordinate.

        This method performs HTTP I/O.

        Args:
            center: Search center
            radius_meters: Search radius in meters
            keyword: Free-text search keyword (e.g. "red cross")

        Returns:
            FeedResult with every well-formed facility, in feed order

        Without an API key the search is still sent; the service answers
        with a denial that has no results array (MalformedResponseError).
        Callers check has_places_credential first.

        Raises:
            FeedError: NetworkError, EmptyResponseError or MalformedResponseError
        """
        params = {
            "location": center.as_query_value(),
            "radius": str(radius_meters),
            "keyword": keyword,
        }
        if self.places_api_key:
            params["key"] = self.places_api_key

        logger.info(
            "Searching facilities for '%s' within %dm of %s",
            keyword,
            radius_meters,
            center.as_query_value(),
        )

        payload = self._get_json(self.places_url, params=params)
        result = parse_facility_feed(payload)

        logger.info(
            "Fetched %d facilities (%d malformed entries skipped)",
            len(result.records),
            len(result.skipped),
        )
        return result
