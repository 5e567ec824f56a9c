"""Tests for the advisory engine.

Uses mocks for the feed client to test orchestration logic.
"""

import threading
from unittest.mock import Mock

import pytest
import responses

from stormhaven.core.config import STORM_FEED_URL, Config
from stormhaven.core.errors import (
    EmptyResponseError,
    LocationUnavailableError,
    MalformedResponseError,
    MissingCredentialError,
    NetworkError,
)
from stormhaven.core.geo import Coordinate, distance
from stormhaven.core.result import Failure, PartialFailure, Success
from stormhaven.core.storm import FacilityRecord, FeedResult, HazardRecord
from stormhaven.engine import FACILITIES, HAZARDS, SITUATION, AdvisoryEngine
from stormhaven.shell.feed_client import FeedClient


ORIGIN = Coordinate(25.0, -80.0)

ERNESTO = HazardRecord(
    id="al052024",
    name="Ernesto",
    classification="HU",
    coordinate=Coordinate(26.0, -81.0),
)

FRANCINE = HazardRecord(
    id="al062024",
    name="Francine",
    classification="TS",
    coordinate=Coordinate(29.0, -90.0),
)


def make_facility(name: str, lat: float, lng: float) -> FacilityRecord:
    return FacilityRecord(name=name, address=f"{name} address", coordinate=Coordinate(lat, lng))


def make_feed_client(hazards=(), facilities=(), has_key=True) -> Mock:
    client = Mock()
    client.has_places_credential = has_key
    client.fetch_hazards.return_value = FeedResult(records=tuple(hazards))
    client.fetch_facilities.return_value = FeedResult(records=tuple(facilities))
    return client


@pytest.fixture
def config():
    return Config(places_api_key="test-key")


class TestEngineInit:
    def test_builds_feed_client_from_config(self):
        engine = AdvisoryEngine(Config(places_api_key="k", request_timeout_seconds=3))

        assert engine.feed_client.places_api_key == "k"
        assert engine.feed_client.timeout == 3

    def test_placeholder_key_is_not_passed_on(self):
        engine = AdvisoryEngine(Config(places_api_key="${PLACES_API_KEY}"))
        assert engine.feed_client.has_places_credential is False

    def test_starts_with_empty_cache(self):
        assert AdvisoryEngine(feed_client=make_feed_client()).last_result() is None


class TestGetSupplyAdvisory:
    def test_delegates_to_rules(self):
        engine = AdvisoryEngine(feed_client=make_feed_client())
        assert engine.get_supply_advisory(10, 5)[0] == "Immediate evacuation required"

    def test_invalid_category(self):
        engine = AdvisoryEngine(feed_client=make_feed_client())
        assert engine.get_supply_advisory(10, 6) == [
            "Invalid category, please check the hurricane details."
        ]

    def test_no_feed_access(self):
        client = make_feed_client()
        AdvisoryEngine(feed_client=client).get_supply_advisory(10, 3)

        client.fetch_hazards.assert_not_called()
        client.fetch_facilities.assert_not_called()


class TestGetHazardProximity:
    """Tests for AdvisoryEngine.get_hazard_proximity()."""

    def test_single_storm_end_to_end(self):
        engine = AdvisoryEngine(feed_client=make_feed_client(hazards=[ERNESTO]))

        result = engine.get_hazard_proximity(ORIGIN)

        assert isinstance(result, Success)
        assert len(result.entries) == 1
        entry = result.entries[0]
        assert entry.record.status == "Hurricane"
        assert entry.distance_km == distance(ORIGIN, ERNESTO.coordinate)

    @responses.activate
    def test_oversized_coordinate_drops_one_storm(self):
        """A value too large for a float skips that storm, the rest still rank."""
        responses.add(
            responses.GET,
            STORM_FEED_URL,
            json={"activeStorms": [
                {"name": "Ernesto", "classification": "HU", "latitudeNumeric": 26.0, "longitudeNumeric": -81.0},
                {"name": "Bogus", "classification": "TS", "latitudeNumeric": 10 ** 400, "longitudeNumeric": -81.0},
            ]},
            status=200,
        )
        engine = AdvisoryEngine(feed_client=FeedClient())

        result = engine.get_hazard_proximity(ORIGIN)

        assert isinstance(result, Success)
        assert [e.record.name for e in result.entries] == ["Ernesto"]

    def test_storms_sorted_by_distance(self):
        engine = AdvisoryEngine(feed_client=make_feed_client(hazards=[FRANCINE, ERNESTO]))

        result = engine.get_hazard_proximity(ORIGIN)

        assert [e.record.name for e in result.entries] == ["Ernesto", "Francine"]

    def test_no_active_storms_is_success(self):
        engine = AdvisoryEngine(feed_client=make_feed_client())

        result = engine.get_hazard_proximity(ORIGIN)

        assert isinstance(result, Success)
        assert result.entries == ()

    @pytest.mark.parametrize("error", [
        NetworkError("connection refused"),
        EmptyResponseError("HTTP 500"),
        MalformedResponseError("not json"),
    ])
    def test_feed_error_becomes_failure(self, error):
        client = make_feed_client()
        client.fetch_hazards.side_effect = error
        engine = AdvisoryEngine(feed_client=client)

        result = engine.get_hazard_proximity(ORIGIN)

        assert isinstance(result, Failure)
        assert result.error is error

    def test_success_is_cached(self):
        engine = AdvisoryEngine(feed_client=make_feed_client(hazards=[ERNESTO]))

        result = engine.get_hazard_proximity(ORIGIN)

        assert engine.last_result() is result

    def test_failure_does_not_overwrite_cache(self):
        client = make_feed_client(hazards=[ERNESTO])
        engine = AdvisoryEngine(feed_client=client)
        first = engine.get_hazard_proximity(ORIGIN)

        client.fetch_hazards.side_effect = NetworkError("down")
        engine.get_hazard_proximity(ORIGIN)

        assert engine.last_result() is first

    def test_newer_success_overwrites_cache(self):
        client = make_feed_client(hazards=[ERNESTO])
        engine = AdvisoryEngine(feed_client=client)
        engine.get_hazard_proximity(ORIGIN)

        client.fetch_hazards.return_value = FeedResult(records=(FRANCINE,))
        second = engine.get_hazard_proximity(ORIGIN)

        assert engine.last_result() is second
        assert engine.last_result().entries[0].record.name == "Francine"

    def test_cancelled_request_does_not_write_cache(self):
        engine = AdvisoryEngine(feed_client=make_feed_client(hazards=[ERNESTO]))
        cancel = threading.Event()
        cancel.set()

        result = engine.get_hazard_proximity(ORIGIN, cancel=cancel)

        assert isinstance(result, Success)
        assert engine.last_result() is None


class TestUnknownLocation:
    """Queries issued before the location is known."""

    def test_no_cache_is_location_failure(self):
        client = make_feed_client(hazards=[ERNESTO])
        engine = AdvisoryEngine(feed_client=client)

        result = engine.get_hazard_proximity(None)

        assert isinstance(result, Failure)
        assert isinstance(result.error, LocationUnavailableError)
        client.fetch_hazards.assert_not_called()

    def test_serves_cached_result(self):
        engine = AdvisoryEngine(feed_client=make_feed_client(hazards=[ERNESTO]))
        cached = engine.get_hazard_proximity(ORIGIN)

        assert engine.get_hazard_proximity(None) is cached

    def test_storm_query_never_answers_with_facilities(self, config):
        """A cached facility search does not leak into the storm slot."""
        client = make_feed_client(facilities=[make_facility("Shelter", 25.1, -80.0)])
        engine = AdvisoryEngine(config, client)
        facilities = engine.get_nearest_facilities(ORIGIN)

        hazards = engine.get_hazard_proximity(None)

        assert isinstance(hazards, Failure)
        assert isinstance(hazards.error, LocationUnavailableError)
        assert engine.get_nearest_facilities(None) is facilities

    def test_each_mode_keeps_its_own_slot(self, config):
        shelter = make_facility("Shelter", 25.1, -80.0)
        engine = AdvisoryEngine(config, make_feed_client(hazards=[ERNESTO], facilities=[shelter]))

        storms = engine.get_hazard_proximity(ORIGIN)
        facilities = engine.get_nearest_facilities(ORIGIN)
        report = engine.get_situation_report(ORIGIN)

        assert engine.get_hazard_proximity(None) is storms
        assert all(isinstance(e.record, HazardRecord) for e in storms.entries)
        assert engine.get_nearest_facilities(None) is facilities
        assert engine.get_situation_report(None) is report

    def test_get_last_known_by_mode(self, config):
        engine = AdvisoryEngine(config, make_feed_client(hazards=[ERNESTO]))
        storms = engine.get_hazard_proximity(ORIGIN)

        assert engine.get_last_known(HAZARDS) is storms
        assert isinstance(engine.get_last_known(FACILITIES), Failure)
        assert isinstance(engine.get_last_known(SITUATION), Failure)

    def test_unknown_mode(self):
        engine = AdvisoryEngine(feed_client=make_feed_client())

        with pytest.raises(ValueError):
            engine.last_result("weather")


class TestGetNearestFacilities:
    """Tests for AdvisoryEngine.get_nearest_facilities()."""

    def test_returns_three_closest(self, config):
        facilities = [make_facility(f"F{i}", 25.0 + i / 10, -80.0) for i in range(10, 0, -1)]
        engine = AdvisoryEngine(config, make_feed_client(facilities=facilities))

        result = engine.get_nearest_facilities(ORIGIN)

        assert isinstance(result, Success)
        assert [e.record.name for e in result.entries] == ["F1", "F2", "F3"]

    def test_uses_configured_search(self, config):
        client = make_feed_client()
        AdvisoryEngine(config, client).get_nearest_facilities(ORIGIN)

        client.fetch_facilities.assert_called_once_with(ORIGIN, 50_000, "red cross")

    def test_keyword_override(self, config):
        client = make_feed_client()
        AdvisoryEngine(config, client).get_nearest_facilities(ORIGIN, keyword="shelter")

        assert client.fetch_facilities.call_args[0][2] == "shelter"

    def test_missing_credential_raises(self):
        client = make_feed_client(has_key=False)
        engine = AdvisoryEngine(feed_client=client)

        with pytest.raises(MissingCredentialError):
            engine.get_nearest_facilities(ORIGIN)

        client.fetch_facilities.assert_not_called()

    def test_feed_error_becomes_failure(self, config):
        client = make_feed_client()
        client.fetch_facilities.side_effect = EmptyResponseError("HTTP 403")

        result = AdvisoryEngine(config, client).get_nearest_facilities(ORIGIN)

        assert isinstance(result, Failure)


class TestGetSituationReport:
    """Tests for AdvisoryEngine.get_situation_report()."""

    def test_both_feeds_succeed(self, config):
        shelter = make_facility("Shelter", 25.1, -80.0)
        client = make_feed_client(hazards=[ERNESTO], facilities=[shelter])
        engine = AdvisoryEngine(config, client)

        result = engine.get_situation_report(ORIGIN)

        assert isinstance(result, Success)
        assert [e.record.name for e in result.entries] == ["Ernesto", "Shelter"]
        assert engine.last_result(SITUATION) is result

    def test_one_feed_fails(self, config):
        client = make_feed_client(hazards=[ERNESTO])
        error = NetworkError("places down")
        client.fetch_facilities.side_effect = error
        engine = AdvisoryEngine(config, client)

        result = engine.get_situation_report(ORIGIN)

        assert isinstance(result, PartialFailure)
        assert [e.record.name for e in result.entries] == ["Ernesto"]
        assert result.errors == (error,)
        assert engine.last_result(SITUATION) is None

    def test_both_feeds_fail(self, config):
        client = make_feed_client()
        client.fetch_hazards.side_effect = NetworkError("storms down")
        client.fetch_facilities.side_effect = EmptyResponseError("places down")

        result = AdvisoryEngine(config, client).get_situation_report(ORIGIN)

        assert isinstance(result, Failure)
        assert isinstance(result.error, NetworkError)

    def test_missing_credential_raises(self):
        engine = AdvisoryEngine(feed_client=make_feed_client(has_key=False))

        with pytest.raises(MissingCredentialError):
            engine.get_situation_report(ORIGIN)
