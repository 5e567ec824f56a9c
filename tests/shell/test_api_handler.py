"""Tests for the advisory HTTP API.

Uses FastAPI's TestClient with a mocked feed client.
"""

from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient

from stormhaven.api_handler import create_app
from stormhaven.core.config import Config
from stormhaven.core.errors import NetworkError
from stormhaven.core.geo import Coordinate
from stormhaven.core.storm import FacilityRecord, FeedResult, HazardRecord
from stormhaven.engine import AdvisoryEngine


ERNESTO = HazardRecord(
    id="al052024",
    name="Ernesto",
    classification="HU",
    coordinate=Coordinate(26.0, -81.0),
)

SHELTER = FacilityRecord(
    name="American Red Cross",
    address="335 SW 27th Ave, Miami",
    coordinate=Coordinate(25.7701, -80.2392),
)


@pytest.fixture
def feed_client():
    client = Mock()
    client.has_places_credential = True
    client.fetch_hazards.return_value = FeedResult(records=(ERNESTO,))
    client.fetch_facilities.return_value = FeedResult(records=(SHELTER,))
    return client


@pytest.fixture
def engine(feed_client):
    return AdvisoryEngine(Config(places_api_key="test-key"), feed_client)


@pytest.fixture
def api(engine):
    return TestClient(create_app(engine))


class TestHealth:
    def test_health(self, api):
        response = api.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}


class TestSupplies:
    """Tests for /api-supplies."""

    def test_recommendations(self, api):
        response = api.get("/api-supplies", params={"distance_miles": 75, "category": 3})

        assert response.status_code == 200
        body = response.json()
        assert body["category"] == 3
        assert body["recommendations"][0] == "Prepare for the storm"

    def test_invalid_category_is_not_an_http_error(self, api):
        response = api.get("/api-supplies", params={"distance_miles": 10, "category": 9})

        assert response.status_code == 200
        assert response.json()["recommendations"] == [
            "Invalid category, please check the hurricane details."
        ]

    def test_negative_distance_rejected(self, api):
        response = api.get("/api-supplies", params={"distance_miles": -1, "category": 3})
        assert response.status_code == 422

    def test_missing_params(self, api):
        assert api.get("/api-supplies").status_code == 422


class TestHazards:
    """Tests for /api-hazards."""

    def test_ranked_storms(self, api):
        response = api.get("/api-hazards", params={"lat": 25.0, "lng": -80.0})

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "success"
        assert body["count"] == 1
        assert body["entries"][0]["name"] == "Ernesto"
        assert body["entries"][0]["status"] == "Hurricane"

    def test_out_of_range_location(self, api):
        response = api.get("/api-hazards", params={"lat": 95.0, "lng": -80.0})
        assert response.status_code == 422

    def test_feed_failure_is_bad_gateway(self, api, feed_client):
        feed_client.fetch_hazards.side_effect = NetworkError("connection refused")

        response = api.get("/api-hazards", params={"lat": 25.0, "lng": -80.0})

        assert response.status_code == 502
        detail = response.json()["detail"]
        assert detail["error"]["kind"] == "network_error"
        assert detail["error"]["message"] == "Error fetching data: connection refused"


class TestFacilities:
    """Tests for /api-facilities."""

    def test_nearest_facilities(self, api):
        response = api.get("/api-facilities", params={"lat": 25.76, "lng": -80.19})

        assert response.status_code == 200
        entry = response.json()["entries"][0]
        assert entry["type"] == "facility"
        assert entry["directions_url"].startswith("https://www.google.com/maps/dir/")

    def test_keyword_passed_through(self, api, feed_client):
        api.get("/api-facilities", params={"lat": 25.76, "lng": -80.19, "keyword": "shelter"})
        assert feed_client.fetch_facilities.call_args[0][2] == "shelter"

    def test_missing_credential_is_unavailable(self, api, feed_client):
        feed_client.has_places_credential = False

        response = api.get("/api-facilities", params={"lat": 25.76, "lng": -80.19})

        assert response.status_code == 503


class TestSituation:
    """Tests for /api-situation."""

    def test_combined(self, api):
        response = api.get("/api-situation", params={"lat": 25.76, "lng": -80.19})

        body = response.json()
        assert response.status_code == 200
        assert [e["type"] for e in body["entries"]] == ["hazard", "facility"]

    def test_partial_failure(self, api, feed_client):
        feed_client.fetch_facilities.side_effect = NetworkError("places down")

        response = api.get("/api-situation", params={"lat": 25.76, "lng": -80.19})

        body = response.json()
        assert response.status_code == 200
        assert body["status"] == "partial_failure"
        assert body["errors"][0]["kind"] == "network_error"


class TestLastKnown:
    """Tests for /api-last-known."""

    def test_nothing_cached(self, api):
        response = api.get("/api-last-known")

        assert response.status_code == 404
        assert response.json()["detail"]["error"]["kind"] == "location_unavailable"

    def test_serves_cached_result(self, api):
        api.get("/api-hazards", params={"lat": 25.0, "lng": -80.0})

        response = api.get("/api-last-known")

        assert response.status_code == 200
        assert response.json()["entries"][0]["name"] == "Ernesto"

    def test_facility_search_does_not_fill_storm_slot(self, api):
        api.get("/api-facilities", params={"lat": 25.76, "lng": -80.19})

        assert api.get("/api-last-known").status_code == 404

        response = api.get("/api-last-known", params={"mode": "facilities"})
        assert response.status_code == 200
        assert [e["type"] for e in response.json()["entries"]] == ["facility"]

    def test_situation_mode(self, api):
        api.get("/api-situation", params={"lat": 25.76, "lng": -80.19})

        response = api.get("/api-last-known", params={"mode": "situation"})

        assert response.status_code == 200
        assert response.json()["count"] == 2

    def test_unknown_mode(self, api):
        response = api.get("/api-last-known", params={"mode": "weather"})
        assert response.status_code == 422


class TestCors:
    def test_allowed_origin(self, api):
        response = api.get("/health", headers={"Origin": "http://localhost:3000"})
        assert response.headers["access-control-allow-origin"] == "http://localhost:3000"

    def test_origins_from_environment(self, engine, monkeypatch):
        monkeypatch.setenv("CORS_ORIGINS", "https://stormhaven.app, https://beta.stormhaven.app")
        api = TestClient(create_app(engine))

        response = api.get("/health", headers={"Origin": "https://beta.stormhaven.app"})

        assert response.headers["access-control-allow-origin"] == "https://beta.stormhaven.app"
