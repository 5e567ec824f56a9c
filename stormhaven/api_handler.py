"""Advisory API - FastAPI service for the StormHaven app.

Serves the three engine operations to the mobile presentation layer as
JSON. Part of the imperative shell - handles HTTP I/O.
"""

import logging
import os
from typing import Any

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from stormhaven import __version__
from stormhaven.core.errors import LocationUnavailableError, MissingCredentialError
from stormhaven.core.formatter import result_to_dict
from stormhaven.core.geo import Coordinate
from stormhaven.core.result import AdvisoryResult, Failure
from stormhaven.engine import HAZARDS, MODES, AdvisoryEngine
from stormhaven.shell.config_loader import load_config


logging.basicConfig(
    level=getattr(logging, os.environ.get("LOG_LEVEL", "INFO").upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Matches one of the engine cache modes
LAST_KNOWN_MODE_PATTERN = "^(" + "|".join(MODES) + ")$"


def _allowed_origins() -> list[str]:
    """Origins from CORS_ORIGINS (comma-separated), localhost by default."""
    raw = os.environ.get("CORS_ORIGINS", "http://localhost:3000")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


class SupplyAdvisoryResponse(BaseModel):
    category: int
    distance_miles: float
    recommendations: list[str]


def _respond(result: AdvisoryResult) -> dict[str, Any]:
    """Serialize a result, turning a Failure into an HTTP error."""
    body = result_to_dict(result)
    if isinstance(result, Failure):
        status = 404 if isinstance(result.error, LocationUnavailableError) else 502
        raise HTTPException(status_code=status, detail=body)
    return body


def create_app(engine: AdvisoryEngine | None = None) -> FastAPI:
    """Build the API application.

    Args:
        engine: Engine to serve (built from configuration on first use if omitted)

    Returns:
        FastAPI application
    """
    app = FastAPI(
        title="StormHaven Advisory API",
        description="Storm proximity, relief facilities and supply advisories",
        version=__version__,
    )

    # CORS configuration
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_allowed_origins(),
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["*"],
    )

    state: dict[str, AdvisoryEngine] = {}
    if engine is not None:
        state["engine"] = engine

    def get_engine() -> AdvisoryEngine:
        if "engine" not in state:
            state["engine"] = AdvisoryEngine(load_config())
        return state["engine"]

    @app.get("/api-supplies", response_model=SupplyAdvisoryResponse)
    async def get_supplies(
        distance_miles: float = Query(ge=0),
        category: int = Query(),
    ):
        """Recommended actions and supplies for a storm category and distance."""
        return SupplyAdvisoryResponse(
            category=category,
            distance_miles=distance_miles,
            recommendations=get_engine().get_supply_advisory(distance_miles, category),
        )

    @app.get("/api-hazards")
    def get_hazards(
        lat: float = Query(ge=-90, le=90),
        lng: float = Query(ge=-180, le=180),
    ):
        """Active storms ranked by distance."""
        return _respond(get_engine().get_hazard_proximity(Coordinate(lat, lng)))

    @app.get("/api-facilities")
    def get_facilities(
        lat: float = Query(ge=-90, le=90),
        lng: float = Query(ge=-180, le=180),
        keyword: str | None = Query(default=None, min_length=1, max_length=100),
    ):
        """Nearest relief facilities."""
        try:
            result = get_engine().get_nearest_facilities(Coordinate(lat, lng), keyword)
        except MissingCredentialError as e:
            logger.error("Facility search unavailable: %s", e)
            raise HTTPException(status_code=503, detail="Facility search is not configured")
        return _respond(result)

    @app.get("/api-situation")
    def get_situation(
        lat: float = Query(ge=-90, le=90),
        lng: float = Query(ge=-180, le=180),
        keyword: str | None = Query(default=None, min_length=1, max_length=100),
    ):
        """Storms and nearest facilities together."""
        try:
            result = get_engine().get_situation_report(Coordinate(lat, lng), keyword)
        except MissingCredentialError as e:
            logger.error("Facility search unavailable: %s", e)
            raise HTTPException(status_code=503, detail="Facility search is not configured")
        return _respond(result)

    @app.get("/api-last-known")
    def get_last_known(
        mode: str = Query(default=HAZARDS, pattern=LAST_KNOWN_MODE_PATTERN),
    ):
        """The last successful result of one kind, for callers without a location yet."""
        return _respond(get_engine().get_last_known(mode))

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


app = create_app()
