"""Command-line entry point.

Usage:
    # Supplies for a category 4 storm 75 miles away
    stormhaven supplies --category 4 --distance 75

    # Active storms ranked from Miami
    stormhaven hazards --lat 25.76 --lng -80.19

    # Three nearest Red Cross facilities (needs PLACES_API_KEY)
    stormhaven facilities --lat 25.76 --lng -80.19 --keyword "red cross"

    # Serve the HTTP API
    stormhaven serve --port 8080

Environment:
    CONFIG_PATH: Path to config file (default: config/config.yaml)
    PLACES_API_KEY: Place search credential
    LOG_LEVEL: Logging level (default: WARNING for the CLI)
"""

import argparse
import json
import logging
import os
import sys

from stormhaven import __version__
from stormhaven.core.errors import ConfigError, MissingCredentialError
from stormhaven.core.formatter import (
    format_facility_summary,
    format_failure_message,
    format_hazard_summary,
    format_supplies,
    result_to_dict,
)
from stormhaven.core.geo import Coordinate
from stormhaven.core.ranking import RankedEntry
from stormhaven.core.result import AdvisoryResult, Failure, PartialFailure
from stormhaven.core.storm import HazardRecord
from stormhaven.engine import AdvisoryEngine
from stormhaven.shell.config_loader import load_config


logger = logging.getLogger(__name__)


def _print_result(result: AdvisoryResult, as_json: bool) -> int:
    """Print a result and return the process exit code."""
    if as_json:
        print(json.dumps(result_to_dict(result), indent=2))
        return 1 if isinstance(result, Failure) else 0

    if isinstance(result, Failure):
        print(format_failure_message(result.error), file=sys.stderr)
        return 1

    if not result.entries:
        print("Nothing found.")

    for entry in result.entries:
        if isinstance(entry, RankedEntry) and isinstance(entry.record, HazardRecord):
            print(format_hazard_summary(entry))
        else:
            print(format_facility_summary(entry))

    if isinstance(result, PartialFailure):
        for error in result.errors:
            print(f"Warning: {format_failure_message(error)}", file=sys.stderr)

    return 0


def _add_location_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--lat", type=float, required=True, help="Your latitude")
    parser.add_argument("--lng", type=float, required=True, help="Your longitude")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="stormhaven",
        description="Hurricane proximity and preparedness advisories",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", type=str, default=None, help="Path to YAML config")
    parser.add_argument("--json", action="store_true", help="Print JSON instead of text")

    sub = parser.add_subparsers(dest="command", required=True)

    supplies = sub.add_parser("supplies", help="Recommended supplies for a storm")
    supplies.add_argument("--category", type=int, required=True, help="Hurricane category 1-5")
    supplies.add_argument("--distance", type=float, required=True, help="Distance in miles")

    hazards = sub.add_parser("hazards", help="Active storms ranked by distance")
    _add_location_args(hazards)

    facilities = sub.add_parser("facilities", help="Nearest relief facilities")
    _add_location_args(facilities)
    facilities.add_argument("--keyword", type=str, default=None, help="Search keyword")

    situation = sub.add_parser("situation", help="Storms and nearest facilities together")
    _add_location_args(situation)
    situation.add_argument("--keyword", type=str, default=None, help="Search keyword")

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", type=str, default="0.0.0.0")
    serve.add_argument("--port", type=int, default=int(os.environ.get("PORT", "8080")))

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, os.environ.get("LOG_LEVEL", "WARNING").upper(), logging.WARNING),
        format="%(levelname)s: %(message)s",
    )

    if args.command == "serve":
        import uvicorn

        uvicorn.run("stormhaven.api_handler:app", host=args.host, port=args.port)
        return 0

    if args.command == "supplies":
        # No feeds involved; skip configuration entirely
        recommendations = AdvisoryEngine().get_supply_advisory(args.distance, args.category)
        if args.json:
            print(json.dumps({"recommendations": recommendations}, indent=2))
        else:
            print(format_supplies(recommendations))
        return 0

    try:
        engine = AdvisoryEngine(load_config(args.config))
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    origin = Coordinate(args.lat, args.lng)
    if not origin.is_valid:
        print(f"Invalid location: {args.lat}, {args.lng}", file=sys.stderr)
        return 2

    try:
        if args.command == "hazards":
            result = engine.get_hazard_proximity(origin)
        elif args.command == "facilities":
            result = engine.get_nearest_facilities(origin, args.keyword)
        else:
            result = engine.get_situation_report(origin, args.keyword)
    except MissingCredentialError as e:
        print(str(e), file=sys.stderr)
        return 2

    return _print_result(result, args.json)


if __name__ == "__main__":
    sys.exit(main())
