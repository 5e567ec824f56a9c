"""Configuration Loader - Imperative Shell.

This module handles loading configuration from YAML files and
environment variables. All I/O is contained here.

The Config model is defined in stormhaven/core/config.py.
"""

import logging
import os
from pathlib import Path
from typing import Any, Optional

import yaml

from stormhaven.core.config import Config, validate_config
from stormhaven.core.errors import ConfigError
from stormhaven.shell.credentials import CredentialStore


logger = logging.getLogger(__name__)


DEFAULT_CONFIG_PATH = "config/config.yaml"

# Secret Manager name for the place search credential
PLACES_API_KEY_SECRET = "places-api-key"


def _get_credential_store() -> Optional[CredentialStore]:
    """Create a credential store when a GCP project is configured.

    Returns None if GCP_PROJECT is not set (e.g., local development).
    """
    project_id = os.environ.get("GCP_PROJECT")
    if project_id:
        return CredentialStore(project_id)
    return None


def _resolve_value(value: Any, credentials: Optional[CredentialStore] = None) -> Any:
    """Resolve a value that may contain secret or env var placeholders.

    Args:
        value: Value to resolve (may be a ${...} placeholder)
        credentials: Store for resolving secret placeholders

    Returns:
        Resolved value
    """
    if not isinstance(value, str):
        return value

    if credentials is not None:
        return credentials.resolve(value)

    # No credential store - only handle env vars
    if value.startswith("${") and value.endswith("}"):
        var_spec = value[2:-1]
        if not var_spec.startswith("secret:"):
            env_value = os.environ.get(var_spec)
            if env_value:
                return env_value
            logger.warning("Environment variable %s not set", var_spec)

    return value


def _check(config: Config) -> Config:
    """Log validation warnings and reject invalid configuration."""
    result = validate_config(config)

    for warning in result.warnings:
        logger.warning("Config warning: %s: %s", warning.field, warning.message)

    if not result.valid:
        details = "; ".join(f"{e.field}: {e.message}" for e in result.critical_errors)
        raise ConfigError(f"Invalid configuration: {details}")

    return config


def load_config_from_dict(data: dict[str, Any]) -> Config:
    """Load configuration from a dictionary.

    This is a pure-ish function (only placeholder expansion has side effects).

    Args:
        data: Configuration dictionary, shaped like config/config.yaml

    Returns:
        Parsed Config object

    Raises:
        ConfigError: If a value has the wrong type or fails validation
    """
    credentials = _get_credential_store()

    feeds = data.get("feeds") or {}
    facilities = data.get("facilities") or {}
    defaults = Config()

    api_key = _resolve_value(facilities.get("api_key"), credentials)

    try:
        config = Config(
            storm_feed_url=_resolve_value(feeds.get("storm_url", defaults.storm_feed_url), credentials),
            places_url=_resolve_value(feeds.get("places_url", defaults.places_url), credentials),
            places_api_key=str(api_key) if api_key else None,
            request_timeout_seconds=float(feeds.get("timeout_seconds", defaults.request_timeout_seconds)),
            facility_radius_meters=int(facilities.get("radius_meters", defaults.facility_radius_meters)),
            facility_limit=int(facilities.get("limit", defaults.facility_limit)),
            facility_keyword=str(facilities.get("keyword", defaults.facility_keyword)),
            log_level=str(data.get("log_level", defaults.log_level)).upper(),
        )
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid configuration value: {e}") from e

    return _check(config)


def load_config(config_path: str | Path | None = None) -> Config:
    """Load configuration from a YAML file.

    This method performs file I/O.

    Args:
        config_path: Path to YAML config file.
                    If None, uses CONFIG_PATH env var or default.

    Returns:
        Parsed Config object

    Raises:
        ConfigError: If the file is not valid YAML or fails validation
    """
    if config_path is None:
        config_path = os.environ.get("CONFIG_PATH", DEFAULT_CONFIG_PATH)

    path = Path(config_path)

    logger.info("Loading configuration from %s", path)

    if not path.exists():
        logger.warning("Config file not found: %s, using environment", path)
        return load_config_from_env()

    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Config file {path} is not valid YAML: {e}") from e

    if data is None:
        logger.warning("Config file is empty, using environment")
        return load_config_from_env()

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")

    config = load_config_from_dict(data)

    logger.info(
        "Loaded config: storm feed %s, facility search %s",
        config.storm_feed_url,
        "enabled" if config.has_places_credential else "disabled",
    )

    return config


def load_config_from_env() -> Config:
    """Load configuration from environment variables.

    Useful for simple deployments without a YAML file.

    Environment variables:
        STORM_FEED_URL: Active storm feed endpoint
        PLACES_URL: Nearby place search endpoint
        PLACES_API_KEY: Place search credential (or Secret Manager "places-api-key")
        REQUEST_TIMEOUT_SECONDS: Per-request timeout
        FACILITY_RADIUS_METERS: Search radius
        FACILITY_KEYWORD: Default search keyword
        LOG_LEVEL: Logging level

    Returns:
        Config object from environment

    Raises:
        ConfigError: If a value has the wrong type or fails validation
    """
    defaults = Config()

    api_key = None
    credentials = _get_credential_store()
    if credentials is not None:
        api_key = credentials.read_or_env(PLACES_API_KEY_SECRET, "PLACES_API_KEY")
    else:
        api_key = os.environ.get("PLACES_API_KEY")

    if not api_key:
        logger.warning("PLACES_API_KEY not set and no secret found")

    try:
        config = Config(
            storm_feed_url=os.environ.get("STORM_FEED_URL", defaults.storm_feed_url),
            places_url=os.environ.get("PLACES_URL", defaults.places_url),
            places_api_key=api_key or None,
            request_timeout_seconds=float(
                os.environ.get("REQUEST_TIMEOUT_SECONDS", defaults.request_timeout_seconds)
            ),
            facility_radius_meters=int(
                os.environ.get("FACILITY_RADIUS_METERS", defaults.facility_radius_meters)
            ),
            facility_keyword=os.environ.get("FACILITY_KEYWORD", defaults.facility_keyword),
            log_level=os.environ.get("LOG_LEVEL", defaults.log_level).upper(),
        )
    except ValueError as e:
        raise ConfigError(f"Invalid environment value: {e}") from e

    return _check(config)
