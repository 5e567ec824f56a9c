"""Configuration models - Pure data structures.

These are domain models for configuration. The actual loading
(I/O) is handled by the shell layer.
"""

from dataclasses import dataclass, field

from stormhaven.core.ranking import FACILITY_RESULT_LIMIT


STORM_FEED_URL = "https://www.nhc.noaa.gov/CurrentStorms.json"
PLACES_NEARBY_URL = "https://maps.googleapis.com/maps/api/place/nearbysearch/json"

DEFAULT_FACILITY_KEYWORD = "red cross"
DEFAULT_FACILITY_RADIUS_METERS = 50_000
DEFAULT_REQUEST_TIMEOUT_SECONDS = 15

# Google Places rejects radii above this
MAX_FACILITY_RADIUS_METERS = 50_000

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


@dataclass
class Config:
    """Application configuration.

    This is a pure data structure - no I/O or side effects.

    Attributes:
        storm_feed_url: Active storm feed endpoint
        places_url: Nearby place search endpoint
        places_api_key: Credential for the place search (None if not configured)
        request_timeout_seconds: Per-request timeout for feed fetches
        facility_radius_meters: Search radius around the user
        facility_limit: How many facilities to surface
        facility_keyword: Default search keyword
        log_level: Python logging level name
    """
    storm_feed_url: str = STORM_FEED_URL
    places_url: str = PLACES_NEARBY_URL
    places_api_key: str | None = None
    request_timeout_seconds: float = DEFAULT_REQUEST_TIMEOUT_SECONDS
    facility_radius_meters: int = DEFAULT_FACILITY_RADIUS_METERS
    facility_limit: int = FACILITY_RESULT_LIMIT
    facility_keyword: str = DEFAULT_FACILITY_KEYWORD
    log_level: str = "INFO"

    @property
    def has_places_credential(self) -> bool:
        """True if a usable place search key is configured."""
        key = self.places_api_key
        return bool(key) and not key.startswith("${")


@dataclass
class ValidationError:
    """A configuration validation error.

    Attributes:
        field: The field that has an error
        message: Human-readable error description
        severity: 'error' or 'warning'
    """
    field: str
    message: str
    severity: str = "error"


@dataclass
class ValidationResult:
    """Result of validating configuration.

    Attributes:
        valid: True if no errors (warnings are OK)
        errors: List of validation errors/warnings
    """
    valid: bool
    errors: list[ValidationError] = field(default_factory=list)

    @property
    def warnings(self) -> list[ValidationError]:
        """Get only warnings."""
        return [e for e in self.errors if e.severity == "warning"]

    @property
    def critical_errors(self) -> list[ValidationError]:
        """Get only critical errors."""
        return [e for e in self.errors if e.severity == "error"]


def _validate_url(url: str, field_name: str) -> list[ValidationError]:
    if not url.startswith(("https://", "http://")):
        return [ValidationError(
            field=field_name,
            message=f"Expected an http(s) URL, got '{url}'",
        )]
    return []


def validate_config(config: Config) -> ValidationResult:
    """Validate configuration for errors and warnings.

    Pure function.

    Args:
        config: Configuration to validate

    Returns:
        ValidationResult with any errors/warnings found
    """
    errors: list[ValidationError] = []

    errors.extend(_validate_url(config.storm_feed_url, "storm_feed_url"))
    errors.extend(_validate_url(config.places_url, "places_url"))

    if config.request_timeout_seconds <= 0:
        errors.append(ValidationError(
            field="request_timeout_seconds",
            message=f"Timeout must be positive, got {config.request_timeout_seconds}",
        ))

    if not 0 < config.facility_radius_meters <= MAX_FACILITY_RADIUS_METERS:
        errors.append(ValidationError(
            field="facility_radius_meters",
            message=(
                f"Radius must be in (0, {MAX_FACILITY_RADIUS_METERS}], "
                f"got {config.facility_radius_meters}"
            ),
        ))

    if config.facility_limit < 1:
        errors.append(ValidationError(
            field="facility_limit",
            message=f"Facility limit must be at least 1, got {config.facility_limit}",
        ))

    if not config.facility_keyword.strip():
        errors.append(ValidationError(
            field="facility_keyword",
            message="Facility keyword must not be empty",
        ))

    if config.log_level.upper() not in LOG_LEVELS:
        errors.append(ValidationError(
            field="log_level",
            message=f"log_level must be one of {list(LOG_LEVELS)}",
        ))

    # Facility search is unavailable without a key, but storms still work
    if not config.has_places_credential:
        errors.append(ValidationError(
            field="places_api_key",
            message="Place search API key not configured; facility search disabled",
            severity="warning",
        ))

    has_critical = any(e.severity == "error" for e in errors)

    return ValidationResult(
        valid=not has_critical,
        errors=errors,
    )
