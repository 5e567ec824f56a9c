"""Error taxonomy for feed fetching and advisory evaluation.

Feed errors are the only failures the feed client surfaces; lower-level
causes (socket errors, JSON decode errors) are re-expressed as one of them.
"""


class StormHavenError(Exception):
    """Base class for all engine errors."""

    #: Short machine-readable kind, used in serialized results.
    kind = "error"


class FeedError(StormHavenError):
    """A feed could not be fetched or understood."""

    kind = "feed_error"


class NetworkError(FeedError):
    """Transport failure: DNS, connection refused, timeout."""

    kind = "network_error"


class EmptyResponseError(FeedError):
    """The feed answered with a non-success status or an empty body."""

    kind = "empty_response"


class MalformedResponseError(FeedError):
    """The feed body is not JSON or its top-level shape is wrong."""

    kind = "malformed_response"


class InvalidCategoryError(StormHavenError):
    """Supply advisory requested for a category outside 1-5.

    Never raised by the rules module; its message is returned instead.
    """

    kind = "invalid_category"
    message = "Invalid category, please check the hurricane details."

    def __init__(self, category: object = None) -> None:
        super().__init__(self.message)
        self.category = category


class LocationUnavailableError(StormHavenError):
    """The user's location is not known yet and nothing is cached."""

    kind = "location_unavailable"

    def __init__(self, message: str = "Unable to retrieve location") -> None:
        super().__init__(message)


class MissingCredentialError(StormHavenError):
    """A feed needs an API credential that was not configured."""

    kind = "missing_credential"


class ConfigError(StormHavenError):
    """Configuration could not be loaded or failed validation."""

    kind = "config_error"
