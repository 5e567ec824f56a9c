"""Imperative Shell - I/O and side effects.

This module contains all code that interacts with external systems:
- Storm and place search feeds (HTTP)
- Secret Manager (credentials)
- Configuration loading (environment/files)

Keep this layer thin and simple. All business logic should be in core.
"""

from stormhaven.shell.feed_client import FeedClient
from stormhaven.shell.config_loader import load_config, load_config_from_env

__all__ = [
    "FeedClient",
    "load_config",
    "load_config_from_env",
]
