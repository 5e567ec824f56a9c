"""StormHaven hazard proximity advisory engine."""

# Bump this when you tag releases; used by the CLI and the User-Agent header.
__version__ = "0.1.0"

__all__ = ["__version__"]
