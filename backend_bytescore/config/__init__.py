"""
Configuration management for ByteScore.

Loads settings from environment variables and .env; exposes the immutable
scoring and fetch configurations used by the engine.
"""

from backend_bytescore.config.settings import (  # noqa: F401
    FetchConfig,
    ScoringConfig,
    Settings,
    get_settings,
)

__all__ = ["FetchConfig", "ScoringConfig", "Settings", "get_settings"]
