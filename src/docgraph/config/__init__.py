"""Configuration for docgraph."""

from functools import lru_cache

from docgraph.config.logging import configure_logging
from docgraph.config.settings import Settings


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


__all__ = ["Settings", "configure_logging", "get_settings"]
