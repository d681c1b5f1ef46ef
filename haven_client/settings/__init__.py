"""Application settings loading."""

from .app import HavenSettings, get_settings


__all__ = ["HavenSettings", "get_settings"]
