"""Framework settings loading."""

from .app import TreeconfSettings, get_settings


__all__ = ["TreeconfSettings", "get_settings"]
