"""
Configuration package.

Exposes the cached application settings.
"""

from hostelkit.config.settings import Settings, get_settings, settings

__all__ = ["Settings", "get_settings", "settings"]
