"""
Module: config
Description: Relay configuration loaded with pydantic-settings.
"""

from .settings import Settings, settings

__all__ = ["Settings", "settings"]
