"""
Configuration Module

Provides environment-driven settings for the agent cache.
"""

from agentcache.config.settings import Settings, get_settings, reset_settings

__all__ = [
    "Settings",
    "get_settings",
    "reset_settings",
]
