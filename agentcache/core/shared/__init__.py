"""
Shared utilities module

Domain-agnostic helpers used across the package.
"""

from .logger import (
    ColoredFormatter,
    ContextLogger,
    JSONFormatter,
    configure_logging,
    get_cache_logger,
    get_logger,
)

__all__ = [
    "ColoredFormatter",
    "ContextLogger",
    "JSONFormatter",
    "configure_logging",
    "get_cache_logger",
    "get_logger",
]
