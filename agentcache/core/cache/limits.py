"""
Cache bound normalization.

A bound is either a non-negative count or ``None`` (unbounded).
"""

import math
from dataclasses import dataclass
from numbers import Real
from typing import Any


def normalize_limit(value: Any) -> int | None:
    """
    Normalize a user supplied bound.

    Args:
        value: Raw bound (any type)

    Returns:
        ``None`` for unbounded, otherwise the bound as a count.

    Positive values are floored to a count, zero means "retain nothing",
    and negative, non-finite or non-numeric values mean unbounded.
    """
    if isinstance(value, bool) or not isinstance(value, Real):
        return None
    number = float(value)
    if not math.isfinite(number) or number < 0:
        return None
    return math.floor(number)


def normalize_timeout(value: Any) -> float | None:
    """Normalize an initializer timeout; anything but a positive finite number disables it."""
    if isinstance(value, bool) or not isinstance(value, Real):
        return None
    number = float(value)
    if not math.isfinite(number) or number <= 0:
        return None
    return number


@dataclass
class CacheLimits:
    """Effective cache bounds (``None`` = unbounded)."""

    max_cached_agents: int | None = None
    max_cached_agents_per_user: int | None = None
    init_timeout_seconds: float | None = None

    def global_exceeded(self, size: int) -> bool:
        """Check if the global index is over its bound."""
        return self.max_cached_agents is not None and size > self.max_cached_agents

    def user_exceeded(self, size: int) -> bool:
        """Check if one user's index is over its bound."""
        return self.max_cached_agents_per_user is not None and size > self.max_cached_agents_per_user

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "max_cached_agents": self.max_cached_agents,
            "max_cached_agents_per_user": self.max_cached_agents_per_user,
            "init_timeout_seconds": self.init_timeout_seconds,
        }
