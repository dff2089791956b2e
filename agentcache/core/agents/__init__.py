"""
Core agents module.

Provides the base class for agents whose instances are held by the agent cache.
"""

from .base_agent import DEFAULT_AGENT_CONFIG, BaseAgent

__all__ = [
    "BaseAgent",
    "DEFAULT_AGENT_CONFIG",
]
