"""
Interfaces consumed by the agent cache.
"""

from .agent import AgentInitializer, AgentType, DisposableAgent

__all__ = [
    "AgentInitializer",
    "AgentType",
    "DisposableAgent",
]
