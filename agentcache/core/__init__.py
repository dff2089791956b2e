"""
Core module: cache manager, agent contracts, lifecycle and shared utilities.
"""

from agentcache.core.container import AgentCacheContainer
from agentcache.core.lifecycle import LifecycleManager, lifespan

__all__ = [
    "AgentCacheContainer",
    "LifecycleManager",
    "lifespan",
]
