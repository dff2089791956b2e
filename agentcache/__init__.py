"""
Agent cache for the multi-agent orchestration platform.

Keeps one live instance per (user, agent) pair with single-flight
initialization and LRU eviction at global and per-user granularity.
"""

from agentcache.core import AgentCacheContainer, LifecycleManager, lifespan
from agentcache.core.cache import AgentCacheManager, agent_cache_manager, get_agent_cache_manager

__version__ = "0.1.0"

__all__ = [
    "AgentCacheContainer",
    "AgentCacheManager",
    "LifecycleManager",
    "agent_cache_manager",
    "get_agent_cache_manager",
    "lifespan",
]
