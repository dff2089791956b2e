"""
Cache Module - In-memory cache of live agent instances.

Provides:
- AgentCacheManager: single-flight, LRU-bounded cache keyed by (user, agent)
- agent_cache_manager: process-wide default instance
"""

from .agent_cache_manager import (
    AgentCacheManager,
    CacheEntry,
    CacheStats,
    EntryState,
    agent_cache_manager,
    get_agent_cache_manager,
)
from .exceptions import AgentCacheError, AgentInitializationTimeoutError
from .limits import CacheLimits, normalize_limit, normalize_timeout

__all__ = [
    "AgentCacheError",
    "AgentCacheManager",
    "AgentInitializationTimeoutError",
    "CacheEntry",
    "CacheLimits",
    "CacheStats",
    "EntryState",
    "agent_cache_manager",
    "get_agent_cache_manager",
    "normalize_limit",
    "normalize_timeout",
]
