"""
Dependency Injection Container

Composition root that owns the agent cache manager and hands it to callers
explicitly instead of letting them reach for module globals.
"""

import logging
from typing import Any

from agentcache.config.settings import Settings, get_settings
from agentcache.core.cache import AgentCacheManager, get_agent_cache_manager
from agentcache.core.interfaces.agent import AgentInitializer, AgentT

logger = logging.getLogger(__name__)


class AgentCacheContainer:
    """
    Owns the AgentCacheManager used by the orchestration layer.

    Example:
        ```python
        container = AgentCacheContainer()
        agent = await container.get_or_create_agent(user_id, agent_id, build_agent)
        ```
    """

    def __init__(
        self,
        settings: Settings | None = None,
        cache_manager: AgentCacheManager[Any] | None = None,
    ) -> None:
        """
        Initialize container.

        Args:
            settings: Settings to apply (defaults to get_settings())
            cache_manager: Manager to own (defaults to the process-wide instance)
        """
        self.settings = settings if settings is not None else get_settings()
        self._cache_manager = cache_manager if cache_manager is not None else get_agent_cache_manager()

    @property
    def cache_manager(self) -> AgentCacheManager[Any]:
        return self._cache_manager

    def apply_settings(self) -> None:
        """Push cache bounds from settings into the manager."""
        self._cache_manager.configure(**self.settings.agent_cache_config)

    async def get_or_create_agent(
        self,
        user_id: str,
        agent_id: str,
        initializer: AgentInitializer[AgentT],
    ) -> AgentT:
        """Get a cached agent or build it through the owned manager."""
        return await self._cache_manager.get_or_create(user_id, agent_id, initializer)

    async def invalidate_agent(self, user_id: str, agent_id: str) -> None:
        """Drop a cached agent after its configuration changed."""
        logger.debug(f"Invalidating agent {agent_id} for user {user_id}")
        await self._cache_manager.invalidate(user_id, agent_id)
