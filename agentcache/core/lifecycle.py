"""
Application lifecycle management for the agent cache.

This module follows SRP by handling only startup/shutdown logic: logging
and cache bounds are configured on startup, and every cached agent is
disposed on shutdown.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from agentcache.core.container import AgentCacheContainer
from agentcache.core.shared.logger import configure_logging

logger = logging.getLogger(__name__)


class LifecycleManager:
    """
    Manages application lifecycle events.

    Handles startup initialization and graceful shutdown.
    """

    def __init__(self, container: AgentCacheContainer, configure_logs: bool = True) -> None:
        """Initialize lifecycle manager.

        Args:
            container: Composition root owning the cache manager
            configure_logs: Install logging handlers on startup
        """
        self._container = container
        self._configure_logs = configure_logs
        self._initialized = False

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    async def startup(self) -> None:
        """
        Execute startup tasks.

        Called when the application starts.
        """
        if self._initialized:
            logger.warning("Lifecycle already initialized, skipping startup")
            return

        settings = self._container.settings
        if self._configure_logs:
            configure_logging(
                level=settings.LOG_LEVEL,
                format_type=settings.LOG_FORMAT,
                log_file=settings.LOG_FILE,
            )

        logger.info("Starting agent cache lifecycle...")
        self._container.apply_settings()

        self._initialized = True
        logger.info("Agent cache lifecycle startup completed")

    async def shutdown(self) -> None:
        """
        Execute shutdown tasks.

        Called when the application stops. Disposes every cached agent.
        """
        if not self._initialized:
            logger.warning("Lifecycle not initialized, skipping shutdown")
            return

        logger.info("Stopping agent cache lifecycle...")
        await self._container.cache_manager.clear()

        self._initialized = False
        logger.info("Agent cache lifecycle shutdown completed")


@asynccontextmanager
async def lifespan(container: AgentCacheContainer, configure_logs: bool = True) -> AsyncGenerator[LifecycleManager, None]:
    """
    Lifespan context manager wrapping startup and shutdown.

    Args:
        container: Composition root owning the cache manager
        configure_logs: Install logging handlers on startup

    Yields:
        The running LifecycleManager
    """
    manager = LifecycleManager(container, configure_logs=configure_logs)
    await manager.startup()
    try:
        yield manager
    finally:
        await manager.shutdown()
