# ============================================================================
# SCOPE: GLOBAL
# Description: Clase base abstracta para los agentes que viven en el cache.
#              Cada instancia pertenece a un par (usuario, agente).
# ============================================================================
"""
Agente base para todos los agentes cacheados

Every agent built by an initializer passed to AgentCacheManager derives from
BaseAgent (or at least satisfies DisposableAgent). The cache only relies on
dispose(); init() and execute() belong to the orchestration layer.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any

from agentcache.core.interfaces.agent import AgentType

logger = logging.getLogger(__name__)


# Default runtime configuration values
DEFAULT_AGENT_CONFIG = {
    "model": "llama3.1",
    "temperature": 0.7,
    "max_tokens": 2048,
    "timeout": 30,
}


class BaseAgent(ABC):
    """
    Base class for all cached agents.

    Attributes:
        id: Agent identifier (unique per user)
        agent_type: Role of the agent in the orchestration graph
        config: Runtime configuration merged over DEFAULT_AGENT_CONFIG
        disposed: True once dispose() has completed
    """

    def __init__(self, agent_id: str, agent_type: AgentType, config: dict[str, Any] | None = None):
        self.id = agent_id
        self.agent_type = agent_type
        self.config = {**DEFAULT_AGENT_CONFIG, **(config or {})}
        self.logger = logging.getLogger(f"{__name__}.{agent_id}")

        self.disposed = False
        self._stop_event = asyncio.Event()

    @abstractmethod
    async def init(self) -> None:
        """Build the agent's internal state (graphs, checkpointer, tools)."""
        pass

    @abstractmethod
    async def execute(self, input_data: Any, config: dict[str, Any] | None = None) -> Any:
        """
        Run the agent on one request.

        Args:
            input_data: Request payload
            config: Optional per-request configuration

        Returns:
            Agent output
        """
        pass

    def get_agent_config(self) -> dict[str, Any]:
        """Return a copy of the runtime configuration."""
        return dict(self.config)

    @property
    def is_stopped(self) -> bool:
        """Check if a stop was requested."""
        return self._stop_event.is_set()

    def stop(self) -> None:
        """Signal a running execution to abort."""
        if not self._stop_event.is_set():
            self._stop_event.set()
            logger.info(f"[BaseAgent] Execution stopped for agent {self.id}")

    async def dispose(self) -> None:
        """
        Release agent resources.

        Default implementation only stops pending execution; subclasses
        holding connections override it and call super().
        """
        self.stop()
        self.disposed = True
