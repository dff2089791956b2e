"""
Interfaces para agentes cacheados

Define el contrato minimo que el cache necesita de cada agente: poder
construirlo de forma asincrona y liberarlo con dispose().
"""

from abc import abstractmethod
from enum import Enum
from typing import Awaitable, Callable, Protocol, TypeVar, runtime_checkable


class AgentType(str, Enum):
    """Tipos de agentes en el sistema"""

    SUPERVISOR = "supervisor"
    CONFIGURATION = "configuration"
    PLANNER = "planner"
    EXECUTOR = "executor"
    TASK_MANAGER = "task_manager"
    TOOL_ORCHESTRATOR = "tool_orchestrator"
    MCP = "mcp"


@runtime_checkable
class DisposableAgent(Protocol):
    """
    Contrato de liberacion de recursos.

    Todo valor manejado por el cache debe implementarlo. El cache nunca
    inspecciona el agente mas alla de esta operacion.

    Example:
        ```python
        class PlannerAgent:
            async def dispose(self) -> None:
                await self.checkpointer.close()
        ```
    """

    @abstractmethod
    async def dispose(self) -> None:
        """Libera los recursos del agente (conexiones, grafos, checkpointers)."""
        ...


AgentT = TypeVar("AgentT", bound=DisposableAgent)

# Zero-argument async factory handed to AgentCacheManager.get_or_create
AgentInitializer = Callable[[], Awaitable[AgentT]]
