# ============================================================================
# SCOPE: GLOBAL
# Description: Excepciones del cache de instancias de agentes.
# ============================================================================
"""
Agent Cache Exceptions.

Single Responsibility: Define exception types raised by the agent cache.

Only construction failures ever reach cache callers. Disposal failures are
logged at the cache boundary and never raised.
"""


class AgentCacheError(Exception):
    """Base error for agent cache operations."""

    pass


class AgentInitializationTimeoutError(AgentCacheError):
    """
    Initializer did not produce an agent within the allotted time.

    Raised to every caller waiting on the same construction. The cache entry
    is removed, so the next call for the key starts a fresh construction.
    """

    def __init__(self, user_id: str, agent_id: str, timeout: float) -> None:
        self.user_id = user_id
        self.agent_id = agent_id
        self.timeout = timeout
        super().__init__(
            f"Initialization of agent {agent_id} for user {user_id} timed out after {timeout:.2f}s"
        )
