"""
Shared pytest fixtures for all tests.

This module provides a fresh agent cache manager per test, recording fake
agents and initializer factories.
"""

import asyncio
import os
from typing import Any, AsyncGenerator, Awaitable, Callable

import pytest
import pytest_asyncio

from agentcache.config.settings import reset_settings
from agentcache.core.agents import BaseAgent
from agentcache.core.cache import AgentCacheManager
from agentcache.core.interfaces import AgentType

# Ensure test environment
os.environ["ENVIRONMENT"] = "test"


# ============================================================================
# FAKE AGENTS
# ============================================================================


class FakeAgent(BaseAgent):
    """Concrete agent recording how many times it was disposed."""

    def __init__(self, agent_id: str, fail_dispose: bool = False):
        super().__init__(agent_id, AgentType.EXECUTOR)
        self.dispose_calls = 0
        self.fail_dispose = fail_dispose

    async def init(self) -> None:
        pass

    async def execute(self, input_data: Any, config: dict[str, Any] | None = None) -> Any:
        return {"agent": self.id, "input": input_data}

    async def dispose(self) -> None:
        self.dispose_calls += 1
        if self.fail_dispose:
            raise RuntimeError(f"dispose failed for {self.id}")
        await super().dispose()


class InitializerFactory:
    """Builds initializers that count calls and can fail or block."""

    def __init__(self) -> None:
        self.calls: dict[str, int] = {}
        self.agents: dict[str, list[FakeAgent]] = {}

    def __call__(
        self,
        agent_id: str,
        *,
        fail_times: int = 0,
        gate: asyncio.Event | None = None,
        fail_dispose: bool = False,
    ) -> Callable[[], Awaitable[FakeAgent]]:
        async def initializer() -> FakeAgent:
            self.calls[agent_id] = self.calls.get(agent_id, 0) + 1
            if gate is not None:
                await gate.wait()
            if self.calls[agent_id] <= fail_times:
                raise ValueError(f"init failed for {agent_id}")
            agent = FakeAgent(agent_id, fail_dispose=fail_dispose)
            await agent.init()
            self.agents.setdefault(agent_id, []).append(agent)
            return agent

        return initializer

    def count(self, agent_id: str) -> int:
        return self.calls.get(agent_id, 0)


# ============================================================================
# CACHE FIXTURES
# ============================================================================


@pytest_asyncio.fixture
async def cache_manager() -> AsyncGenerator[AgentCacheManager[FakeAgent], None]:
    """Fresh cache manager, cleared after the test."""
    manager: AgentCacheManager[FakeAgent] = AgentCacheManager()
    yield manager
    await manager.clear()


@pytest.fixture
def make_initializer() -> InitializerFactory:
    """Factory for counting initializers."""
    return InitializerFactory()


@pytest.fixture
def make_agent() -> Callable[..., FakeAgent]:
    """Factory for pre-built agents (put() path)."""
    return FakeAgent


@pytest.fixture(autouse=True)
def _reset_settings_singleton():
    """Settings are re-read from the environment for every test."""
    reset_settings()
    yield
    reset_settings()
