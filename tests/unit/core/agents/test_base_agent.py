"""Unit tests for BaseAgent."""

from typing import Any

import pytest

from agentcache.core.agents import DEFAULT_AGENT_CONFIG, BaseAgent
from agentcache.core.interfaces import AgentType, DisposableAgent


class PlannerAgent(BaseAgent):
    """Minimal concrete agent."""

    def __init__(self, agent_id: str, config: dict[str, Any] | None = None):
        super().__init__(agent_id, AgentType.PLANNER, config)
        self.initialized = False

    async def init(self) -> None:
        self.initialized = True

    async def execute(self, input_data: Any, config: dict[str, Any] | None = None) -> Any:
        if self.is_stopped:
            return None
        return f"plan for {input_data}"


class TestBaseAgent:
    """Tests for BaseAgent."""

    def test_config_merges_defaults(self) -> None:
        """Should overlay runtime config on the defaults."""
        agent = PlannerAgent("p1", {"temperature": 0.1})

        assert agent.config["temperature"] == 0.1
        assert agent.config["model"] == DEFAULT_AGENT_CONFIG["model"]
        assert agent.get_agent_config() is not agent.config

    def test_satisfies_disposable_protocol(self) -> None:
        """Should be accepted wherever the cache expects a disposable agent."""
        assert isinstance(PlannerAgent("p1"), DisposableAgent)

    @pytest.mark.asyncio
    async def test_stop_aborts_execution(self) -> None:
        agent = PlannerAgent("p1")
        await agent.init()
        assert await agent.execute("trip") == "plan for trip"

        agent.stop()

        assert agent.is_stopped is True
        assert await agent.execute("trip") is None

    @pytest.mark.asyncio
    async def test_dispose_stops_and_marks_disposed(self) -> None:
        agent = PlannerAgent("p1")

        await agent.dispose()

        assert agent.disposed is True
        assert agent.is_stopped is True

    @pytest.mark.asyncio
    async def test_evicted_base_agent_is_disposed(self, cache_manager) -> None:
        """Should dispose a BaseAgent evicted from the cache."""
        cache_manager.configure(max_cached_agents=0)

        async def build() -> PlannerAgent:
            agent = PlannerAgent("p1")
            await agent.init()
            return agent

        agent = await cache_manager.get_or_create("u1", "p1", build)

        assert agent.initialized is True
        assert agent.disposed is True
