"""Unit tests for environment-driven settings."""

import pytest
from pydantic import ValidationError

from agentcache.config.settings import Settings, get_settings, reset_settings
from agentcache.core.cache import AgentCacheManager


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Run from an empty directory without cache variables set."""
    monkeypatch.chdir(tmp_path)
    for name in (
        "AGENT_CACHE_MAX_AGENTS",
        "AGENT_CACHE_MAX_AGENTS_PER_USER",
        "AGENT_CACHE_INIT_TIMEOUT_SECONDS",
        "LOG_FORMAT",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestSettings:
    """Tests for Settings."""

    def test_defaults_are_unbounded(self, clean_env) -> None:
        """Should default both bounds and the timeout to None."""
        settings = Settings()
        assert settings.AGENT_CACHE_MAX_AGENTS is None
        assert settings.AGENT_CACHE_MAX_AGENTS_PER_USER is None
        assert settings.AGENT_CACHE_INIT_TIMEOUT_SECONDS is None
        assert settings.LOG_FORMAT == "colored"

    def test_reads_bounds_from_environment(self, clean_env) -> None:
        """Should parse numeric bounds from environment variables."""
        clean_env.setenv("AGENT_CACHE_MAX_AGENTS", "50")
        clean_env.setenv("AGENT_CACHE_MAX_AGENTS_PER_USER", "5")
        clean_env.setenv("AGENT_CACHE_INIT_TIMEOUT_SECONDS", "2.5")

        settings = Settings()

        assert settings.AGENT_CACHE_MAX_AGENTS == 50
        assert settings.AGENT_CACHE_MAX_AGENTS_PER_USER == 5
        assert settings.AGENT_CACHE_INIT_TIMEOUT_SECONDS == 2.5

    @pytest.mark.parametrize("raw", ["", "none", "Unbounded", "inf"])
    def test_unbounded_words(self, clean_env, raw) -> None:
        """Should map empty and 'unbounded' style values to None."""
        clean_env.setenv("AGENT_CACHE_MAX_AGENTS", raw)
        assert Settings().AGENT_CACHE_MAX_AGENTS is None

    def test_negative_bound_is_forwarded_and_normalized(self, clean_env) -> None:
        """Should accept a negative bound and let configure() treat it as unbounded."""
        clean_env.setenv("AGENT_CACHE_MAX_AGENTS", "-1")
        settings = Settings()
        manager = AgentCacheManager()

        manager.configure(**settings.agent_cache_config)

        assert settings.AGENT_CACHE_MAX_AGENTS == -1
        assert manager.limits.max_cached_agents is None

    def test_fractional_bound_is_floored_by_configure(self, clean_env) -> None:
        """Should accept a fractional bound and let configure() floor it."""
        clean_env.setenv("AGENT_CACHE_MAX_AGENTS", "2.5")
        clean_env.setenv("AGENT_CACHE_MAX_AGENTS_PER_USER", "1.9")
        settings = Settings()
        manager = AgentCacheManager()

        manager.configure(**settings.agent_cache_config)

        assert settings.AGENT_CACHE_MAX_AGENTS == 2.5
        assert manager.limits.max_cached_agents == 2
        assert manager.limits.max_cached_agents_per_user == 1

    @pytest.mark.parametrize("raw", ["abc", "ten", "5 agents"])
    def test_non_numeric_bound_means_unbounded(self, clean_env, raw) -> None:
        """Should treat non-numeric bounds and timeouts as unbounded instead of failing."""
        clean_env.setenv("AGENT_CACHE_MAX_AGENTS_PER_USER", raw)
        clean_env.setenv("AGENT_CACHE_INIT_TIMEOUT_SECONDS", raw)

        settings = Settings()

        assert settings.AGENT_CACHE_MAX_AGENTS_PER_USER is None
        assert settings.AGENT_CACHE_INIT_TIMEOUT_SECONDS is None

    def test_invalid_log_format_rejected(self, clean_env) -> None:
        """Should reject unknown log formats."""
        clean_env.setenv("LOG_FORMAT", "xml")
        with pytest.raises(ValidationError):
            Settings()

    def test_agent_cache_config(self, clean_env) -> None:
        """Should expose configure() keyword arguments."""
        settings = Settings(AGENT_CACHE_MAX_AGENTS=3, AGENT_CACHE_MAX_AGENTS_PER_USER=0)
        assert settings.agent_cache_config == {
            "max_cached_agents": 3,
            "max_cached_agents_per_user": 0,
            "init_timeout_seconds": None,
        }


class TestGetSettings:
    """Tests for the settings singleton."""

    def test_returns_cached_instance(self, clean_env) -> None:
        assert get_settings() is get_settings()

    def test_reset_rereads_environment(self, clean_env) -> None:
        clean_env.setenv("AGENT_CACHE_MAX_AGENTS", "1")
        first = get_settings()
        clean_env.setenv("AGENT_CACHE_MAX_AGENTS", "2")
        reset_settings()
        second = get_settings()

        assert first.AGENT_CACHE_MAX_AGENTS == 1
        assert second.AGENT_CACHE_MAX_AGENTS == 2
