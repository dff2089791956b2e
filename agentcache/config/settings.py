from typing import Any

from pydantic import Field, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Values accepted in the environment to mean "no bound"
_UNBOUNDED_WORDS = {"", "none", "null", "unbounded", "inf", "infinity"}


class Settings(BaseSettings):
    """
    Configuracion del cache de agentes utilizando Pydantic BaseSettings.
    Carga automaticamente las variables de entorno.
    """

    PROJECT_NAME: str = "Agent Cache"
    VERSION: str = "0.1.0"

    # Agent cache bounds (None = unbounded, 0 = retain nothing).
    # Fractional and negative values are normalized by configure().
    AGENT_CACHE_MAX_AGENTS: int | float | None = Field(None, description="Maximo de agentes cacheados en total")
    AGENT_CACHE_MAX_AGENTS_PER_USER: int | float | None = Field(
        None, description="Maximo de agentes cacheados por usuario"
    )
    AGENT_CACHE_INIT_TIMEOUT_SECONDS: float | None = Field(
        None, description="Timeout por defecto para la construccion de un agente (segundos)"
    )

    # Logging
    LOG_LEVEL: str = Field("INFO", description="Nivel de logging")
    LOG_FORMAT: str = Field("colored", description="Formato de logs: colored, json o plain")
    LOG_FILE: str | None = Field(None, description="Archivo opcional para logs en JSON")

    # Application Settings
    DEBUG: bool = Field(False, description="Modo de depuracion")
    ENVIRONMENT: str = Field("production", description="Entorno de ejecucion")

    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignorar campos extras en lugar de generar un error
    )

    @field_validator(
        "AGENT_CACHE_MAX_AGENTS",
        "AGENT_CACHE_MAX_AGENTS_PER_USER",
        "AGENT_CACHE_INIT_TIMEOUT_SECONDS",
        mode="before",
    )
    @classmethod
    def parse_unbounded(cls, value: Any) -> Any:
        if not isinstance(value, str):
            return value
        text = value.strip()
        if text.lower() in _UNBOUNDED_WORDS:
            return None
        try:
            float(text)
        except ValueError:
            # Non-numeric text means unbounded, same as configure()
            return None
        return text

    @field_validator("LOG_FORMAT")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        v = v.lower()
        if v not in {"colored", "json", "plain"}:
            raise ValueError("LOG_FORMAT must be one of: colored, json, plain")
        return v

    @computed_field
    @property
    def is_development(self) -> bool:
        """Determina si esta en modo desarrollo"""
        return self.DEBUG or self.ENVIRONMENT.lower() in ["development", "dev", "local"]

    @computed_field
    @property
    def agent_cache_config(self) -> dict:
        """Opciones listas para AgentCacheManager.configure()"""
        return {
            "max_cached_agents": self.AGENT_CACHE_MAX_AGENTS,
            "max_cached_agents_per_user": self.AGENT_CACHE_MAX_AGENTS_PER_USER,
            "init_timeout_seconds": self.AGENT_CACHE_INIT_TIMEOUT_SECONDS,
        }


# Singleton para configuracion
_settings_instance = None


def get_settings() -> Settings:
    """
    Retorna una instancia cacheada de la configuracion.
    Esto evita cargar las variables de entorno multiples veces.
    """
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance


def reset_settings() -> None:
    """Descarta la instancia cacheada (la proxima llamada relee el entorno)."""
    global _settings_instance
    _settings_instance = None
