"""
Settings Management

Provides centralized, type-safe configuration using Pydantic.
Supports environment variables, .env files, and hierarchical config.

Design decisions:
- Using pydantic-settings for validation and type coercion
- Immutable settings after initialization (frozen model)
- Separate concerns: model settings vs. agent behaviour vs. runner policy
"""

from enum import Enum
from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class PersistenceFailurePolicy(str, Enum):
    """What the Runner does when the session store rejects an event."""

    RAISE = "raise"  # Surface SessionPersistenceError, stop relaying
    LOG = "log"  # Log and forward the event anyway


class LLMSettings(BaseSettings):
    """Model backend configuration."""

    model_config = SettingsConfigDict(env_prefix="AGENTRUN_LLM_")

    # Used by LlmAgents that have no model of their own or inherited
    default_model: str | None = Field(default=None)

    # Stub backend settings
    stub_model_name: str = Field(default="stub-model-v1")


class AgentSettings(BaseSettings):
    """Agent behaviour shared by all combinators."""

    model_config = SettingsConfigDict(env_prefix="AGENTRUN_AGENT_")

    loop_exit_state_key: str = Field(
        default="exit_loop",
        description="Session state key a LoopAgent checks before each iteration",
    )
    parallel_queue_size: int = Field(
        default=1,
        ge=1,
        description="Events buffered between a parallel branch and its consumer",
    )


class RunnerSettings(BaseSettings):
    """Runner configuration."""

    model_config = SettingsConfigDict(env_prefix="AGENTRUN_RUNNER_")

    app_name: str = Field(default="agentrun")
    persistence_failure_policy: PersistenceFailurePolicy = PersistenceFailurePolicy.RAISE


class ObservabilitySettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(env_prefix="AGENTRUN_OBS_")

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"


class Settings(BaseSettings):
    """
    Master settings aggregator.

    This is the single source of truth for all configuration.
    Sub-settings are composed here to maintain clear boundaries.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,  # Immutable after creation
    )

    llm: LLMSettings = Field(default_factory=LLMSettings)
    agents: AgentSettings = Field(default_factory=AgentSettings)
    runner: RunnerSettings = Field(default_factory=RunnerSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses LRU cache to ensure only one settings instance exists.
    This is safe because settings are frozen/immutable.
    """
    return Settings()
