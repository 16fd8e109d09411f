"""
Configuration Module

Centralized configuration management for the engine.
"""

from agentrun.config.settings import (
    AgentSettings,
    LLMSettings,
    ObservabilitySettings,
    PersistenceFailurePolicy,
    RunnerSettings,
    Settings,
    get_settings,
)

__all__ = [
    "AgentSettings",
    "LLMSettings",
    "ObservabilitySettings",
    "PersistenceFailurePolicy",
    "RunnerSettings",
    "Settings",
    "get_settings",
]
