"""
Core Module

Contains fundamental types, exceptions and interfaces used across all
other modules.

The interfaces module defines protocols for cross-module communication,
preventing circular dependencies.
"""

from agentrun.core.types import (
    Content,
    ContentRole,
    Event,
    EventActions,
    FunctionCall,
    FunctionResponse,
    GenerateContentConfig,
    LLMRequest,
    Part,
)
from agentrun.core.exceptions import (
    AgentError,
    AgentRunError,
    AgentTreeError,
    CallbackError,
    ConfigurationError,
    LLMConnectionError,
    LLMError,
    ModelNotFoundError,
    SessionError,
    SessionNotFoundError,
    SessionPersistenceError,
    ToolError,
    ToolExecutionError,
    ToolNotFoundError,
)
from agentrun.core.interfaces import (
    ArtifactServiceProtocol,
    LLMProtocol,
    MemoryServiceProtocol,
    SessionServiceProtocol,
    ToolProtocol,
)

__all__ = [
    # Types
    "Content",
    "ContentRole",
    "Event",
    "EventActions",
    "FunctionCall",
    "FunctionResponse",
    "GenerateContentConfig",
    "LLMRequest",
    "Part",
    # Exceptions
    "AgentError",
    "AgentRunError",
    "AgentTreeError",
    "CallbackError",
    "ConfigurationError",
    "LLMConnectionError",
    "LLMError",
    "ModelNotFoundError",
    "SessionError",
    "SessionNotFoundError",
    "SessionPersistenceError",
    "ToolError",
    "ToolExecutionError",
    "ToolNotFoundError",
    # Interfaces/Protocols
    "ArtifactServiceProtocol",
    "LLMProtocol",
    "MemoryServiceProtocol",
    "SessionServiceProtocol",
    "ToolProtocol",
]
