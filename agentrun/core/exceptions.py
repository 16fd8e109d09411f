"""
Exception Hierarchy

Defines all exceptions raised by the engine.

Design decisions:
- All exceptions inherit from AgentRunError for easy catching
- Exceptions carry structured context, not just messages
- Error codes enable programmatic handling
"""

from typing import Any


class AgentRunError(Exception):
    """
    Base exception for all engine errors.

    Provides structured error information including:
    - Human-readable message
    - Machine-readable error code
    - Additional context for debugging
    """

    error_code: str = "AGENTRUN_ERROR"

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.error_code
        self.context = context or {}
        self.__cause__ = cause

    def to_dict(self) -> dict[str, Any]:
        """Serialize exception for logs and callers."""
        return {
            "error": self.code,
            "message": self.message,
            "context": self.context,
        }


# ============================================================
# Configuration Errors
# ============================================================


class ConfigurationError(AgentRunError):
    """Error in configuration or settings."""

    error_code = "CONFIGURATION_ERROR"


# ============================================================
# LLM / Backend Errors
# ============================================================


class LLMError(AgentRunError):
    """Base error for model backend issues."""

    error_code = "LLM_ERROR"


class ModelNotFoundError(LLMError):
    """No backend could be resolved for a model identifier."""

    error_code = "MODEL_NOT_FOUND"


class LLMConnectionError(LLMError):
    """Failed to set up the backend."""

    error_code = "LLM_CONNECTION_ERROR"


# ============================================================
# Session Errors
# ============================================================


class SessionError(AgentRunError):
    """Base error for session store issues."""

    error_code = "SESSION_ERROR"


class SessionNotFoundError(SessionError):
    """Session does not exist."""

    error_code = "SESSION_NOT_FOUND"


class SessionPersistenceError(SessionError):
    """An event could not be appended to the session store."""

    error_code = "SESSION_PERSISTENCE_ERROR"

    def __init__(
        self,
        message: str,
        *,
        event_id: str | None = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.event_id = event_id


# ============================================================
# Tool Errors
# ============================================================


class ToolError(AgentRunError):
    """Base error for tool-related issues."""

    error_code = "TOOL_ERROR"


class ToolNotFoundError(ToolError):
    """Requested tool does not exist."""

    error_code = "TOOL_NOT_FOUND"


class ToolExecutionError(ToolError):
    """Error during tool execution."""

    error_code = "TOOL_EXECUTION_ERROR"

    def __init__(
        self,
        message: str,
        *,
        tool_name: str,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.tool_name = tool_name


# ============================================================
# Agent Errors
# ============================================================


class AgentError(AgentRunError):
    """Base error for agent tree and execution issues."""

    error_code = "AGENT_ERROR"


class AgentTreeError(AgentError):
    """The agent hierarchy was built incorrectly."""

    error_code = "AGENT_TREE_ERROR"


class CallbackError(AgentError):
    """A lifecycle callback raised."""

    error_code = "CALLBACK_ERROR"

    def __init__(
        self,
        message: str,
        *,
        callback: str,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.callback = callback
