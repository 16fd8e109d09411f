"""
Core Interfaces and Protocols

Contracts for the collaborators the engine consumes but does not own:
model backends, tools, and the session, memory and artifact stores.

Design decisions:
- Protocol-based for structural subtyping
- Minimal interface surface
- Concrete base classes live in their own packages and satisfy these
"""

from collections.abc import AsyncIterator
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from agentrun.core.types import Event, LLMRequest, Part

if TYPE_CHECKING:
    from agentrun.sessions.session import Session


# =============================================================================
# LLM BACKEND PROTOCOL
# =============================================================================


@runtime_checkable
class LLMProtocol(Protocol):
    """
    Interface for inference backends.

    Implemented by: BaseLLM subclasses (StubLLM, ...)
    Used by: LlmAgent
    """

    @property
    def model(self) -> str:
        """Model identifier this handle serves."""
        ...

    async def connect(self) -> None:
        """Perform any setup; may raise LLMConnectionError."""
        ...

    def generate_content_async(self, request: LLMRequest) -> AsyncIterator[Event]:
        """Stream events for one request."""
        ...


# =============================================================================
# TOOL PROTOCOL
# =============================================================================


@runtime_checkable
class ToolProtocol(Protocol):
    """
    Interface for a callable tool.

    Implemented by: BaseTool subclasses
    Used by: LlmAgent, the function-call dispatcher
    """

    @property
    def name(self) -> str:
        ...

    @property
    def is_long_running(self) -> bool:
        ...

    async def run_async(self, args: dict[str, Any], tool_context: Any) -> Any:
        ...

    def to_declaration(self) -> dict[str, Any]:
        ...


# =============================================================================
# SESSION SERVICE PROTOCOL
# =============================================================================


@runtime_checkable
class SessionServiceProtocol(Protocol):
    """
    Interface for session stores.

    Implemented by: InMemorySessionService
    Used by: Runner
    """

    async def create_session(
        self,
        *,
        app_name: str,
        user_id: str,
        session_id: str | None = None,
        state: dict[str, Any] | None = None,
    ) -> "Session":
        ...

    async def get_session(
        self, *, app_name: str, user_id: str, session_id: str
    ) -> "Session | None":
        ...

    async def append_event(self, session: "Session", event: Event) -> Event:
        ...

    async def close_session(self, *, app_name: str, user_id: str, session_id: str) -> None:
        ...


# =============================================================================
# MEMORY / ARTIFACT PROTOCOLS
# =============================================================================


@runtime_checkable
class MemoryServiceProtocol(Protocol):
    """
    Interface for long-term memory.

    Implemented by: InMemoryMemoryService
    Used by: tools and callers outside the core
    """

    async def add_session_to_memory(self, session: "Session") -> None:
        ...

    async def search_memory(self, *, app_name: str, user_id: str, query: str) -> Any:
        ...


@runtime_checkable
class ArtifactServiceProtocol(Protocol):
    """
    Interface for versioned artifact storage.

    Implemented by: InMemoryArtifactService
    """

    async def save_artifact(
        self,
        *,
        app_name: str,
        user_id: str,
        session_id: str,
        filename: str,
        artifact: Part,
    ) -> int:
        ...

    async def load_artifact(
        self,
        *,
        app_name: str,
        user_id: str,
        session_id: str,
        filename: str,
        version: int | None = None,
    ) -> Part | None:
        ...
