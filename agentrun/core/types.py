"""
Core Types and Data Structures

Defines the value types that flow through the engine: content, parts,
events and the actions attached to them, plus the request handed to a
model backend.

Events are frozen once created. Nothing downstream of the producing agent
rewrites an event; it is only persisted and relayed.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


class ContentRole(str, Enum):
    """Conventional speaker tags. Content.role itself is free-form."""

    USER = "user"
    MODEL = "model"
    SYSTEM = "system"
    TOOL = "tool"


# =============================================================================
# CONTENT
# =============================================================================


class FunctionCall(BaseModel):
    """A structured tool invocation requested by a model."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: f"call_{uuid4().hex[:8]}")
    name: str
    args: dict[str, Any] = Field(default_factory=dict)


class FunctionResponse(BaseModel):
    """The result of dispatching a FunctionCall."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    response: dict[str, Any] = Field(default_factory=dict)


class Part(BaseModel):
    """
    One piece of a Content.

    Text is the common case. Function call/response parts share the same
    shape so text-only consumers can keep reading ``part.text``.
    """

    model_config = ConfigDict(frozen=True)

    text: str | None = None
    function_call: FunctionCall | None = None
    function_response: FunctionResponse | None = None

    @classmethod
    def from_text(cls, text: str) -> "Part":
        return cls(text=text)


class Content(BaseModel):
    """A single turn of conversation: who spoke, and what."""

    model_config = ConfigDict(frozen=True)

    role: str
    parts: list[Part] = Field(default_factory=list)

    @classmethod
    def from_text(cls, role: str | ContentRole, text: str) -> "Content":
        """Build a content with a single text part."""
        role_value = role.value if isinstance(role, ContentRole) else role
        return cls(role=role_value, parts=[Part(text=text)])

    @property
    def text(self) -> str:
        """All text parts joined together."""
        return "".join(p.text for p in self.parts if p.text)


# =============================================================================
# EVENTS
# =============================================================================


class EventActions(BaseModel):
    """
    Side effects attached to an event.

    ``exit_loop`` is the signal a LoopAgent listens for; it is unrelated
    to ``skip_summarization``.
    """

    transfer_to_agent: str | None = None
    escalate: bool = False
    skip_summarization: bool = False
    exit_loop: bool = False
    state_delta: dict[str, Any] = Field(default_factory=dict)
    artifact_delta: dict[str, Any] = Field(default_factory=dict)
    requested_auth_configs: list[Any] = Field(default_factory=list)

    def merge(self, other: "EventActions") -> "EventActions":
        """Combine two action bundles; flags OR together, deltas merge."""
        return EventActions(
            transfer_to_agent=other.transfer_to_agent or self.transfer_to_agent,
            escalate=self.escalate or other.escalate,
            skip_summarization=self.skip_summarization or other.skip_summarization,
            exit_loop=self.exit_loop or other.exit_loop,
            state_delta={**self.state_delta, **other.state_delta},
            artifact_delta={**self.artifact_delta, **other.artifact_delta},
            requested_auth_configs=[
                *self.requested_auth_configs,
                *other.requested_auth_configs,
            ],
        )


class Event(BaseModel):
    """
    One immutable unit of agent output.

    Every event gets a fresh uuid at creation. ``actions`` is always
    present, even when constructed with ``actions=None``.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid4()))
    invocation_id: str = ""
    timestamp: datetime = Field(default_factory=utcnow)
    author: str
    content: Content | None = None
    branch: str | None = None
    is_final_response: bool = False
    actions: EventActions = Field(default_factory=EventActions)
    long_running_tool_ids: list[str] | None = None

    @field_validator("actions", mode="before")
    @classmethod
    def _default_actions(cls, value: Any) -> Any:
        return EventActions() if value is None else value

    @property
    def text(self) -> str | None:
        """First text part of the content, if any."""
        if self.content is None:
            return None
        for part in self.content.parts:
            if part.text is not None:
                return part.text
        return None

    def get_function_calls(self) -> list[FunctionCall]:
        if self.content is None:
            return []
        return [p.function_call for p in self.content.parts if p.function_call]

    def get_function_responses(self) -> list[FunctionResponse]:
        if self.content is None:
            return []
        return [p.function_response for p in self.content.parts if p.function_response]


# =============================================================================
# MODEL REQUEST
# =============================================================================


class GenerateContentConfig(BaseModel):
    """Sampling knobs forwarded untouched to the backend."""

    temperature: float | None = None
    max_output_tokens: int | None = None
    top_p: float | None = None
    top_k: int | None = None


class LLMRequest(BaseModel):
    """
    Everything a backend needs for one generation.

    ``tools`` holds function declarations, not tool objects; dispatch
    stays with the agent that owns the tools.
    """

    model: str = ""
    # Backends author their events as the requesting agent
    agent_name: str = ""
    invocation_id: str = ""
    contents: list[Content] = Field(default_factory=list)
    config: GenerateContentConfig | None = None
    tools: list[dict[str, Any]] = Field(default_factory=list)

    @property
    def tool_names(self) -> list[str]:
        return [t.get("name", "") for t in self.tools]
