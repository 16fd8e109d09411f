"""
Tool Base

The contract every tool implements and the per-call context it receives.

Design decisions:
- Tools never raise into the agent: the dispatcher turns failures into
  error responses
- Side effects on the session (state, transfer, loop exit) go through
  ToolContext.actions and ride on the function-response event
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from agentrun.core.types import EventActions

if TYPE_CHECKING:
    from agentrun.agents.context import InvocationContext
    from agentrun.sessions.state import State


@dataclass
class ToolContext:
    """Context handed to one tool invocation."""

    invocation_context: "InvocationContext"
    function_call_id: str
    actions: EventActions = field(default_factory=EventActions)

    @property
    def state(self) -> "State":
        return self.invocation_context.session.state

    @property
    def invocation_id(self) -> str:
        return self.invocation_context.invocation_id


class BaseTool(ABC):
    """
    Abstract base for tools.

    Implements ToolProtocol from core.interfaces.
    """

    def __init__(self, name: str, description: str = "", is_long_running: bool = False):
        self._name = name
        self._description = description
        self._is_long_running = is_long_running

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return self._description

    @property
    def is_long_running(self) -> bool:
        """If true, dispatch returns before the work completes."""
        return self._is_long_running

    @property
    def parameters(self) -> dict[str, Any]:
        """JSON Schema of the arguments."""
        return {"type": "object", "properties": {}, "required": []}

    @abstractmethod
    async def run_async(self, args: dict[str, Any], tool_context: ToolContext) -> Any:
        """Execute the tool."""

    def to_declaration(self) -> dict[str, Any]:
        """Function declaration placed in the model request."""
        return {
            "name": self.name,
            "description": self.description,
            "parameters": self.parameters,
        }

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
