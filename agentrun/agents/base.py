"""
Base Agent

The contract shared by every node in an agent tree.

Design decisions:
- run_async is a template: before-callback, the subclass stream, then the
  after-callback
- Failures inside a run are local: they are logged and the stream simply
  ends, so combinators see "fewer events" rather than an exception
- Cancellation is never swallowed
- Parents own their children; the child's parent link is a weakref
- Child streams are closed explicitly so an abandoned stream stops its
  producer at once
"""

import inspect
import weakref
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import aclosing
from typing import Any

from agentrun.agents.context import InvocationContext
from agentrun.core.exceptions import AgentTreeError, CallbackError
from agentrun.core.types import Event
from agentrun.observability.logging import get_logger

logger = get_logger("agentrun.agents")

AgentCallback = Callable[[InvocationContext], Awaitable[Any] | Any]

RESERVED_AGENT_NAMES = frozenset({"user"})


class BaseAgent(ABC):
    """
    Abstract base for agents.

    Subclasses implement ``_run_async_impl``. Consumers call
    ``run_async`` and iterate the events it yields.
    """

    def __init__(
        self,
        name: str,
        description: str = "",
        sub_agents: list["BaseAgent"] | None = None,
        before_agent_callback: AgentCallback | None = None,
        after_agent_callback: AgentCallback | None = None,
    ):
        if not name:
            raise AgentTreeError("Agent name must not be empty")
        if name in RESERVED_AGENT_NAMES:
            raise AgentTreeError(
                f"Agent name is reserved: {name}",
                context={"reserved": sorted(RESERVED_AGENT_NAMES)},
            )

        self._name = name
        self._description = description
        self._sub_agents: list[BaseAgent] = []
        self._parent_ref: weakref.ReferenceType[BaseAgent] | None = None

        self.before_agent_callback = before_agent_callback
        self.after_agent_callback = after_agent_callback

        for agent in sub_agents or []:
            self.add_sub_agent(agent)

    # =========================================================================
    # Identity and hierarchy
    # =========================================================================

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return self._description

    @property
    def sub_agents(self) -> list["BaseAgent"]:
        return list(self._sub_agents)

    @property
    def parent_agent(self) -> "BaseAgent | None":
        if self._parent_ref is None:
            return None
        return self._parent_ref()

    @parent_agent.setter
    def parent_agent(self, parent: "BaseAgent | None") -> None:
        self._parent_ref = weakref.ref(parent) if parent is not None else None

    @property
    def root_agent(self) -> "BaseAgent":
        agent = self
        while agent.parent_agent is not None:
            agent = agent.parent_agent
        return agent

    def add_sub_agent(self, agent: "BaseAgent") -> None:
        """
        Attach ``agent`` as the last child.

        Raises:
            AgentTreeError: The agent already has a parent, or a sibling
                with the same name exists.
        """
        if agent.parent_agent is not None:
            raise AgentTreeError(
                f"Agent {agent.name} already has parent {agent.parent_agent.name}",
                context={"agent": agent.name, "new_parent": self.name},
            )
        if self.find_sub_agent(agent.name) is not None:
            raise AgentTreeError(
                f"Duplicate sub-agent name under {self.name}: {agent.name}",
                context={"agent": agent.name, "parent": self.name},
            )

        agent.parent_agent = self
        self._sub_agents.append(agent)

    def find_sub_agent(self, name: str) -> "BaseAgent | None":
        """Direct children only."""
        for agent in self._sub_agents:
            if agent.name == name:
                return agent
        return None

    def find_agent(self, name: str) -> "BaseAgent | None":
        """Pre-order search of this subtree: self first, then each child in order."""
        if self.name == name:
            return self
        for agent in self._sub_agents:
            found = agent.find_agent(name)
            if found is not None:
                return found
        return None

    # =========================================================================
    # Execution
    # =========================================================================

    async def run_async(self, ctx: InvocationContext) -> AsyncIterator[Event]:
        """
        Run this agent and yield its events.

        A failing callback or implementation ends the stream early
        without raising.
        """
        try:
            await self._invoke_callback("before_agent_callback", self.before_agent_callback, ctx)
        except CallbackError as e:
            logger.error(
                "Before-agent callback failed", error=e, agent=self.name, **ctx.log_fields()
            )
            return

        try:
            async with aclosing(self._run_async_impl(ctx)) as events:
                async for event in events:
                    yield event
        except Exception as e:
            logger.error("Agent run failed", error=e, agent=self.name, **ctx.log_fields())
            return

        try:
            await self._invoke_callback("after_agent_callback", self.after_agent_callback, ctx)
        except CallbackError as e:
            logger.error(
                "After-agent callback failed", error=e, agent=self.name, **ctx.log_fields()
            )

    async def run_live(self, ctx: InvocationContext) -> AsyncIterator[Event]:
        """Streaming entry point. Defaults to run_async."""
        async with aclosing(self.run_async(ctx)) as events:
            async for event in events:
                yield event

    @abstractmethod
    def _run_async_impl(self, ctx: InvocationContext) -> AsyncIterator[Event]:
        """Produce this agent's events. Implemented as an async generator."""

    async def _invoke_callback(
        self,
        label: str,
        callback: Callable[..., Any] | None,
        *args: Any,
    ) -> Any:
        """Call a sync or async callback; failures surface as CallbackError."""
        if callback is None:
            return None
        try:
            result = callback(*args)
            if inspect.isawaitable(result):
                result = await result
            return result
        except Exception as e:
            raise CallbackError(
                f"{label} of {self.name} raised {type(e).__name__}",
                callback=label,
                context={"agent": self.name},
                cause=e,
            ) from e

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, sub_agents={len(self._sub_agents)})"
