"""
Workflow Agents

Combinators that run sub-agents without a model of their own.

Design decisions:
- Sequential and loop agents run children on the caller's task
- The parallel agent runs one task per child and merges their events
  through a bounded queue, so a slow consumer applies back-pressure
- A child whose stream ends early never stops its siblings
- A branch that ends for any reason counts as finished, including a
  cancellation it raised itself; only the combinator's own cancel is silent
- Every child task is cancelled and awaited before the parallel stream
  finishes, including when the consumer abandons it
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import aclosing

from agentrun.agents.base import AgentCallback, BaseAgent
from agentrun.agents.context import InvocationContext
from agentrun.config.settings import get_settings
from agentrun.core.exceptions import ConfigurationError
from agentrun.core.types import Event
from agentrun.observability.logging import get_logger

logger = get_logger("agentrun.agents.workflow")

# Marks one parallel branch as finished
_DONE = object()


class SequentialAgent(BaseAgent):
    """Runs its sub-agents one after another, in list order."""

    async def _run_async_impl(self, ctx: InvocationContext) -> AsyncIterator[Event]:
        for agent in self.sub_agents:
            async with aclosing(agent.run_async(ctx)) as events:
                async for event in events:
                    yield event


class ParallelAgent(BaseAgent):
    """
    Runs all sub-agents concurrently.

    Events are yielded in arrival order. Each fan-out appends
    ``<parallel>.<child>`` to the caller's branch, so a child of ``par``
    runs in branch ``par.a`` at the top level and in ``outer.seq.par.a``
    below another branched agent.
    """

    def __init__(
        self,
        name: str,
        description: str = "",
        sub_agents: list[BaseAgent] | None = None,
        before_agent_callback: AgentCallback | None = None,
        after_agent_callback: AgentCallback | None = None,
        queue_size: int | None = None,
    ):
        if queue_size is not None and queue_size < 1:
            raise ConfigurationError(
                f"queue_size must be >= 1, got {queue_size}",
                context={"agent": name},
            )
        super().__init__(
            name=name,
            description=description,
            sub_agents=sub_agents,
            before_agent_callback=before_agent_callback,
            after_agent_callback=after_agent_callback,
        )
        self.queue_size = (
            queue_size if queue_size is not None else get_settings().agents.parallel_queue_size
        )

    async def _run_async_impl(self, ctx: InvocationContext) -> AsyncIterator[Event]:
        agents = self.sub_agents
        if not agents:
            return

        queue: asyncio.Queue[object] = asyncio.Queue(maxsize=self.queue_size)
        fanout = ctx.for_branch(self.name)
        stopping = False

        async def relay(agent: BaseAgent) -> None:
            try:
                async with aclosing(agent.run_async(fanout.for_branch(agent.name))) as events:
                    async for event in events:
                        await queue.put(event)
            except asyncio.CancelledError:
                # Only the cancel issued below ends a branch silently
                if stopping:
                    raise
                logger.error(
                    "Parallel branch cancelled", agent=agent.name, **ctx.log_fields()
                )
            except Exception as e:
                logger.error(
                    "Parallel branch failed", error=e, agent=agent.name, **ctx.log_fields()
                )
            await queue.put(_DONE)

        tasks = [
            asyncio.create_task(relay(agent), name=f"{self.name}.{agent.name}")
            for agent in agents
        ]
        remaining = len(tasks)

        try:
            while remaining:
                item = await queue.get()
                if item is _DONE:
                    remaining -= 1
                    continue
                yield item
        finally:
            stopping = True
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)


class LoopAgent(BaseAgent):
    """
    Repeats its sub-agents in sequence.

    Stops when ``max_iterations`` passes have run, when the session state
    flag named by ``exit_state_key`` is exactly ``True`` at the start of a
    pass, or as soon as a forwarded event carries ``actions.exit_loop``.
    """

    def __init__(
        self,
        name: str,
        description: str = "",
        sub_agents: list[BaseAgent] | None = None,
        max_iterations: int | None = None,
        before_agent_callback: AgentCallback | None = None,
        after_agent_callback: AgentCallback | None = None,
        exit_state_key: str | None = None,
    ):
        if max_iterations is not None and max_iterations < 0:
            raise ConfigurationError(
                f"max_iterations must be >= 0, got {max_iterations}",
                context={"agent": name},
            )
        super().__init__(
            name=name,
            description=description,
            sub_agents=sub_agents,
            before_agent_callback=before_agent_callback,
            after_agent_callback=after_agent_callback,
        )
        self.max_iterations = max_iterations
        self.exit_state_key = exit_state_key or get_settings().agents.loop_exit_state_key

    async def _run_async_impl(self, ctx: InvocationContext) -> AsyncIterator[Event]:
        agents = self.sub_agents
        if not agents:
            return

        iteration = 0
        while self.max_iterations is None or iteration < self.max_iterations:
            if ctx.session.state.get(self.exit_state_key) is True:
                logger.debug(
                    "Loop exit flag set",
                    agent=self.name,
                    iteration=iteration,
                    **ctx.log_fields(),
                )
                return

            for agent in agents:
                async with aclosing(agent.run_async(ctx)) as events:
                    async for event in events:
                        yield event
                        if event.actions.exit_loop:
                            logger.debug(
                                "Loop exit requested",
                                agent=self.name,
                                iteration=iteration,
                                by=event.author,
                                **ctx.log_fields(),
                            )
                            return

            iteration += 1
