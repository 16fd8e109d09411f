"""
Test Fixtures

Scripted agents and helpers shared by the unit and integration tests.
"""

import asyncio
from collections.abc import AsyncIterator

from agentrun.agents import BaseAgent, InvocationContext
from agentrun.core.types import Content, ContentRole, Event, EventActions
from agentrun.sessions import Session


def make_context(session: Session | None = None, **kwargs) -> InvocationContext:
    """Invocation context over a fresh (or given) session, no store."""
    return InvocationContext(
        session=session or Session(app_name="test-app", user_id="test-user"),
        invocation_id=kwargs.pop("invocation_id", "e-test"),
        **kwargs,
    )


async def collect(stream: AsyncIterator[Event]) -> list[Event]:
    return [event async for event in stream]


def texts(events: list[Event]) -> list[str | None]:
    return [e.text for e in events]


class ScriptedAgent(BaseAgent):
    """
    Emits one model event per scripted text.

    ``fail_at`` raises before emitting that index; ``exit_at`` marks that
    event with a loop-exit action.
    """

    def __init__(
        self,
        name: str,
        script: list[str] | None = None,
        *,
        fail_at: int | None = None,
        exit_at: int | None = None,
        delay: float = 0.0,
        final: bool = True,
        **kwargs,
    ):
        super().__init__(name=name, **kwargs)
        self.script = list(script or [])
        self.fail_at = fail_at
        self.exit_at = exit_at
        self.delay = delay
        self.final = final
        self.runs = 0
        self.emitted = 0
        self.closed_early = False

    async def _run_async_impl(self, ctx: InvocationContext) -> AsyncIterator[Event]:
        self.runs += 1
        try:
            for i, text in enumerate(self.script):
                if self.fail_at == i:
                    raise RuntimeError(f"{self.name} failed at {i}")
                await asyncio.sleep(self.delay)
                self.emitted += 1
                yield Event(
                    invocation_id=ctx.invocation_id,
                    author=self.name,
                    branch=ctx.branch,
                    content=Content.from_text(ContentRole.MODEL, text),
                    is_final_response=self.final and i == len(self.script) - 1,
                    actions=EventActions(exit_loop=self.exit_at == i),
                )
        except GeneratorExit:
            self.closed_early = True
            raise


class BlockingAgent(BaseAgent):
    """Emits one event, then waits until cancelled."""

    def __init__(self, name: str, **kwargs):
        super().__init__(name=name, **kwargs)
        self.started = asyncio.Event()
        self.cancelled = False
        self.finished = False

    async def _run_async_impl(self, ctx: InvocationContext) -> AsyncIterator[Event]:
        try:
            yield Event(
                invocation_id=ctx.invocation_id,
                author=self.name,
                branch=ctx.branch,
                content=Content.from_text(ContentRole.MODEL, f"{self.name} started"),
            )
            self.started.set()
            await asyncio.Event().wait()
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        finally:
            self.finished = True


class StateWritingAgent(BaseAgent):
    """Writes a mapping into session state, then emits one event."""

    def __init__(self, name: str, updates: dict, **kwargs):
        super().__init__(name=name, **kwargs)
        self.updates = updates

    async def _run_async_impl(self, ctx: InvocationContext) -> AsyncIterator[Event]:
        ctx.session.state.update(self.updates)
        yield Event(
            invocation_id=ctx.invocation_id,
            author=self.name,
            content=Content.from_text(ContentRole.MODEL, "written"),
            is_final_response=True,
        )
