"""
Runner

The single entry point for executing an agent tree against a session.

Design decisions:
- Sessions are fetched or created before the first event, so setup
  failures surface as exceptions and no stream is ever half-started
- Every event is appended to the session store before the caller sees it
- What happens when the store rejects an event is an explicit policy:
  RAISE stops the relay, LOG forwards the event anyway
- The Runner never rewrites events; it only persists and relays them

Debugging:
- Every log line about an invocation carries app, user, session and
  invocation ids, passed explicitly from the InvocationContext
"""

from collections.abc import AsyncIterator
from contextlib import aclosing

from agentrun.agents.base import BaseAgent
from agentrun.agents.context import InvocationContext, new_invocation_id
from agentrun.artifacts.service import BaseArtifactService, InMemoryArtifactService
from agentrun.config.settings import PersistenceFailurePolicy, get_settings
from agentrun.core.exceptions import SessionPersistenceError
from agentrun.core.types import Content, ContentRole, Event
from agentrun.memory.service import BaseMemoryService, InMemoryMemoryService
from agentrun.observability.logging import get_logger
from agentrun.sessions.service import BaseSessionService, InMemorySessionService
from agentrun.sessions.session import Session

logger = get_logger("agentrun.runners")

USER_AUTHOR = "user"


class Runner:
    """
    Runs an agent tree for one app.

    Usage:
        runner = Runner(agent=root, app_name="demo", session_service=store)
        async for event in runner.run_async(
            user_id="u1", session_id="s1", new_message="Hello"
        ):
            print(event.author, event.text)
    """

    def __init__(
        self,
        agent: BaseAgent,
        app_name: str | None = None,
        session_service: BaseSessionService | None = None,
        memory_service: BaseMemoryService | None = None,
        artifact_service: BaseArtifactService | None = None,
        persistence_failure_policy: PersistenceFailurePolicy | None = None,
    ):
        settings = get_settings()

        self.agent = agent
        self.app_name = app_name or settings.runner.app_name
        self.session_service = session_service or InMemorySessionService()
        self.memory_service = memory_service or InMemoryMemoryService()
        self.artifact_service = artifact_service or InMemoryArtifactService()
        self.persistence_failure_policy = (
            persistence_failure_policy or settings.runner.persistence_failure_policy
        )

    # =========================================================================
    # Entry points
    # =========================================================================

    async def run_async(
        self,
        *,
        user_id: str,
        session_id: str,
        new_message: Content | str | None = None,
    ) -> AsyncIterator[Event]:
        """
        Run the root agent and yield every event after persisting it.

        When ``new_message`` is given, the user event wrapping it is
        persisted and yielded first.

        Raises:
            SessionError: The session could not be fetched or created.
            SessionPersistenceError: An event could not be stored and the
                policy is RAISE.
        """
        session = await self._get_or_create_session(user_id, session_id)

        user_content = self._to_content(new_message)
        ctx = self._new_invocation_context(session, user_content)

        if user_content is not None:
            user_event = Event(
                invocation_id=ctx.invocation_id,
                author=USER_AUTHOR,
                content=user_content,
            )
            await self._append_event(ctx, user_event)
            yield user_event

        logger.info("Invocation started", agent=self.agent.name, **ctx.log_fields())

        async with aclosing(self.agent.run_async(ctx)) as events:
            async for event in events:
                await self._append_event(ctx, event)
                yield event

        logger.info("Invocation finished", events=session.event_count, **ctx.log_fields())

    async def run(
        self,
        *,
        user_id: str,
        session_id: str,
        new_message: Content | str | None = None,
    ) -> Event | None:
        """Drain run_async and return the last event, if any."""
        last: Event | None = None
        async with aclosing(
            self.run_async(user_id=user_id, session_id=session_id, new_message=new_message)
        ) as events:
            async for event in events:
                last = event
        return last

    async def run_live(self, *, user_id: str, session_id: str) -> AsyncIterator[Event]:
        """Streaming variant of run_async, without a leading user event."""
        session = await self._get_or_create_session(user_id, session_id)
        ctx = self._new_invocation_context(session, None)

        async with aclosing(self.agent.run_live(ctx)) as events:
            async for event in events:
                await self._append_event(ctx, event)
                yield event

    async def close_session(self, *, user_id: str, session_id: str) -> None:
        await self.session_service.close_session(
            app_name=self.app_name, user_id=user_id, session_id=session_id
        )

    # =========================================================================
    # Internals
    # =========================================================================

    async def _get_or_create_session(self, user_id: str, session_id: str) -> Session:
        session = await self.session_service.get_session(
            app_name=self.app_name, user_id=user_id, session_id=session_id
        )
        if session is None:
            session = await self.session_service.create_session(
                app_name=self.app_name, user_id=user_id, session_id=session_id
            )
        return session

    def _new_invocation_context(
        self, session: Session, user_content: Content | None
    ) -> InvocationContext:
        return InvocationContext(
            session=session,
            invocation_id=new_invocation_id(),
            session_service=self.session_service,
            memory_service=self.memory_service,
            artifact_service=self.artifact_service,
            user_content=user_content,
        )

    async def _append_event(self, ctx: InvocationContext, event: Event) -> None:
        """Persist ``event``, applying the persistence failure policy."""
        try:
            await self.session_service.append_event(ctx.session, event)
        except Exception as e:
            logger.error(
                "Failed to persist event",
                error=e,
                event_id=event.id,
                author=event.author,
                policy=self.persistence_failure_policy.value,
                **ctx.log_fields(),
            )
            if self.persistence_failure_policy == PersistenceFailurePolicy.RAISE:
                raise SessionPersistenceError(
                    f"Failed to persist event {event.id}",
                    event_id=event.id,
                    context={"session_id": ctx.session.id, "author": event.author},
                    cause=e,
                ) from e

    @staticmethod
    def _to_content(message: Content | str | None) -> Content | None:
        if message is None or isinstance(message, Content):
            return message
        return Content.from_text(ContentRole.USER, message)


class InMemoryRunner(Runner):
    """Runner wired to in-memory session, memory and artifact services."""

    def __init__(self, agent: BaseAgent, app_name: str | None = None):
        super().__init__(
            agent=agent,
            app_name=app_name,
            session_service=InMemorySessionService(),
            memory_service=InMemoryMemoryService(),
            artifact_service=InMemoryArtifactService(),
        )
