"""
Session Services

Storage backends for sessions and their event logs.

Design decisions:
- One opaque key per (app, user, session) triple; a tuple, so user ids
  containing the separator of a string key cannot collide
- get_session returns None for an unknown session instead of raising
- append_event applies the event's state_delta in the same critical
  section that appends it
- The in-memory store hands out live Session objects so that every agent
  in an invocation shares one State
"""

from abc import ABC, abstractmethod
from threading import RLock
from typing import Any

from agentrun.core.exceptions import SessionError, SessionNotFoundError
from agentrun.core.types import Event
from agentrun.observability.logging import get_logger
from agentrun.sessions.session import Session
from agentrun.sessions.state import State

logger = get_logger("agentrun.sessions")

SessionKey = tuple[str, str, str]


class BaseSessionService(ABC):
    """
    Abstract base for session stores.

    Implements SessionServiceProtocol from core.interfaces.
    """

    @abstractmethod
    async def create_session(
        self,
        *,
        app_name: str,
        user_id: str,
        session_id: str | None = None,
        state: dict[str, Any] | None = None,
    ) -> Session:
        """Create a session; a missing session_id gets a fresh uuid."""

    @abstractmethod
    async def get_session(
        self, *, app_name: str, user_id: str, session_id: str
    ) -> Session | None:
        """Return the session, or None when it does not exist."""

    @abstractmethod
    async def delete_session(self, *, app_name: str, user_id: str, session_id: str) -> bool:
        """Delete a session. Returns whether anything was removed."""

    @abstractmethod
    async def list_sessions(self, *, app_name: str, user_id: str) -> list[Session]:
        """All sessions belonging to exactly this (app, user)."""

    @abstractmethod
    async def append_event(self, session: Session, event: Event) -> Event:
        """Persist an event at the end of the session's log."""

    @abstractmethod
    async def list_events(
        self, *, app_name: str, user_id: str, session_id: str
    ) -> list[Event]:
        """Events of a session in insertion order."""

    async def close_session(self, *, app_name: str, user_id: str, session_id: str) -> None:
        """Finalize a session. Volatile stores have nothing to do."""
        return None


class InMemorySessionService(BaseSessionService):
    """
    In-memory session storage for development and testing.

    Not suitable for production as sessions are lost on restart.
    Thread-safe: the session table is guarded by one store-wide lock.
    """

    def __init__(self):
        self._sessions: dict[SessionKey, Session] = {}
        self._lock = RLock()

    @staticmethod
    def _make_key(app_name: str, user_id: str, session_id: str) -> SessionKey:
        return (app_name, user_id, session_id)

    async def create_session(
        self,
        *,
        app_name: str,
        user_id: str,
        session_id: str | None = None,
        state: dict[str, Any] | None = None,
    ) -> Session:
        fields: dict[str, Any] = {
            "app_name": app_name,
            "user_id": user_id,
            "state": State(state),
        }
        if session_id:
            fields["id"] = session_id
        session = Session(**fields)

        with self._lock:
            if session.key in self._sessions:
                raise SessionError(
                    f"Session already exists: {session.id}",
                    code="SESSION_EXISTS",
                    context={"app_name": app_name, "user_id": user_id},
                )
            self._sessions[session.key] = session

        logger.debug("Session created", session=session.id, app=app_name, user=user_id)
        return session

    async def get_session(
        self, *, app_name: str, user_id: str, session_id: str
    ) -> Session | None:
        with self._lock:
            return self._sessions.get(self._make_key(app_name, user_id, session_id))

    async def delete_session(self, *, app_name: str, user_id: str, session_id: str) -> bool:
        with self._lock:
            removed = self._sessions.pop(self._make_key(app_name, user_id, session_id), None)
        return removed is not None

    async def list_sessions(self, *, app_name: str, user_id: str) -> list[Session]:
        prefix = (app_name, user_id)
        with self._lock:
            return [s for key, s in self._sessions.items() if key[:2] == prefix]

    async def append_event(self, session: Session, event: Event) -> Event:
        with self._lock:
            stored = self._sessions.get(session.key)
            if stored is None:
                raise SessionNotFoundError(
                    f"Cannot append to unknown session: {session.id}",
                    context={
                        "app_name": session.app_name,
                        "user_id": session.user_id,
                        "event_id": event.id,
                    },
                )

            targets = [stored] if stored is session else [stored, session]
            for target in targets:
                if event.actions.state_delta:
                    target.state.update(event.actions.state_delta)
                target.add_event(event)

        return event

    async def list_events(
        self, *, app_name: str, user_id: str, session_id: str
    ) -> list[Event]:
        with self._lock:
            session = self._sessions.get(self._make_key(app_name, user_id, session_id))
            if session is None:
                return []
            return session.get_events()

    @property
    def session_count(self) -> int:
        with self._lock:
            return len(self._sessions)
