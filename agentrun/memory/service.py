"""
Memory Services

Long-term memory across a user's sessions.

Design decisions:
- Memory is scoped to (app, user); one user never sees another's
- The in-memory service indexes the text of session events and matches
  queries by word overlap; no embeddings
- Re-adding a session replaces what was indexed for it
"""

import re
from abc import ABC, abstractmethod
from datetime import datetime
from threading import RLock
from typing import Any

from pydantic import BaseModel, Field

from agentrun.core.types import Content
from agentrun.observability.logging import get_logger
from agentrun.sessions.session import Session

logger = get_logger("agentrun.memory")

_WORD = re.compile(r"\w+")


class MemoryEntry(BaseModel):
    """One remembered piece of a past conversation."""

    session_id: str
    author: str
    content: Content
    timestamp: datetime
    score: float = 0.0
    metadata: dict[str, Any] = Field(default_factory=dict)


class SearchMemoryResponse(BaseModel):
    """Result of a memory search, best match first."""

    memories: list[MemoryEntry] = Field(default_factory=list)


class BaseMemoryService(ABC):
    """
    Abstract base for memory services.

    Implements MemoryServiceProtocol from core.interfaces.
    """

    @abstractmethod
    async def add_session_to_memory(self, session: Session) -> None:
        """Index the events of ``session``."""

    @abstractmethod
    async def search_memory(
        self, *, app_name: str, user_id: str, query: str
    ) -> SearchMemoryResponse:
        """Find memories of this (app, user) relevant to ``query``."""


def _words(text: str) -> set[str]:
    return {w.lower() for w in _WORD.findall(text)}


class InMemoryMemoryService(BaseMemoryService):
    """
    Keyword-matching memory for development and testing.

    Score is the fraction of query words found in the entry.
    """

    def __init__(self):
        # (app, user) -> session_id -> entries
        self._entries: dict[tuple[str, str], dict[str, list[MemoryEntry]]] = {}
        self._lock = RLock()

    async def add_session_to_memory(self, session: Session) -> None:
        entries = [
            MemoryEntry(
                session_id=session.id,
                author=event.author,
                content=event.content,
                timestamp=event.timestamp,
            )
            for event in session.get_events()
            if event.content is not None and event.content.text
        ]

        with self._lock:
            scope = self._entries.setdefault((session.app_name, session.user_id), {})
            scope[session.id] = entries

        logger.debug("Session added to memory", session=session.id, entries=len(entries))

    async def search_memory(
        self, *, app_name: str, user_id: str, query: str
    ) -> SearchMemoryResponse:
        query_words = _words(query)
        if not query_words:
            return SearchMemoryResponse()

        with self._lock:
            scope = self._entries.get((app_name, user_id), {})
            candidates = [entry for entries in scope.values() for entry in entries]

        matches: list[MemoryEntry] = []
        for entry in candidates:
            overlap = query_words & _words(entry.content.text)
            if overlap:
                score = len(overlap) / len(query_words)
                matches.append(entry.model_copy(update={"score": score}))

        matches.sort(key=lambda m: (m.score, m.timestamp), reverse=True)
        return SearchMemoryResponse(memories=matches)
