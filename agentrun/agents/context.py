"""
Invocation Context

Everything an agent needs for one run: the live session plus the
services reachable from it. One context is built per Runner call and
passed down the whole agent tree.
"""

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any
from uuid import uuid4

from agentrun.core.types import Content

if TYPE_CHECKING:
    from agentrun.sessions.service import BaseSessionService
    from agentrun.sessions.session import Session


def new_invocation_id() -> str:
    return f"e-{uuid4()}"


@dataclass
class InvocationContext:
    """
    Per-invocation state shared by every agent in the tree.

    ``session`` is the live session object, so a state write made by one
    agent is visible to every agent that runs after it.
    """

    session: "Session"
    invocation_id: str

    session_service: "BaseSessionService | None" = None
    memory_service: Any = None
    artifact_service: Any = None

    # The message that started this invocation, if any
    user_content: Content | None = None

    # Dotted path of parallel branches, e.g. "fanout.researcher"
    branch: str | None = None

    @property
    def app_name(self) -> str:
        return self.session.app_name

    @property
    def user_id(self) -> str:
        return self.session.user_id

    def log_fields(self) -> dict[str, str]:
        """Identifiers every log line about this invocation carries."""
        return {
            "app_name": self.app_name,
            "user_id": self.user_id,
            "session_id": self.session.id,
            "invocation_id": self.invocation_id,
        }

    def for_branch(self, name: str) -> "InvocationContext":
        """Copy of this context scoped to a child branch."""
        branch = f"{self.branch}.{name}" if self.branch else name
        return replace(self, branch=branch)
