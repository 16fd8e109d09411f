"""
Session

The durable record of one (app, user, conversation): an append-only
event log plus a mutable State. Sessions are mutated only through
add_event() and their State.
"""

from datetime import datetime
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from agentrun.core.types import Event, utcnow
from agentrun.sessions.state import State


class Session(BaseModel):
    """
    A conversation session.

    Identified by the (app_name, user_id, id) triple. Insertion order of
    ``events`` is causal order.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    id: str = Field(default_factory=lambda: str(uuid4()))
    app_name: str
    user_id: str

    state: State = Field(default_factory=State)
    events: list[Event] = Field(default_factory=list)

    created_at: datetime = Field(default_factory=utcnow)
    last_update_time: datetime = Field(default_factory=utcnow)

    @property
    def key(self) -> tuple[str, str, str]:
        return (self.app_name, self.user_id, self.id)

    @property
    def event_count(self) -> int:
        return len(self.events)

    def add_event(self, event: Event) -> None:
        """Append an event; last_update_time never moves backwards."""
        self.events.append(event)
        now = utcnow()
        if now > self.last_update_time:
            self.last_update_time = now

    def get_events(self) -> list[Event]:
        return list(self.events)

    def get_recent_events(self, count: int) -> list[Event]:
        return self.events[-count:] if count > 0 else []

    def snapshot(self) -> dict[str, Any]:
        """Plain-data view for logging and debugging."""
        return {
            "id": self.id,
            "app_name": self.app_name,
            "user_id": self.user_id,
            "state": self.state.to_dict(),
            "event_count": self.event_count,
            "last_update_time": self.last_update_time.isoformat(),
        }
