"""
Sessions Module

Session records, their shared State, and the stores that persist them.
"""

from agentrun.sessions.service import BaseSessionService, InMemorySessionService
from agentrun.sessions.session import Session
from agentrun.sessions.state import State

__all__ = [
    "BaseSessionService",
    "InMemorySessionService",
    "Session",
    "State",
]
