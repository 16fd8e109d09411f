"""
agentrun: Agent Execution Engine

Drives a tree of composable agents and records everything they say:
- Composition: sequential, parallel and loop combinators over any agent
- Durability: every event is persisted before the caller sees it
- Isolation: a failing agent ends its own stream, never its siblings'
- Async-first: agents are async generators, parallel branches are tasks
"""

from agentrun.agents import (
    BaseAgent,
    IncludeContents,
    InvocationContext,
    LlmAgent,
    LoopAgent,
    ParallelAgent,
    SequentialAgent,
)
from agentrun.core.types import Content, Event, EventActions, Part
from agentrun.runners import InMemoryRunner, Runner
from agentrun.sessions import InMemorySessionService, Session, State

__version__ = "0.1.0"
__author__ = "agentrun contributors"

__all__ = [
    "BaseAgent",
    "Content",
    "Event",
    "EventActions",
    "IncludeContents",
    "InMemoryRunner",
    "InMemorySessionService",
    "InvocationContext",
    "LlmAgent",
    "LoopAgent",
    "ParallelAgent",
    "Part",
    "Runner",
    "SequentialAgent",
    "Session",
    "State",
]
