"""
Runners Module

Entry points that execute an agent tree and persist its events.
"""

from agentrun.runners.runner import InMemoryRunner, Runner

__all__ = [
    "InMemoryRunner",
    "Runner",
]
