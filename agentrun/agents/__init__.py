"""
Agents Module

The agent contract, the model-backed leaf agent and the workflow
combinators.
"""

from agentrun.agents.base import AgentCallback, BaseAgent
from agentrun.agents.context import InvocationContext, new_invocation_id
from agentrun.agents.llm_agent import IncludeContents, LlmAgent
from agentrun.agents.workflow import LoopAgent, ParallelAgent, SequentialAgent

__all__ = [
    "AgentCallback",
    "BaseAgent",
    "IncludeContents",
    "InvocationContext",
    "LlmAgent",
    "LoopAgent",
    "ParallelAgent",
    "SequentialAgent",
    "new_invocation_id",
]
