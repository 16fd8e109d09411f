"""
Models Module

Inference backend contract, the backend registry, and the offline stub.
"""

from agentrun.models.base import BaseLLM
from agentrun.models.registry import LLMFactory, LLMRegistry
from agentrun.models.stub import StubLLM, StubResponse

__all__ = [
    "BaseLLM",
    "LLMFactory",
    "LLMRegistry",
    "StubLLM",
    "StubResponse",
]
