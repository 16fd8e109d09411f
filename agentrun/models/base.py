"""
Base LLM Backend

Defines the abstract interface for inference backends.

Design decisions:
- Async-first: generation is an async generator of Events
- Setup is split out (connect) so it can fail before any event
- Provider-agnostic: the engine only sees LLMRequest in, Events out
- supported_models() lets a registry route identifiers to classes
"""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator

from agentrun.core.types import Event, LLMRequest


class BaseLLM(ABC):
    """
    Abstract base class for inference backends.

    One instance serves one model identifier and is shared by every
    agent that resolves that identifier through the same registry.
    """

    def __init__(self, model: str):
        self._model = model
        self._connected = False

    @property
    def model(self) -> str:
        return self._model

    @property
    def is_connected(self) -> bool:
        return self._connected

    @classmethod
    def supported_models(cls) -> list[str]:
        """Regex patterns of model identifiers this class can serve."""
        return []

    async def connect(self) -> None:
        """
        Establish the backend connection.

        Called once before the first generation. Raise LLMConnectionError
        on failure.
        """
        self._connected = True

    @abstractmethod
    def generate_content_async(self, request: LLMRequest) -> AsyncIterator[Event]:
        """
        Stream the events for one request.

        The last event of a turn has ``is_final_response=True``. May raise
        before the first event (setup) or mid-stream.
        """

    async def close(self) -> None:
        """Release backend resources."""
        self._connected = False

    def __repr__(self) -> str:
        return f"{type(self).__name__}(model={self._model!r})"
