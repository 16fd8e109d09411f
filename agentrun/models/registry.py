"""
LLM Registry

Maps model identifiers to backend handles.

Design decisions:
- Explicit, injectable object rather than module-level state, so tests
  and applications can hold isolated registries
- Factories are matched by full-match regex, most recent registration
  first, so callers can override a built-in pattern
- One handle per identifier: resolve() caches, and the cache is guarded
  so concurrent first resolutions still build only one handle
"""

import re
from collections.abc import Callable
from threading import RLock

from agentrun.core.exceptions import ModelNotFoundError
from agentrun.models.base import BaseLLM

LLMFactory = Callable[[str], BaseLLM]


class LLMRegistry:
    """
    Registry of backend factories plus a cache of resolved handles.

    Usage:
        registry = LLMRegistry.with_defaults()
        registry.register(r"my-model-.*", MyLLM)
        llm = registry.resolve("my-model-large")
    """

    def __init__(self):
        self._factories: list[tuple[re.Pattern[str], LLMFactory]] = []
        self._instances: dict[str, BaseLLM] = {}
        self._lock = RLock()

    @classmethod
    def with_defaults(cls) -> "LLMRegistry":
        """Registry with the offline stub backend pre-registered."""
        from agentrun.models.stub import StubLLM

        registry = cls()
        registry.register_llm(StubLLM)
        return registry

    def register(self, pattern: str, factory: LLMFactory) -> None:
        """Route identifiers fully matching ``pattern`` to ``factory``."""
        with self._lock:
            self._factories.insert(0, (re.compile(pattern), factory))

    def register_llm(self, llm_class: type[BaseLLM]) -> None:
        """Register a BaseLLM subclass under all of its supported patterns."""
        for pattern in llm_class.supported_models():
            self.register(pattern, llm_class)

    def resolve(self, model: str) -> BaseLLM:
        """
        Return the handle for ``model``, building it on first use.

        Raises:
            ModelNotFoundError: No registered pattern matches.
        """
        if not model:
            raise ModelNotFoundError("No model identifier given")

        with self._lock:
            instance = self._instances.get(model)
            if instance is not None:
                return instance

            for pattern, factory in self._factories:
                if pattern.fullmatch(model):
                    instance = factory(model)
                    self._instances[model] = instance
                    return instance

        raise ModelNotFoundError(
            f"Unsupported model: {model}",
            context={"model": model, "patterns": self.patterns},
        )

    def is_registered(self, model: str) -> bool:
        with self._lock:
            return any(p.fullmatch(model) for p, _ in self._factories)

    @property
    def patterns(self) -> list[str]:
        with self._lock:
            return [p.pattern for p, _ in self._factories]

    def clear_cache(self) -> None:
        """Forget resolved handles; factories stay registered."""
        with self._lock:
            self._instances.clear()
