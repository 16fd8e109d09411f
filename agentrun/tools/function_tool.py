"""
Function Tool

Wraps a plain Python callable as a tool. The argument schema is built
from the signature and type hints; a parameter named ``tool_context``
receives the ToolContext instead of a model-supplied argument.
"""

import asyncio
import inspect
import types
import typing
from collections.abc import Callable
from typing import Any, get_type_hints

from agentrun.core.exceptions import ToolExecutionError
from agentrun.tools.base import BaseTool, ToolContext

_CONTEXT_PARAM = "tool_context"


def _type_to_schema(python_type: Any) -> dict[str, Any]:
    """Convert a Python type hint to JSON Schema."""
    origin = typing.get_origin(python_type)

    if origin in (typing.Union, types.UnionType):
        non_none = [a for a in typing.get_args(python_type) if a is not type(None)]
        if len(non_none) == 1:
            return _type_to_schema(non_none[0])
        return {"anyOf": [_type_to_schema(a) for a in non_none]}

    if origin is list:
        args = typing.get_args(python_type)
        return {"type": "array", "items": _type_to_schema(args[0] if args else str)}

    if origin is dict:
        return {"type": "object"}

    type_map = {
        str: {"type": "string"},
        int: {"type": "integer"},
        float: {"type": "number"},
        bool: {"type": "boolean"},
        list: {"type": "array"},
        dict: {"type": "object"},
    }

    return type_map.get(python_type, {"type": "string"})


def _extract_schema(func: Callable[..., Any]) -> dict[str, Any]:
    """Build the JSON Schema of a function's model-facing parameters."""
    sig = inspect.signature(func)
    try:
        hints = get_type_hints(func)
    except (NameError, TypeError):
        hints = {}

    properties: dict[str, Any] = {}
    required: list[str] = []

    for param_name, param in sig.parameters.items():
        if param_name in ("self", "cls", _CONTEXT_PARAM):
            continue
        if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            continue

        properties[param_name] = _type_to_schema(hints.get(param_name, str))
        if param.default is inspect.Parameter.empty:
            required.append(param_name)

    return {"type": "object", "properties": properties, "required": required}


class FunctionTool(BaseTool):
    """
    Tool backed by a sync or async function.

    Sync functions run in a worker thread so they cannot stall the
    event loop driving the other agents.
    """

    def __init__(
        self,
        func: Callable[..., Any],
        *,
        name: str | None = None,
        description: str | None = None,
        is_long_running: bool = False,
    ):
        super().__init__(
            name=name or func.__name__,
            description=description or inspect.getdoc(func) or f"Execute {func.__name__}",
            is_long_running=is_long_running,
        )
        self._func = func
        self._signature = inspect.signature(func)
        self._parameters = _extract_schema(func)

    @property
    def func(self) -> Callable[..., Any]:
        return self._func

    @property
    def parameters(self) -> dict[str, Any]:
        return self._parameters

    async def run_async(self, args: dict[str, Any], tool_context: ToolContext) -> Any:
        missing = [p for p in self._parameters["required"] if p not in args]
        if missing:
            raise ToolExecutionError(
                f"Missing required arguments: {', '.join(missing)}",
                tool_name=self.name,
                context={"args": args},
            )

        accepted = self._signature.parameters
        kwargs = {k: v for k, v in args.items() if k in accepted and k != _CONTEXT_PARAM}
        if _CONTEXT_PARAM in accepted:
            kwargs[_CONTEXT_PARAM] = tool_context

        if inspect.iscoroutinefunction(self._func):
            return await self._func(**kwargs)

        result = await asyncio.to_thread(self._func, **kwargs)
        if inspect.isawaitable(result):
            result = await result
        return result
