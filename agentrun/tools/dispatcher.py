"""
Function-Call Dispatcher

Executes the function calls carried by a model event and folds the
results into one function-response event.

Design decisions:
- Calls in one event run concurrently (asyncio.gather); responses keep
  the order of the calls
- Unknown tools and tool exceptions become {"error": ...} responses so
  the model can see and react to the failure
- Every call gets its own ToolContext; their actions are merged onto
  the response event
"""

import asyncio
from typing import TYPE_CHECKING, Any

from agentrun.core.exceptions import ToolNotFoundError
from agentrun.core.types import (
    Content,
    ContentRole,
    Event,
    EventActions,
    FunctionCall,
    FunctionResponse,
    Part,
)
from agentrun.observability.logging import get_logger
from agentrun.tools.base import BaseTool, ToolContext

if TYPE_CHECKING:
    from agentrun.agents.context import InvocationContext

logger = get_logger("agentrun.tools")


def _normalize_result(result: Any) -> dict[str, Any]:
    if isinstance(result, dict):
        return result
    return {"result": result}


async def _call_tool(
    invocation_context: "InvocationContext",
    call: FunctionCall,
    tools_by_name: dict[str, BaseTool],
) -> tuple[FunctionResponse, ToolContext]:
    tool_context = ToolContext(
        invocation_context=invocation_context,
        function_call_id=call.id,
    )

    tool = tools_by_name.get(call.name)
    if tool is None:
        error = ToolNotFoundError(
            f"Tool not found: {call.name}",
            context={"available": sorted(tools_by_name)},
        )
        logger.warning(
            "Unknown tool requested", tool=call.name, **invocation_context.log_fields()
        )
        response = {"error": error.message}
    else:
        try:
            response = _normalize_result(await tool.run_async(dict(call.args), tool_context))
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning(
                "Tool execution failed",
                error=e,
                tool=call.name,
                **invocation_context.log_fields(),
            )
            response = {"error": str(e)}

    return (
        FunctionResponse(id=call.id, name=call.name, response=response),
        tool_context,
    )


async def dispatch_function_calls(
    invocation_context: "InvocationContext",
    event: Event,
    tools_by_name: dict[str, BaseTool],
    *,
    author: str,
) -> Event | None:
    """
    Run every function call in ``event``.

    Returns:
        The function-response event, or None when ``event`` carries no
        function calls.
    """
    calls = event.get_function_calls()
    if not calls:
        return None

    results = await asyncio.gather(
        *[_call_tool(invocation_context, call, tools_by_name) for call in calls]
    )

    actions = EventActions()
    parts: list[Part] = []
    for response, tool_context in results:
        parts.append(Part(function_response=response))
        actions = actions.merge(tool_context.actions)

    long_running = [
        call.id
        for call in calls
        if call.name in tools_by_name and tools_by_name[call.name].is_long_running
    ]

    logger.debug(
        "Function calls dispatched",
        tools=[call.name for call in calls],
        agent=author,
        **invocation_context.log_fields(),
    )

    return Event(
        invocation_id=invocation_context.invocation_id,
        author=author,
        branch=invocation_context.branch,
        content=Content(role=ContentRole.TOOL.value, parts=parts),
        actions=actions,
        long_running_tool_ids=long_running or None,
    )
