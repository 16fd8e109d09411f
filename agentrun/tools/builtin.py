"""
Built-in Tools

Small tools that act on the invocation rather than the outside world.
"""

from typing import Any

from agentrun.tools.base import ToolContext
from agentrun.tools.function_tool import FunctionTool


def exit_loop(tool_context: ToolContext) -> dict[str, Any]:
    """Stop the enclosing loop agent. Call only when the task is complete."""
    tool_context.actions.exit_loop = True
    return {"result": "Loop exit requested"}


def transfer_to_agent(agent_name: str, tool_context: ToolContext) -> dict[str, Any]:
    """Hand the conversation to the agent named ``agent_name``."""
    tool_context.actions.transfer_to_agent = agent_name
    return {"result": f"Transferring to {agent_name}"}


async def load_memory(query: str, tool_context: ToolContext) -> dict[str, Any]:
    """Search this user's long-term memory for ``query``."""
    ctx = tool_context.invocation_context
    if ctx.memory_service is None:
        return {"error": "No memory service configured"}

    response = await ctx.memory_service.search_memory(
        app_name=ctx.session.app_name,
        user_id=ctx.session.user_id,
        query=query,
    )
    return {"memories": [m.model_dump(mode="json") for m in response.memories]}


exit_loop_tool = FunctionTool(exit_loop)
transfer_to_agent_tool = FunctionTool(transfer_to_agent)
load_memory_tool = FunctionTool(load_memory)
