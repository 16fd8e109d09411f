"""
Tools Module

Tool contract, callable wrappers, the delegation tool and the dispatcher
that executes model-requested function calls.
"""

from agentrun.tools.agent_tool import TRANSFER_PREFIX, AgentTool
from agentrun.tools.base import BaseTool, ToolContext
from agentrun.tools.builtin import (
    exit_loop,
    exit_loop_tool,
    load_memory,
    load_memory_tool,
    transfer_to_agent,
    transfer_to_agent_tool,
)
from agentrun.tools.dispatcher import dispatch_function_calls
from agentrun.tools.function_tool import FunctionTool

__all__ = [
    "TRANSFER_PREFIX",
    "AgentTool",
    "BaseTool",
    "FunctionTool",
    "ToolContext",
    "dispatch_function_calls",
    "exit_loop",
    "exit_loop_tool",
    "load_memory",
    "load_memory_tool",
    "transfer_to_agent",
    "transfer_to_agent_tool",
]
