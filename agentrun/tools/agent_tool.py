"""
Agent Tool

The synthetic delegation tool an LlmAgent offers for each of its
sub-agents. Calling it does not run the agent; it records a transfer
request that the LlmAgent acts on after the tool event is forwarded.
"""

from typing import TYPE_CHECKING, Any

from agentrun.tools.base import BaseTool, ToolContext

if TYPE_CHECKING:
    from agentrun.agents.base import BaseAgent

TRANSFER_PREFIX = "transfer_to_"


class AgentTool(BaseTool):
    """Hand control to ``agent``."""

    def __init__(self, agent: "BaseAgent"):
        super().__init__(
            name=f"{TRANSFER_PREFIX}{agent.name}",
            description=f"Transfer to {agent.description or agent.name}",
        )
        self._agent = agent

    @property
    def agent(self) -> "BaseAgent":
        return self._agent

    async def run_async(self, args: dict[str, Any], tool_context: ToolContext) -> Any:
        tool_context.actions.transfer_to_agent = self._agent.name
        return {"result": f"Transferring to {self._agent.name}"}
