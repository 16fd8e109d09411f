"""
LLM Agent

The model-backed leaf agent: builds a request from its instruction, the
session history and its tools, streams the backend's reply, and
dispatches any function calls the model makes.

Design decisions:
- The backend handle is resolved lazily and cached on the agent
- An empty model is inherited from the nearest LlmAgent ancestor, then
  from settings
- Function-call events are replaced by the function-response event
- output_key is written once the final event has been handed on
"""

from collections.abc import AsyncIterator, Callable
from contextlib import aclosing
from enum import Enum
from typing import Any

from agentrun.agents.base import AgentCallback, BaseAgent
from agentrun.agents.context import InvocationContext
from agentrun.config.settings import get_settings
from agentrun.core.exceptions import ModelNotFoundError
from agentrun.core.types import (
    Content,
    ContentRole,
    Event,
    GenerateContentConfig,
    LLMRequest,
)
from agentrun.models.base import BaseLLM
from agentrun.models.registry import LLMRegistry
from agentrun.observability.logging import get_logger
from agentrun.tools.agent_tool import AgentTool
from agentrun.tools.base import BaseTool
from agentrun.tools.dispatcher import dispatch_function_calls
from agentrun.tools.function_tool import FunctionTool

logger = get_logger("agentrun.agents.llm")

BeforeModelCallback = Callable[[InvocationContext, LLMRequest], Any]


class IncludeContents(str, Enum):
    """How much session history goes into the model request."""

    DEFAULT = "default"  # System instruction plus every session event
    NONE = "none"  # System instruction only


class LlmAgent(BaseAgent):
    """
    Agent backed by an inference backend.

    Usage:
        agent = LlmAgent(
            name="assistant",
            model="stub-model-v1",
            instruction="Answer briefly.",
            tools=[get_weather],
            output_key="answer",
        )
    """

    def __init__(
        self,
        name: str,
        model: str | BaseLLM = "",
        description: str = "",
        instruction: str = "",
        global_instruction: str = "",
        tools: list[BaseTool | Callable[..., Any]] | None = None,
        sub_agents: list[BaseAgent] | None = None,
        output_key: str | None = None,
        include_contents: IncludeContents = IncludeContents.DEFAULT,
        generate_content_config: GenerateContentConfig | None = None,
        before_agent_callback: AgentCallback | None = None,
        after_agent_callback: AgentCallback | None = None,
        before_model_callback: BeforeModelCallback | None = None,
        after_model_callback: AgentCallback | None = None,
        llm_registry: LLMRegistry | None = None,
    ):
        super().__init__(
            name=name,
            description=description,
            sub_agents=sub_agents,
            before_agent_callback=before_agent_callback,
            after_agent_callback=after_agent_callback,
        )
        self.model = model
        self.instruction = instruction
        self.global_instruction = global_instruction
        self.tools: list[BaseTool] = [
            t if isinstance(t, BaseTool) else FunctionTool(t) for t in tools or []
        ]
        self.output_key = output_key
        self.include_contents = include_contents
        self.generate_content_config = generate_content_config
        self.before_model_callback = before_model_callback
        self.after_model_callback = after_model_callback

        self._registry = llm_registry or LLMRegistry.with_defaults()
        self._llm: BaseLLM | None = model if isinstance(model, BaseLLM) else None

    # =========================================================================
    # Canonical views
    # =========================================================================

    @property
    def canonical_model(self) -> BaseLLM:
        """
        The backend handle this agent talks to.

        Raises:
            ModelNotFoundError: No model could be resolved.
        """
        if self._llm is not None:
            return self._llm

        if self.model:
            self._llm = self._registry.resolve(str(self.model))
            return self._llm

        ancestor = self.parent_agent
        while ancestor is not None:
            if isinstance(ancestor, LlmAgent) and ancestor.model:
                return ancestor.canonical_model
            ancestor = ancestor.parent_agent

        default_model = get_settings().llm.default_model
        if default_model:
            self._llm = self._registry.resolve(default_model)
            return self._llm

        raise ModelNotFoundError(
            f"No model configured for agent {self.name}",
            context={"agent": self.name},
        )

    @property
    def canonical_global_instruction(self) -> str:
        if self.global_instruction:
            return self.global_instruction
        root = self.root_agent
        if isinstance(root, LlmAgent):
            return root.global_instruction
        return ""

    @property
    def canonical_instruction(self) -> str:
        global_instruction = self.canonical_global_instruction
        if global_instruction:
            return global_instruction + "\n\n" + self.instruction
        return self.instruction

    @property
    def canonical_tools(self) -> list[BaseTool]:
        """Attached tools, then one delegation tool per sub-agent."""
        return [*self.tools, *(AgentTool(agent) for agent in self.sub_agents)]

    # =========================================================================
    # Request assembly
    # =========================================================================

    def build_contents(self, ctx: InvocationContext) -> list[Content]:
        contents: list[Content] = []

        instruction = self.canonical_instruction
        if instruction:
            contents.append(Content.from_text(ContentRole.SYSTEM, instruction))

        if self.include_contents == IncludeContents.DEFAULT:
            contents.extend(e.content for e in ctx.session.get_events() if e.content is not None)

        return contents

    def build_request(self, ctx: InvocationContext, model: str) -> LLMRequest:
        return LLMRequest(
            model=model,
            agent_name=self.name,
            invocation_id=ctx.invocation_id,
            contents=self.build_contents(ctx),
            config=self.generate_content_config,
            tools=[tool.to_declaration() for tool in self.canonical_tools],
        )

    # =========================================================================
    # Execution
    # =========================================================================

    async def _run_async_impl(self, ctx: InvocationContext) -> AsyncIterator[Event]:
        llm = self.canonical_model
        request = self.build_request(ctx, llm.model)

        # The callback may edit the request in place
        await self._invoke_callback("before_model_callback", self.before_model_callback, ctx, request)

        if not llm.is_connected:
            await llm.connect()

        tools_by_name = {tool.name: tool for tool in self.canonical_tools}
        logger.debug(
            "Calling model",
            agent=self.name,
            model=llm.model,
            contents=len(request.contents),
            tools=request.tool_names,
            **ctx.log_fields(),
        )

        transfer_to: str | None = None

        async with aclosing(llm.generate_content_async(request)) as stream:
            async for event in stream:
                event = self._stamp(event, ctx)

                if event.get_function_calls():
                    response = await dispatch_function_calls(
                        ctx, event, tools_by_name, author=self.name
                    )
                    if response is not None:
                        yield response
                        if response.actions.transfer_to_agent:
                            transfer_to = response.actions.transfer_to_agent
                            break
                    continue

                try:
                    yield event
                finally:
                    self._store_output(event, ctx)

        if transfer_to is not None:
            async for event in self._transfer(transfer_to, ctx):
                yield event

        await self._invoke_callback("after_model_callback", self.after_model_callback, ctx)

    async def _transfer(self, agent_name: str, ctx: InvocationContext) -> AsyncIterator[Event]:
        """Relay the stream of the agent control was handed to."""
        target = self.root_agent.find_agent(agent_name)
        if target is None or target is self:
            logger.warning(
                "Transfer target not found",
                agent=self.name,
                target=agent_name,
                **ctx.log_fields(),
            )
            return

        logger.info(
            "Transferring control", agent=self.name, target=agent_name, **ctx.log_fields()
        )
        async with aclosing(target.run_async(ctx)) as events:
            async for event in events:
                yield event

    def _stamp(self, event: Event, ctx: InvocationContext) -> Event:
        """Attribute a backend event to this agent and invocation."""
        update: dict[str, Any] = {}
        if event.author != self.name:
            update["author"] = self.name
        if event.invocation_id != ctx.invocation_id:
            update["invocation_id"] = ctx.invocation_id
        if event.branch != ctx.branch:
            update["branch"] = ctx.branch
        return event.model_copy(update=update) if update else event

    def _store_output(self, event: Event, ctx: InvocationContext) -> None:
        if not self.output_key or not event.is_final_response:
            return
        text = event.text
        if text is not None:
            ctx.session.state.set(self.output_key, text)
