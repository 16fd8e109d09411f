"""
Unit Tests - Tools

Tests for FunctionTool, AgentTool, the built-in tools and the dispatcher.
"""

import asyncio

import pytest

from agentrun.core.exceptions import ToolExecutionError
from agentrun.core.types import Content, Event, FunctionCall, Part
from agentrun.memory import InMemoryMemoryService
from agentrun.sessions import Session
from agentrun.tools import (
    AgentTool,
    FunctionTool,
    ToolContext,
    dispatch_function_calls,
    exit_loop_tool,
    load_memory_tool,
    transfer_to_agent_tool,
)

from tests.fixtures import ScriptedAgent, make_context


def call_event(*calls: FunctionCall) -> Event:
    return Event(
        author="model",
        content=Content(role="model", parts=[Part(function_call=c) for c in calls]),
    )


def add(a: int, b: int = 0) -> int:
    """Add two numbers."""
    return a + b


async def slow_echo(text: str, delay: float = 0.0) -> str:
    await asyncio.sleep(delay)
    return text


class TestFunctionTool:
    """Tests for FunctionTool."""

    def test_schema_from_signature(self):
        """Test schema extraction."""
        tool = FunctionTool(add)

        assert tool.name == "add"
        assert tool.description == "Add two numbers."
        assert tool.parameters == {
            "type": "object",
            "properties": {"a": {"type": "integer"}, "b": {"type": "integer"}},
            "required": ["a"],
        }

    def test_tool_context_hidden_from_schema(self):
        """Test that tool_context is not a model-facing parameter."""
        schema = exit_loop_tool.parameters
        assert "tool_context" not in schema["properties"]

    def test_optional_and_list_types(self):
        """Test Optional and list hints."""

        def search(query: str, limit: int | None = None, tags: list[str] | None = None):
            return []

        props = FunctionTool(search).parameters["properties"]

        assert props["limit"] == {"type": "integer"}
        assert props["tags"] == {"type": "array", "items": {"type": "string"}}

    def test_declaration(self):
        """Test the declaration handed to the model."""
        declaration = FunctionTool(add, name="plus", description="Sum").to_declaration()

        assert declaration["name"] == "plus"
        assert declaration["description"] == "Sum"
        assert "parameters" in declaration

    @pytest.mark.asyncio
    async def test_run_sync_function(self, ctx):
        """Test that sync functions run."""
        result = await FunctionTool(add).run_async({"a": 2, "b": 3}, ToolContext(ctx, "c1"))
        assert result == 5

    @pytest.mark.asyncio
    async def test_run_async_function(self, ctx):
        """Test that async functions are awaited."""
        result = await FunctionTool(slow_echo).run_async({"text": "hi"}, ToolContext(ctx, "c1"))
        assert result == "hi"

    @pytest.mark.asyncio
    async def test_missing_argument(self, ctx):
        """Test that missing required arguments raise."""
        with pytest.raises(ToolExecutionError) as exc_info:
            await FunctionTool(add).run_async({}, ToolContext(ctx, "c1"))
        assert exc_info.value.tool_name == "add"


class TestAgentTool:
    """Tests for the delegation tool."""

    def test_naming(self):
        """Test the transfer_to_ naming convention."""
        tool = AgentTool(ScriptedAgent("billing", description="billing questions"))

        assert tool.name == "transfer_to_billing"
        assert tool.description == "Transfer to billing questions"

    @pytest.mark.asyncio
    async def test_sets_transfer_action(self, ctx):
        """Test that calling the tool records a transfer."""
        tool_context = ToolContext(ctx, "c1")
        await AgentTool(ScriptedAgent("billing")).run_async({}, tool_context)

        assert tool_context.actions.transfer_to_agent == "billing"


class TestBuiltinTools:
    """Tests for built-in tools."""

    @pytest.mark.asyncio
    async def test_exit_loop(self, ctx):
        """Test that exit_loop sets the loop-exit action."""
        tool_context = ToolContext(ctx, "c1")
        await exit_loop_tool.run_async({}, tool_context)

        assert tool_context.actions.exit_loop is True

    @pytest.mark.asyncio
    async def test_transfer_to_agent(self, ctx):
        """Test the generic transfer tool."""
        tool_context = ToolContext(ctx, "c1")
        await transfer_to_agent_tool.run_async({"agent_name": "x"}, tool_context)

        assert tool_context.actions.transfer_to_agent == "x"

    @pytest.mark.asyncio
    async def test_load_memory(self):
        """Test that load_memory searches this user's memory."""
        memory = InMemoryMemoryService()
        past = Session(app_name="test-app", user_id="test-user")
        past.add_event(Event(author="user", content=Content.from_text("user", "my cat is Tom")))
        await memory.add_session_to_memory(past)

        ctx = make_context(memory_service=memory)
        result = await load_memory_tool.run_async({"query": "cat"}, ToolContext(ctx, "c1"))

        assert len(result["memories"]) == 1

    @pytest.mark.asyncio
    async def test_load_memory_without_service(self, ctx):
        """Test the error response when no memory service is configured."""
        result = await load_memory_tool.run_async({"query": "x"}, ToolContext(ctx, "c1"))
        assert "error" in result


class TestDispatcher:
    """Tests for dispatch_function_calls."""

    @pytest.mark.asyncio
    async def test_no_calls(self, ctx):
        """Test that an event without calls yields nothing."""
        assert await dispatch_function_calls(ctx, Event(author="m"), {}, author="a") is None

    @pytest.mark.asyncio
    async def test_responses_keep_call_order(self, ctx):
        """Test that concurrent calls answer in call order."""
        tool = FunctionTool(slow_echo)
        slow = FunctionCall(id="c1", name="slow_echo", args={"text": "slow", "delay": 0.02})
        fast = FunctionCall(id="c2", name="slow_echo", args={"text": "fast"})

        event = await dispatch_function_calls(
            ctx, call_event(slow, fast), {"slow_echo": tool}, author="agent"
        )

        responses = event.get_function_responses()
        assert [r.id for r in responses] == ["c1", "c2"]
        assert [r.response for r in responses] == [{"result": "slow"}, {"result": "fast"}]
        assert event.author == "agent"
        assert event.content.role == "tool"

    @pytest.mark.asyncio
    async def test_errors_become_responses(self, ctx):
        """Test that unknown tools and failures do not raise."""

        def broken():
            raise ValueError("kaput")

        event = await dispatch_function_calls(
            ctx,
            call_event(FunctionCall(name="nope"), FunctionCall(name="broken")),
            {"broken": FunctionTool(broken)},
            author="agent",
        )

        responses = [r.response for r in event.get_function_responses()]
        assert "nope" in responses[0]["error"]
        assert responses[1] == {"error": "kaput"}

    @pytest.mark.asyncio
    async def test_actions_merged(self, ctx):
        """Test that tool actions ride on the response event."""
        event = await dispatch_function_calls(
            ctx,
            call_event(FunctionCall(name="exit_loop")),
            {"exit_loop": exit_loop_tool},
            author="agent",
        )
        assert event.actions.exit_loop is True

    @pytest.mark.asyncio
    async def test_long_running_ids(self, ctx):
        """Test that long-running calls are flagged."""
        tool = FunctionTool(add, name="job", is_long_running=True)
        call = FunctionCall(id="job-1", name="job", args={"a": 1})

        event = await dispatch_function_calls(ctx, call_event(call), {"job": tool}, author="a")

        assert event.long_running_tool_ids == ["job-1"]
