"""
Stub LLM Backend

A deterministic, offline backend for tests, CI and demos.

Design decisions:
- Implements the full BaseLLM interface
- Returns scripted turns in order, then a fixed fallback reply
- Can simulate streaming (partial chunks), tool calls and failures
- Records every request it receives
- NEVER makes external network calls
"""

import asyncio
from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from typing import Any

from agentrun.core.types import (
    Content,
    ContentRole,
    Event,
    EventActions,
    FunctionCall,
    LLMRequest,
    Part,
)
from agentrun.models.base import BaseLLM


@dataclass
class StubResponse:
    """One scripted model turn."""

    text: str | None = None
    chunks: list[str] = field(default_factory=list)  # Partial events before the final one
    function_calls: list[FunctionCall] = field(default_factory=list)
    actions: EventActions | None = None
    error: Exception | None = None  # Raised after the partial chunks


class StubLLM(BaseLLM):
    """
    Deterministic backend.

    Each call to generate_content_async consumes the next scripted
    turn. Once the script is exhausted every call answers with
    ``"Stub response from <model>"``.
    """

    def __init__(
        self,
        model: str = "stub-model-v1",
        responses: list[StubResponse | str] | None = None,
        connect_error: Exception | None = None,
    ):
        super().__init__(model)
        self._script: list[StubResponse] = [
            StubResponse(text=r) if isinstance(r, str) else r for r in (responses or [])
        ]
        self._connect_error = connect_error
        self.requests: list[LLMRequest] = []
        self.connect_count = 0

    @classmethod
    def supported_models(cls) -> list[str]:
        return [r"stub-.*"]

    @property
    def call_count(self) -> int:
        return len(self.requests)

    def add_response(self, response: StubResponse | str) -> None:
        self._script.append(StubResponse(text=response) if isinstance(response, str) else response)

    async def connect(self) -> None:
        self.connect_count += 1
        if self._connect_error is not None:
            raise self._connect_error
        await super().connect()

    async def generate_content_async(self, request: LLMRequest) -> AsyncIterator[Event]:
        self.requests.append(request)
        turn = self._script.pop(0) if self._script else StubResponse(
            text=f"Stub response from {self.model}"
        )
        author = request.agent_name or self.model

        for chunk in turn.chunks:
            await asyncio.sleep(0)
            yield self._event(request, author, [Part(text=chunk)], final=False)

        if turn.error is not None:
            raise turn.error

        await asyncio.sleep(0)

        if turn.function_calls:
            parts = [Part(function_call=call) for call in turn.function_calls]
            yield self._event(request, author, parts, final=False, actions=turn.actions)
            return

        text = turn.text if turn.text is not None else "".join(turn.chunks)
        yield self._event(request, author, [Part(text=text)], final=True, actions=turn.actions)

    @staticmethod
    def _event(
        request: LLMRequest,
        author: str,
        parts: list[Part],
        *,
        final: bool,
        actions: EventActions | None = None,
    ) -> Event:
        fields: dict[str, Any] = {
            "invocation_id": request.invocation_id,
            "author": author,
            "content": Content(role=ContentRole.MODEL.value, parts=parts),
            "is_final_response": final,
        }
        if actions is not None:
            fields["actions"] = actions
        return Event(**fields)
