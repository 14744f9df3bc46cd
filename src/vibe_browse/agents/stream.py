"""Agent event stream backed by OpenRouter chat completions.

The stream is a conversation with the agent model. Callers put user Turns and
ToolResultBatches on an inbound queue and consume events from ``run()``:

1. A user Turn starts an agent turn. The model is called with the full
   message history and the declared tool catalogue.
2. Each model reply is yielded as an AssistantMessage. If it requests tools,
   the stream waits for a ToolResultBatch answering exactly those
   invocations, yields it back as a ToolResultMessage and calls the model
   again.
3. A reply without tool requests ends the agent turn with a SessionResult.
   Reaching ``max_turns`` model calls ends it with ``error_max_turns``.

The stream never executes tools itself.
"""

import asyncio
import json
from collections.abc import AsyncIterator
from typing import Any

from openai import AsyncOpenAI

from vibe_browse.core.errors import AgentStreamError
from vibe_browse.core.logging import ErrorIds, logError, logEvent, logForDebugging
from vibe_browse.models.events import (
    AgentEvent,
    AssistantMessage,
    SessionResult,
    ToolResultMessage,
)
from vibe_browse.models.tools import ToolInvocation, ToolResult, ToolResultBatch
from vibe_browse.models.turn import Turn

Inbound = Turn | ToolResultBatch | None


class AgentStream:
    """Stateful agent conversation over an inbound queue."""

    def __init__(
        self,
        client: AsyncOpenAI,
        model: str,
        tools: list[dict[str, Any]],
        system_prompt: str,
        max_turns: int = 100,
        session_id: str = "default",
    ) -> None:
        """Initialize the stream.

        Args:
            client: The AsyncOpenAI client.
            model: Agent model identifier.
            tools: Tool catalogue in chat-completions format.
            system_prompt: Instructions registered once for the session.
            max_turns: Model calls allowed per agent turn.
            session_id: Identifier attached to log events.
        """
        if max_turns < 1:
            raise ValueError(f"max_turns must be at least 1, got {max_turns}")
        self._client = client
        self._model = model
        self._tools = tools
        self._max_turns = max_turns
        self._session_id = session_id
        self._messages: list[dict[str, Any]] = [{"role": "system", "content": system_prompt}]

    @property
    def messages(self) -> list[dict[str, Any]]:
        return list(self._messages)

    async def run(self, inbox: "asyncio.Queue[Inbound]") -> AsyncIterator[AgentEvent]:
        """Yield agent events until ``None`` arrives on the inbox."""
        while True:
            item = await inbox.get()
            if item is None:
                logForDebugging("Agent stream closed by caller")
                return
            if not isinstance(item, Turn) or item.role != "user":
                raise AgentStreamError(f"Expected a user turn, got {type(item).__name__}")

            self._messages.append({"role": "user", "content": item.content})
            logEvent("turn_submitted", {"session_id": self._session_id, "sequence": item.sequence})

            text = ""
            num_turns = 0
            finished = False
            while num_turns < self._max_turns:
                reply = await self._complete()
                num_turns += 1
                text = reply.text
                self._messages.append(_assistant_entry(reply))
                yield reply

                if not reply.tool_invocations:
                    finished = True
                    break

                batch = await inbox.get()
                if batch is None:
                    logForDebugging("Agent stream closed while tool results were pending")
                    return
                self._accept_results(reply.tool_invocations, batch)
                yield ToolResultMessage(results=batch.results)

            if finished:
                yield SessionResult(result=text, num_turns=num_turns)
            else:
                logForDebugging(f"Agent turn stopped after {num_turns} model calls", level="warning")
                yield SessionResult(subtype="error_max_turns", result=text, num_turns=num_turns)

    async def _complete(self) -> AssistantMessage:
        kwargs: dict[str, Any] = {"model": self._model, "messages": self._messages}
        if self._tools:
            kwargs["tools"] = self._tools
        try:
            response = await self._client.chat.completions.create(**kwargs)
        except Exception as e:
            logError(ErrorIds.LLM_API_ERROR, f"Agent model call failed: {e}", exc_info=True)
            raise

        if not response.choices:
            logError(ErrorIds.LLM_MALFORMED_RESPONSE, "Agent model returned empty choices list")
            raise AgentStreamError("The agent model returned no choices.")

        message = response.choices[0].message
        invocations = [_invocation(call) for call in message.tool_calls or []]
        return AssistantMessage(text=(message.content or "").strip(), tool_invocations=invocations)

    def _accept_results(self, pending: list[ToolInvocation], batch: Any) -> None:
        if not isinstance(batch, ToolResultBatch):
            raise AgentStreamError(f"Expected tool results, got {type(batch).__name__}")
        expected = [invocation.id for invocation in pending]
        if batch.invocation_ids != expected:
            logError(
                ErrorIds.AGENT_STREAM_FAILED,
                "Tool results do not match pending invocations",
                extra={"expected": expected, "received": batch.invocation_ids},
            )
            raise AgentStreamError(
                f"Tool results {batch.invocation_ids} do not answer pending invocations {expected}"
            )
        for result in batch.results:
            self._messages.append(
                {
                    "role": "tool",
                    "tool_call_id": result.invocation_id,
                    "content": _result_content(result),
                }
            )


def _invocation(call: Any) -> ToolInvocation:
    raw = call.function.arguments or "{}"
    try:
        arguments = json.loads(raw)
    except json.JSONDecodeError:
        logError(
            ErrorIds.LLM_MALFORMED_RESPONSE,
            f"Malformed arguments for {call.function.name}: {raw[:200]!r}",
        )
        arguments = {}
    if not isinstance(arguments, dict):
        arguments = {}
    return ToolInvocation(id=call.id, name=call.function.name, arguments=arguments)


def _assistant_entry(reply: AssistantMessage) -> dict[str, Any]:
    entry: dict[str, Any] = {"role": "assistant", "content": reply.text or None}
    if reply.tool_invocations:
        entry["tool_calls"] = [
            {
                "id": invocation.id,
                "type": "function",
                "function": {
                    "name": invocation.name,
                    "arguments": json.dumps(invocation.arguments),
                },
            }
            for invocation in reply.tool_invocations
        ]
    return entry


def _result_content(result: ToolResult) -> str:
    if result.is_error:
        return f"Error ({result.error_class}): {result.content}"
    return result.content
