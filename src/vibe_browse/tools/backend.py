"""Tool execution backend.

The backend owns the declared tool catalogue and executes invocations by
name. Whatever goes wrong inside a tool stays inside the tool call: every
exception is logged and converted into an error ToolResult, so a failing
tool never ends the conversation.
"""

import json
from typing import Any

from agents import FunctionTool
from agents.tool import ToolContext
from agents.usage import Usage

from vibe_browse.core.logging import ErrorIds, logError, logEvent
from vibe_browse.models.tools import ToolInvocation, ToolResult


class ToolBackend:
    """Executes tool invocations against a fixed catalogue."""

    def __init__(self, tools: list[FunctionTool]) -> None:
        self._tools: dict[str, FunctionTool] = {}
        for tool in tools:
            if tool.name in self._tools:
                raise ValueError(f"Duplicate tool name: {tool.name}")
            self._tools[tool.name] = tool

    @property
    def tool_names(self) -> list[str]:
        return list(self._tools)

    def catalogue(self) -> list[dict[str, Any]]:
        """Tool declarations in OpenAI chat-completions format."""
        return [
            {
                "type": "function",
                "function": {
                    "name": tool.name,
                    "description": tool.description,
                    "parameters": tool.params_json_schema,
                },
            }
            for tool in self._tools.values()
        ]

    async def execute(self, invocation: ToolInvocation) -> ToolResult:
        """Run one invocation and return its result. Never raises."""
        tool = self._tools.get(invocation.name)
        if tool is None:
            logError(ErrorIds.UNKNOWN_TOOL, f"Unknown tool {invocation.name!r}")
            return ToolResult.failure(
                invocation.id,
                "UnknownTool",
                f"Unknown tool {invocation.name!r}. Available tools: {', '.join(self._tools)}",
            )

        arguments = json.dumps(invocation.arguments)
        ctx = ToolContext(
            context=None,
            usage=Usage(),
            tool_name=invocation.name,
            tool_call_id=invocation.id,
            tool_arguments=arguments,
        )
        logEvent("tool_dispatched", {"tool": invocation.name, "id": invocation.id})
        try:
            output = await tool.on_invoke_tool(ctx, arguments)
        except Exception as e:
            logError(
                ErrorIds.TOOL_EXECUTION_FAILED,
                f"{invocation.name} failed: {e}",
                exc_info=True,
                extra={"id": invocation.id},
            )
            return ToolResult.failure(invocation.id, type(e).__name__, f"Error in {invocation.name}: {e}")

        return ToolResult.success(invocation.id, output if isinstance(output, str) else json.dumps(output))
