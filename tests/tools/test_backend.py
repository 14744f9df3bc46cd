"""Tests for the tool execution backend."""

import pytest
from agents import function_tool

from vibe_browse.core.errors import ToolExecutionError
from vibe_browse.models.tools import ToolInvocation
from vibe_browse.tools.backend import ToolBackend


@function_tool(failure_error_function=None)
async def echo(text: str) -> str:
    """Echo the text back.

    Args:
        text: What to echo.
    """
    return f"echo: {text}"


@function_tool(failure_error_function=None)
def refuse(reason: str) -> str:
    """Always fail with a tool error.

    Args:
        reason: Why.
    """
    raise ToolExecutionError(f"refused: {reason}")


@function_tool(failure_error_function=None)
def explode() -> str:
    """Fail with an unexpected error."""
    raise RuntimeError("kaboom")


@pytest.fixture
def backend() -> ToolBackend:
    return ToolBackend([echo, refuse, explode])


class TestCatalogue:
    def test_function_specs(self, backend: ToolBackend) -> None:
        catalogue = backend.catalogue()
        assert [entry["function"]["name"] for entry in catalogue] == ["echo", "refuse", "explode"]
        entry = catalogue[0]
        assert entry["type"] == "function"
        assert entry["function"]["description"] == "Echo the text back."
        assert "text" in entry["function"]["parameters"]["properties"]

    def test_tool_names(self, backend: ToolBackend) -> None:
        assert backend.tool_names == ["echo", "refuse", "explode"]

    def test_duplicate_names_rejected(self) -> None:
        with pytest.raises(ValueError, match="Duplicate"):
            ToolBackend([echo, echo])


class TestExecute:
    @pytest.mark.asyncio
    async def test_success(self, backend: ToolBackend) -> None:
        result = await backend.execute(ToolInvocation(id="call_1", name="echo", arguments={"text": "hi"}))
        assert result.invocation_id == "call_1"
        assert result.content == "echo: hi"
        assert not result.is_error

    @pytest.mark.asyncio
    async def test_tool_error_becomes_error_result(self, backend: ToolBackend) -> None:
        result = await backend.execute(ToolInvocation(id="call_2", name="refuse", arguments={"reason": "no"}))
        assert result.is_error
        assert result.invocation_id == "call_2"
        assert result.error_class == "ToolExecutionError"
        assert "refused: no" in result.content

    @pytest.mark.asyncio
    async def test_unexpected_error_contained(self, backend: ToolBackend) -> None:
        result = await backend.execute(ToolInvocation(id="call_3", name="explode"))
        assert result.is_error
        assert result.error_class == "RuntimeError"
        assert "kaboom" in result.content

    @pytest.mark.asyncio
    async def test_unknown_tool(self, backend: ToolBackend) -> None:
        result = await backend.execute(ToolInvocation(id="call_4", name="teleport"))
        assert result.is_error
        assert result.error_class == "UnknownTool"
        assert "teleport" in result.content
        assert "echo" in result.content

    @pytest.mark.asyncio
    async def test_invalid_arguments_contained(self, backend: ToolBackend) -> None:
        result = await backend.execute(ToolInvocation(id="call_5", name="echo", arguments={}))
        assert result.is_error
        assert result.invocation_id == "call_5"
