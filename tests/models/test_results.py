"""Tests for tool invocation/result models and agent events."""

import pytest
from pydantic import ValidationError

from vibe_browse.models.events import AssistantMessage, SessionResult, ToolResultMessage
from vibe_browse.models.tools import POLICY_VIOLATION, ToolInvocation, ToolResult, ToolResultBatch


class TestToolInvocation:
    def test_defaults(self) -> None:
        invocation = ToolInvocation(id="call_1", name="screenshot")
        assert invocation.arguments == {}

    def test_empty_id_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ToolInvocation(id="", name="navigate")


class TestToolResult:
    def test_success(self) -> None:
        result = ToolResult.success("call_1", "done")
        assert not result.is_error
        assert result.error_class is None

    def test_failure(self) -> None:
        result = ToolResult.failure("call_1", "ToolExecutionError", "boom")
        assert result.is_error
        assert result.error_class == "ToolExecutionError"
        assert result.content == "boom"

    def test_blocked(self) -> None:
        result = ToolResult.blocked("call_1", "use custom_scripts")
        assert result.is_error
        assert result.error_class == POLICY_VIOLATION

    def test_batch_ids_in_order(self) -> None:
        batch = ToolResultBatch(results=[ToolResult.success("b", ""), ToolResult.success("a", "")])
        assert batch.invocation_ids == ["b", "a"]


class TestEvents:
    def test_type_tags(self) -> None:
        assert AssistantMessage().type == "assistant"
        assert ToolResultMessage(results=[]).type == "user"
        assert SessionResult().type == "result"

    def test_session_result_subtype(self) -> None:
        assert SessionResult().subtype == "success"
        with pytest.raises(ValidationError):
            SessionResult(subtype="crashed")  # type: ignore[arg-type]
