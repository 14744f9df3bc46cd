"""Tool invocation and result models.

Every ToolInvocation the agent emits is answered by exactly one ToolResult
carrying the same correlation id. A result is either a success payload or an
error payload; the constructors below are the only intended way to build one.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

POLICY_VIOLATION = "PolicyViolation"


class ToolInvocation(BaseModel):
    """A request from the agent to run a named tool.

    Attributes:
        id: Correlation id linking the invocation to its result.
        name: Tool name from the declared catalogue.
        arguments: Decoded JSON argument object.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    name: str
    arguments: dict[str, Any] = {}


class ToolResult(BaseModel):
    """Outcome of exactly one ToolInvocation.

    Attributes:
        invocation_id: Id of the invocation this result answers.
        content: Result text (success payload or error message).
        is_error: True for error payloads.
        error_class: Short error category for error payloads.
    """

    model_config = ConfigDict(frozen=True)

    invocation_id: str
    content: str
    is_error: bool = False
    error_class: str | None = None

    @classmethod
    def success(cls, invocation_id: str, content: str) -> "ToolResult":
        return cls(invocation_id=invocation_id, content=content)

    @classmethod
    def failure(cls, invocation_id: str, error_class: str, message: str) -> "ToolResult":
        return cls(
            invocation_id=invocation_id,
            content=message,
            is_error=True,
            error_class=error_class,
        )

    @classmethod
    def blocked(cls, invocation_id: str, reason: str) -> "ToolResult":
        """Synthetic result for an invocation the policy gate refused."""
        return cls.failure(invocation_id, POLICY_VIOLATION, reason)


class ToolResultBatch(BaseModel):
    """Results for one assistant message's invocations, in invocation order."""

    model_config = ConfigDict(frozen=True)

    results: list[ToolResult]

    @property
    def invocation_ids(self) -> list[str]:
        return [result.invocation_id for result in self.results]
