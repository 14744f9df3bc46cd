"""Events emitted by the agent stream.

The stream produces three kinds of events, in order:

- AssistantMessage: model output, text and/or tool invocations.
- ToolResultMessage: the results that were fed back for the previous
  AssistantMessage's invocations.
- SessionResult: the agent finished its turn; control returns to the human.
"""

from typing import Literal, Union

from pydantic import BaseModel, ConfigDict

from vibe_browse.models.tools import ToolInvocation, ToolResult


class AssistantMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["assistant"] = "assistant"
    text: str = ""
    tool_invocations: list[ToolInvocation] = []


class ToolResultMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["user"] = "user"
    results: list[ToolResult]


class SessionResult(BaseModel):
    """End of one agent turn.

    Attributes:
        subtype: "success" or "error_max_turns".
        result: Final assistant text for the turn.
        num_turns: Model calls made during the turn.
    """

    model_config = ConfigDict(frozen=True)

    type: Literal["result"] = "result"
    subtype: Literal["success", "error_max_turns"] = "success"
    result: str = ""
    num_turns: int = 0


AgentEvent = Union[AssistantMessage, ToolResultMessage, SessionResult]
