"""vibe-browse data models."""

from vibe_browse.models.element import InteractiveElement
from vibe_browse.models.events import (
    AgentEvent,
    AssistantMessage,
    SessionResult,
    ToolResultMessage,
)
from vibe_browse.models.tools import ToolInvocation, ToolResult, ToolResultBatch
from vibe_browse.models.turn import Role, Turn

__all__ = [
    "AgentEvent",
    "AssistantMessage",
    "InteractiveElement",
    "Role",
    "SessionResult",
    "ToolInvocation",
    "ToolResult",
    "ToolResultBatch",
    "ToolResultMessage",
    "Turn",
]
