"""vibe-browse agent stream."""

from vibe_browse.agents.prompts import build_system_prompt
from vibe_browse.agents.stream import AgentStream

__all__ = [
    "AgentStream",
    "build_system_prompt",
]
