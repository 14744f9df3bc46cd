"""vibe-browse conversation session."""

from vibe_browse.session.controller import ConversationController
from vibe_browse.session.policy import (
    MUTATING_TOOLS,
    SCRIPT_EXTENSIONS,
    ActionPolicy,
    PolicyDecision,
    is_script_path,
)
from vibe_browse.session.state import SessionState

__all__ = [
    "MUTATING_TOOLS",
    "SCRIPT_EXTENSIONS",
    "ActionPolicy",
    "ConversationController",
    "PolicyDecision",
    "SessionState",
    "is_script_path",
]
