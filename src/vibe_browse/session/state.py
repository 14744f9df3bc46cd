"""Conversation session state."""

from dataclasses import dataclass, field

from vibe_browse.models.turn import Role, Turn


@dataclass
class SessionState:
    """Flags and transcript for one conversation.

    ``awaiting_user_input`` is true only between the end of an agent turn and
    the next human submission; the controller never reads the console
    otherwise.
    """

    session_id: str = "default"
    conversation_active: bool = False
    awaiting_user_input: bool = False
    turns: list[Turn] = field(default_factory=list)

    def begin(self) -> None:
        self.conversation_active = True
        self.awaiting_user_input = False

    def end(self) -> None:
        self.conversation_active = False
        self.awaiting_user_input = False

    def turn_complete(self) -> None:
        """Hand control back to the human."""
        if self.conversation_active:
            self.awaiting_user_input = True

    def add_turn(self, role: Role, content: str) -> Turn:
        turn = Turn(role=role, content=content, sequence=len(self.turns), session_id=self.session_id)
        self.turns.append(turn)
        return turn
