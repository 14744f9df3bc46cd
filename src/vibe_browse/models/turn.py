"""Conversation turn model."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, field_validator

Role = Literal["user", "agent"]


class Turn(BaseModel):
    """One message in the user/agent conversation.

    Turns are immutable; the ordered list of turns is the whole persisted
    state of a conversation.

    Attributes:
        role: Who produced the turn.
        content: The message text.
        sequence: Position in the conversation, starting at 0.
        session_id: Identifier of the conversation the turn belongs to.
    """

    model_config = ConfigDict(frozen=True)

    role: Role
    content: str
    sequence: int = 0
    session_id: str = "default"

    @field_validator("sequence")
    @classmethod
    def must_be_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"must be non-negative, got {v}")
        return v
