"""Tests for SessionState."""

from vibe_browse.session.state import SessionState


def test_lifecycle() -> None:
    state = SessionState()
    assert not state.conversation_active

    state.begin()
    assert state.conversation_active
    assert not state.awaiting_user_input

    state.turn_complete()
    assert state.awaiting_user_input

    state.end()
    assert not state.conversation_active
    assert not state.awaiting_user_input


def test_turn_complete_after_end_does_not_solicit_input() -> None:
    state = SessionState()
    state.begin()
    state.end()
    state.turn_complete()
    assert not state.awaiting_user_input


def test_add_turn_sequences() -> None:
    state = SessionState(session_id="s1")
    first = state.add_turn("user", "hello")
    second = state.add_turn("agent", "hi")

    assert (first.sequence, second.sequence) == (0, 1)
    assert first.session_id == "s1"
    assert state.turns == [first, second]
