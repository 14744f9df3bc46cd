"""Shared test fixtures for vibe_browse tests."""

import json
from pathlib import Path
from types import SimpleNamespace
from typing import Any, Callable
from unittest.mock import AsyncMock, MagicMock

import pytest

from vibe_browse.core.registry import ElementRegistry
from vibe_browse.core.workspace import WorkspaceLayout, ensure_directories
from vibe_browse.models.element import InteractiveElement


@pytest.fixture
def sample_element() -> InteractiveElement:
    return InteractiveElement(ref="elem-0", role="button", name="Submit")


@pytest.fixture
def registry() -> ElementRegistry:
    return ElementRegistry()


@pytest.fixture
def workspace(tmp_path: Path) -> WorkspaceLayout:
    return ensure_directories(tmp_path / "agent")


def _completion(content: str | None = None, tool_calls: list[tuple[str, str, dict[str, Any]]] | None = None) -> Any:
    calls = [
        SimpleNamespace(
            id=call_id,
            type="function",
            function=SimpleNamespace(name=name, arguments=json.dumps(arguments)),
        )
        for call_id, name, arguments in tool_calls or []
    ]
    message = SimpleNamespace(content=content, tool_calls=calls or None)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


@pytest.fixture
def make_completion() -> Callable[..., Any]:
    """Build a chat-completions response: make_completion(text, [(id, name, args), ...])."""
    return _completion


@pytest.fixture
def mock_client() -> MagicMock:
    """AsyncOpenAI stand-in; set ``chat.completions.create.side_effect`` per test."""
    client = MagicMock()
    client.chat.completions.create = AsyncMock()
    return client
