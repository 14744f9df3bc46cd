"""Session configuration.

Configuration comes from environment variables with command-line overrides
layered on top. The agent service is reached through OpenRouter's
OpenAI-compatible API, so the only required setting is OPENROUTER_API_KEY.
"""

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from vibe_browse.core.errors import MissingCredentialError

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"

# Default model for the conversational agent
DEFAULT_MODEL = "anthropic/claude-sonnet-4"

API_KEY_ENV = "OPENROUTER_API_KEY"
MODEL_ENV = "VIBE_BROWSE_MODEL"
TOOL_MODEL_ENV = "VIBE_BROWSE_TOOL_MODEL"
BROWSER_EXECUTABLE_ENV = "VIBE_BROWSE_CHROME"


class SessionConfig(BaseModel):
    """Immutable settings for one session.

    Attributes:
        api_key: Credential for the agent service.
        base_url: OpenAI-compatible endpoint for the agent service.
        model: Model identifier for the conversational agent.
        tool_model: Model identifier the browser tools use to interpret
                    natural-language actions (defaults to ``model``).
        root: Working root; the agent's files and browser profile live here.
        max_turns: Maximum model calls per user turn before control returns
                   to the human.
        cdp_port: Local port for the browser's remote debugging endpoint.
        headless: Launch the browser without a visible window.
        poll_attempts: Readiness poll bound.
        poll_interval: Seconds between readiness poll attempts.
        browser_executable: Explicit browser binary, skipping discovery.
        display_cap: Characters of tool output shown before eliding.
    """

    model_config = ConfigDict(frozen=True)

    api_key: str = Field(min_length=1)
    base_url: str = OPENROUTER_BASE_URL
    model: str = DEFAULT_MODEL
    tool_model: str = DEFAULT_MODEL
    root: Path = Path("agent")
    max_turns: int = Field(default=100, ge=1)
    cdp_port: int = Field(default=9222, gt=0, lt=65536)
    headless: bool = False
    poll_attempts: int = Field(default=50, ge=1)
    poll_interval: float = Field(default=0.2, gt=0)
    browser_executable: str | None = None
    display_cap: int = Field(default=600, gt=0)


def load_config(
    root: Path | str | None = None,
    environ: dict[str, str] | None = None,
    **overrides: Any,
) -> SessionConfig:
    """Build the session configuration from the environment.

    Args:
        root: Working root directory. Defaults to ``./agent``.
        environ: Environment mapping (defaults to ``os.environ``).
        **overrides: Explicit values (from the CLI) that take precedence.
                     ``None`` values are ignored.

    Returns:
        A frozen SessionConfig.

    Raises:
        MissingCredentialError: If OPENROUTER_API_KEY is not set.
    """
    env = os.environ if environ is None else environ

    api_key = env.get(API_KEY_ENV, "").strip()
    if not api_key:
        raise MissingCredentialError(
            f"{API_KEY_ENV} environment variable must be set. "
            "Get one at https://openrouter.ai/keys"
        )

    overrides = {key: value for key, value in overrides.items() if value is not None}
    model = overrides.pop("model", None) or env.get(MODEL_ENV) or DEFAULT_MODEL
    tool_model = overrides.pop("tool_model", None) or env.get(TOOL_MODEL_ENV) or model

    values: dict[str, Any] = {
        "api_key": api_key,
        "model": model,
        "tool_model": tool_model,
        "root": Path(root) if root is not None else Path.cwd() / "agent",
        "browser_executable": env.get(BROWSER_EXECUTABLE_ENV) or None,
    }
    values.update(overrides)
    return SessionConfig(**values)
