"""vibe-browse core components."""

from vibe_browse.core.browser import (
    BrowserHandle,
    BrowserState,
    BrowserSupervisor,
    find_browser_executable,
)
from vibe_browse.core.config import SessionConfig, load_config
from vibe_browse.core.errors import (
    AgentStreamError,
    BrowserNotFoundError,
    BrowserReadinessTimeout,
    BrowserStartupError,
    MissingCredentialError,
    ToolExecutionError,
    VibeBrowseError,
)
from vibe_browse.core.polling import poll_until_ready
from vibe_browse.core.registry import ElementRegistry, StaleElementError
from vibe_browse.core.workspace import WorkspaceLayout, ensure_directories

__all__ = [
    "AgentStreamError",
    "BrowserHandle",
    "BrowserNotFoundError",
    "BrowserReadinessTimeout",
    "BrowserStartupError",
    "BrowserState",
    "BrowserSupervisor",
    "ElementRegistry",
    "MissingCredentialError",
    "SessionConfig",
    "StaleElementError",
    "ToolExecutionError",
    "VibeBrowseError",
    "WorkspaceLayout",
    "ensure_directories",
    "find_browser_executable",
    "load_config",
    "poll_until_ready",
]
