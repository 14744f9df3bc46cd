"""Exception hierarchy for vibe-browse.

Startup errors are fatal and end the session before the first turn. Tool
errors are contained by the tool backend and turned into error results.
Stream errors propagate to the entry point.
"""


class VibeBrowseError(Exception):
    """Base class for all vibe-browse errors."""


class MissingCredentialError(VibeBrowseError, ValueError):
    """Raised when the agent service API key is not configured."""


class BrowserStartupError(VibeBrowseError):
    """Raised when the supervised browser cannot be brought to a ready state."""


class BrowserNotFoundError(BrowserStartupError):
    """Raised when no local Chrome/Chromium executable can be located."""


class BrowserReadinessTimeout(BrowserStartupError):
    """Raised when the browser control endpoint never answers within the poll bound."""

    def __init__(self, endpoint: str, attempts: int, interval: float) -> None:
        self.endpoint = endpoint
        self.attempts = attempts
        self.interval = interval
        super().__init__(
            f"Browser control endpoint {endpoint} did not become ready after "
            f"{attempts} attempts ({attempts * interval:.1f}s)."
        )


class ToolExecutionError(VibeBrowseError):
    """Raised inside a tool when the requested operation cannot be completed."""


class AgentStreamError(VibeBrowseError):
    """Raised when the agent stream receives or produces an invalid message."""
