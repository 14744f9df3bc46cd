"""vibe-browse tools."""

from vibe_browse.tools.backend import ToolBackend
from vibe_browse.tools.browser_tools import BrowserToolset, create_browser_tools
from vibe_browse.tools.file_tools import FileEdit, FileToolset, create_file_tools
from vibe_browse.tools.interpreter import PageInterpreter, parse_plan
from vibe_browse.tools.observe import PageObservation, observe_page, parse_interactive_elements
from vibe_browse.tools.screenshot import capture_screenshot, fit_within

__all__ = [
    "BrowserToolset",
    "FileEdit",
    "FileToolset",
    "PageInterpreter",
    "PageObservation",
    "ToolBackend",
    "capture_screenshot",
    "create_browser_tools",
    "create_file_tools",
    "fit_within",
    "observe_page",
    "parse_interactive_elements",
    "parse_plan",
]
