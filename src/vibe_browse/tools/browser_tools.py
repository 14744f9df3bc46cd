"""Browser tools as @function_tool for the agent's tool catalogue.

BrowserToolset holds the operations; create_browser_tools wraps each one in
a FunctionTool whose name, description and JSON schema come from the
wrapper's signature and docstring. Tools raise on failure; the ToolBackend
turns exceptions into error results.
"""

import re
from pathlib import Path

from agents import FunctionTool, function_tool
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from vibe_browse.core.browser import BrowserSupervisor
from vibe_browse.core.errors import ToolExecutionError
from vibe_browse.core.logging import ErrorIds, logError, logForDebugging
from vibe_browse.core.registry import ElementRegistry
from vibe_browse.tools.interpreter import PageInterpreter
from vibe_browse.tools.observe import observe_page, visible_text
from vibe_browse.tools.screenshot import capture_screenshot

_URL_PATTERN = re.compile(r"(https?://[^\s,]+|(?:[\w-]+\.)+[a-z]{2,}(?:/[^\s,]*)?)", re.IGNORECASE)
_NAVIGATE_VERBS = ("navigate", "go to", "open", "visit")
_SCROLL_PIXELS = 600


def _url_in(step: str) -> str | None:
    match = _URL_PATTERN.search(step)
    if not match:
        return None
    url = match.group(1).rstrip(".;)")
    if not url.lower().startswith(("http://", "https://")):
        url = f"https://{url}"
    return url


class BrowserToolset:
    """The browser operations available to the agent."""

    def __init__(
        self,
        supervisor: BrowserSupervisor,
        interpreter: PageInterpreter,
        screenshots_dir: Path | str,
        registry: ElementRegistry | None = None,
    ) -> None:
        self._supervisor = supervisor
        self._interpreter = interpreter
        self._screenshots_dir = Path(screenshots_dir)
        self._registry = registry or ElementRegistry()

    async def navigate(self, url: str) -> str:
        page = await self._supervisor.get_page()
        try:
            response = await page.goto(url, wait_until="load", timeout=30000)
        except PlaywrightTimeoutError as e:
            logError(ErrorIds.NAVIGATION_FAILED, f"Timeout navigating to {url}", extra={"url": url})
            raise ToolExecutionError(f"Timeout navigating to {url}. The page may be slow to load.") from e
        finally:
            self._registry.invalidate()

        title = await page.title()
        if response is None:
            return f"Navigated to {url}\nTitle: {title}"
        if response.status >= 400:
            logForDebugging(f"Navigation to {url} returned HTTP {response.status}", level="warning")
            return f"Navigation to {url} returned HTTP {response.status}\nTitle: {title}"
        return f"Navigated to {url} (status: {response.status})\nTitle: {title}"

    async def observe(self, query: str) -> str:
        page = await self._supervisor.get_page()
        observation = await observe_page(page, self._registry)
        answer = await self._interpreter.answer(query, observation)
        return f"{answer}\n\n{observation.format()}"

    async def act(self, action: str) -> str:
        page = await self._supervisor.get_page()
        observation = await observe_page(page, self._registry)
        choice = await self._interpreter.choose_operation(action, observation)
        operation = str(choice.get("operation", "none")).lower()
        logForDebugging(f"act {action!r} -> {choice}")

        try:
            if operation == "click":
                element_id = str(choice.get("element_id", ""))
                element = self._registry.get(element_id)
                await self._registry.locator(page, element_id).click(timeout=30000)
                return f'Clicked [{element.role}] "{element.name}"'
            if operation == "fill":
                element_id = str(choice.get("element_id", ""))
                text = str(choice.get("text", ""))
                element = self._registry.get(element_id)
                await self._registry.locator(page, element_id).fill(text, timeout=30000)
                return f'Typed "{text}" into [{element.role}] "{element.name}"'
            if operation == "press":
                key = str(choice.get("key") or "Enter")
                await page.keyboard.press(key)
                return f"Pressed {key}"
            if operation == "scroll":
                direction = str(choice.get("direction", "down")).lower()
                await page.mouse.wheel(0, -_SCROLL_PIXELS if direction == "up" else _SCROLL_PIXELS)
                return f"Scrolled {direction}"
        except PlaywrightTimeoutError as e:
            logError(ErrorIds.ELEMENT_INTERACTION_FAILED, f"Timeout performing {action!r}")
            raise ToolExecutionError(
                f"Timeout performing {action!r}. The element may be hidden or not interactive."
            ) from e
        except KeyError as e:
            raise ToolExecutionError(f"Could not perform {action!r}: {e}") from e

        reason = choice.get("reason") or "no matching element on the page"
        raise ToolExecutionError(f"Could not perform {action!r}: {reason}")

    async def extract(self, instruction: str, schema: str | None = None) -> str:
        page = await self._supervisor.get_page()
        text = await visible_text(page, max_length=12000)
        if not text:
            raise ToolExecutionError("The page has no visible text to extract from.")
        return await self._interpreter.extract(instruction, text, schema)

    async def screenshot(self) -> str:
        page = await self._supervisor.get_page()
        try:
            path = await capture_screenshot(page, self._screenshots_dir)
        except Exception as e:
            logError(ErrorIds.SCREENSHOT_CAPTURE_FAILED, f"Screenshot failed: {e}", exc_info=True)
            raise
        return f"Screenshot saved to {path}"

    async def batch(self, steps: str) -> str:
        plan = await self._interpreter.plan_steps(steps)
        if not plan:
            raise ToolExecutionError(f"Could not break {steps!r} into steps.")

        report = []
        for number, step in enumerate(plan, start=1):
            try:
                outcome = await self._run_step(step)
            except Exception as e:
                report.append(f"{number}. {step}\n   FAILED: {e}")
                report.append(f"Stopped after step {number} of {len(plan)}.")
                raise ToolExecutionError("\n".join(report)) from e
            report.append(f"{number}. {step}\n   {outcome}")
        return "\n".join(report)

    async def _run_step(self, step: str) -> str:
        lowered = step.lower()
        url = _url_in(step)
        if url and lowered.startswith(_NAVIGATE_VERBS):
            return await self.navigate(url)
        if lowered.startswith("extract"):
            return await self.extract(step[len("extract"):].strip() or step)
        if lowered.startswith("observe"):
            return await self.observe(step[len("observe"):].strip() or step)
        return await self.act(step)

    async def close(self) -> str:
        await self._supervisor.close()
        self._registry.invalidate()
        return "Browser closed. The next browser tool call starts a fresh browser."


def create_browser_tools(toolset: BrowserToolset) -> list[FunctionTool]:
    """Create the browser tool catalogue.

    Args:
        toolset: The operations the tools delegate to.

    Returns:
        A list of FunctionTool instances.
    """

    @function_tool(failure_error_function=None)
    async def navigate(url: str) -> str:
        """Navigate the local browser to a URL and report the page title.

        Args:
            url: The full URL to navigate to (e.g., 'https://example.com').
        """
        return await toolset.navigate(url)

    @function_tool(failure_error_function=None)
    async def act(action: str) -> str:
        """Perform one action on the current page (e.g., 'click the login button', 'type "hello" into the search box').

        Args:
            action: Natural language description of the action to perform.
        """
        return await toolset.act(action)

    @function_tool(failure_error_function=None)
    async def extract(instruction: str, schema: str | None = None) -> str:
        """Extract data from the current page (e.g., 'all article titles', 'every link').

        Args:
            instruction: What data to extract.
            schema: Optional JSON schema (as a string) the result must follow; the result is JSON when given.
        """
        return await toolset.extract(instruction, schema)

    @function_tool(failure_error_function=None)
    async def observe(query: str) -> str:
        """Discover what is on the current page (e.g., 'find all buttons', 'is there a login form?').

        Args:
            query: What to look for.
        """
        return await toolset.observe(query)

    @function_tool(failure_error_function=None)
    async def screenshot() -> str:
        """Capture a full-page screenshot and return the saved file path. Only use when asked or when something went wrong."""
        return await toolset.screenshot()

    @function_tool(failure_error_function=None)
    async def batch(steps: str) -> str:
        """Execute several browser actions in one call, in order (e.g., 'navigate to X, then click Y, then extract Z').

        Args:
            steps: Natural language description of the actions to perform sequentially.
        """
        return await toolset.batch(steps)

    @function_tool(failure_error_function=None)
    async def close_browser() -> str:
        """Close the local browser and release its resources. The profile is kept."""
        return await toolset.close()

    return [navigate, act, extract, observe, screenshot, batch, close_browser]
