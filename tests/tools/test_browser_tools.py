"""Tests for browser tools module."""

import json
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from agents.tool import ToolContext
from agents.usage import Usage
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from vibe_browse.core.errors import ToolExecutionError
from vibe_browse.core.registry import ElementRegistry
from vibe_browse.tools.browser_tools import BrowserToolset, _url_in, create_browser_tools

ARIA = """\
- textbox "Search"
- button "Go"
"""


@pytest.fixture
def mock_page() -> MagicMock:
    """Create a mock Playwright Page."""
    page = AsyncMock()
    page.url = "https://example.com"
    page.title = AsyncMock(return_value="Example Domain")
    page.inner_text = AsyncMock(return_value="Hello world")
    page.keyboard = AsyncMock()
    page.mouse = AsyncMock()
    page.locator = MagicMock()
    page.locator.return_value.aria_snapshot = AsyncMock(return_value=ARIA)
    page.get_by_role = MagicMock()
    page.get_by_role.return_value.nth.return_value = AsyncMock()
    page.goto = AsyncMock(return_value=MagicMock(status=200))
    return page


@pytest.fixture
def supervisor(mock_page: MagicMock) -> MagicMock:
    supervisor = MagicMock()
    supervisor.get_page = AsyncMock(return_value=mock_page)
    supervisor.close = AsyncMock()
    return supervisor


@pytest.fixture
def interpreter() -> MagicMock:
    interpreter = MagicMock()
    interpreter.choose_operation = AsyncMock()
    interpreter.answer = AsyncMock(return_value="There is a search box.")
    interpreter.extract = AsyncMock(return_value="Hello")
    interpreter.plan_steps = AsyncMock()
    return interpreter


@pytest.fixture
def toolset(supervisor: MagicMock, interpreter: MagicMock, tmp_path: Path, registry: ElementRegistry) -> BrowserToolset:
    return BrowserToolset(supervisor, interpreter, tmp_path / "browser_screenshots", registry)


def _get_tool(tools: list, name: str) -> Any:
    """Get a tool by name from the tools list."""
    for tool in tools:
        if tool.name == name:
            return tool
    raise ValueError(f"Tool {name} not found in {[t.name for t in tools]}")


def _make_ctx() -> ToolContext:
    """Create a minimal ToolContext for testing."""
    return ToolContext(context=None, usage=Usage(), tool_name="test", tool_call_id="test-1", tool_arguments="{}")


class TestUrlIn:
    def test_full_url(self) -> None:
        assert _url_in("Navigate to https://news.ycombinator.com/news") == "https://news.ycombinator.com/news"

    def test_bare_domain_gets_scheme(self) -> None:
        assert _url_in("go to example.com") == "https://example.com"

    def test_trailing_punctuation(self) -> None:
        assert _url_in("open https://example.com.") == "https://example.com"

    def test_no_url(self) -> None:
        assert _url_in("click the login button") is None


class TestNavigate:
    @pytest.mark.asyncio
    async def test_navigate_reports_status_and_title(
        self, toolset: BrowserToolset, mock_page: MagicMock, registry: ElementRegistry
    ) -> None:
        result = await toolset.navigate("https://example.com")

        mock_page.goto.assert_awaited_once_with("https://example.com", wait_until="load", timeout=30000)
        assert "status: 200" in result
        assert "Example Domain" in result
        assert registry.generation == 1

    @pytest.mark.asyncio
    async def test_navigate_http_error_status(self, toolset: BrowserToolset, mock_page: MagicMock) -> None:
        mock_page.goto = AsyncMock(return_value=MagicMock(status=404))
        result = await toolset.navigate("https://example.com/missing")
        assert "HTTP 404" in result

    @pytest.mark.asyncio
    async def test_navigate_timeout(
        self, toolset: BrowserToolset, mock_page: MagicMock, registry: ElementRegistry
    ) -> None:
        mock_page.goto = AsyncMock(side_effect=PlaywrightTimeoutError("Timeout 30000ms exceeded"))
        with pytest.raises(ToolExecutionError, match="Timeout"):
            await toolset.navigate("https://slow.example")
        assert registry.generation == 1


class TestAct:
    @pytest.mark.asyncio
    async def test_click(self, toolset: BrowserToolset, interpreter: MagicMock, mock_page: MagicMock) -> None:
        # ARIA ranks the button first
        interpreter.choose_operation.return_value = {"operation": "click", "element_id": "elem-0"}

        result = await toolset.act("click Go")

        assert result == 'Clicked [button] "Go"'
        mock_page.get_by_role.assert_called_with("button", name="Go")
        mock_page.get_by_role.return_value.nth.return_value.click.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_fill(self, toolset: BrowserToolset, interpreter: MagicMock, mock_page: MagicMock) -> None:
        interpreter.choose_operation.return_value = {"operation": "fill", "element_id": "elem-1", "text": "laptops"}

        result = await toolset.act('type "laptops" into search')

        assert result == 'Typed "laptops" into [textbox] "Search"'
        mock_page.get_by_role.return_value.nth.return_value.fill.assert_awaited_once_with("laptops", timeout=30000)

    @pytest.mark.asyncio
    async def test_press(self, toolset: BrowserToolset, interpreter: MagicMock, mock_page: MagicMock) -> None:
        interpreter.choose_operation.return_value = {"operation": "press", "key": "Enter"}
        assert await toolset.act("press enter") == "Pressed Enter"
        mock_page.keyboard.press.assert_awaited_once_with("Enter")

    @pytest.mark.asyncio
    async def test_scroll_up(self, toolset: BrowserToolset, interpreter: MagicMock, mock_page: MagicMock) -> None:
        interpreter.choose_operation.return_value = {"operation": "scroll", "direction": "up"}
        assert await toolset.act("scroll up") == "Scrolled up"
        mock_page.mouse.wheel.assert_awaited_once_with(0, -600)

    @pytest.mark.asyncio
    async def test_none_operation_is_error(self, toolset: BrowserToolset, interpreter: MagicMock) -> None:
        interpreter.choose_operation.return_value = {"operation": "none", "reason": "no login button"}
        with pytest.raises(ToolExecutionError, match="no login button"):
            await toolset.act("click login")

    @pytest.mark.asyncio
    async def test_unknown_element(self, toolset: BrowserToolset, interpreter: MagicMock) -> None:
        interpreter.choose_operation.return_value = {"operation": "click", "element_id": "elem-99"}
        with pytest.raises(ToolExecutionError, match="not found"):
            await toolset.act("click something")

    @pytest.mark.asyncio
    async def test_click_timeout(self, toolset: BrowserToolset, interpreter: MagicMock, mock_page: MagicMock) -> None:
        interpreter.choose_operation.return_value = {"operation": "click", "element_id": "elem-0"}
        mock_page.get_by_role.return_value.nth.return_value.click = AsyncMock(
            side_effect=PlaywrightTimeoutError("Timeout")
        )
        with pytest.raises(ToolExecutionError, match="Timeout"):
            await toolset.act("click Go")


class TestObserveExtractScreenshot:
    @pytest.mark.asyncio
    async def test_observe_returns_answer_and_elements(self, toolset: BrowserToolset) -> None:
        result = await toolset.observe("is there a search box?")
        assert result.startswith("There is a search box.")
        assert 'elem-1: [textbox] "Search"' in result

    @pytest.mark.asyncio
    async def test_extract_passes_schema(self, toolset: BrowserToolset, interpreter: MagicMock) -> None:
        await toolset.extract("greeting", '{"type": "string"}')
        interpreter.extract.assert_awaited_once_with("greeting", "Hello world", '{"type": "string"}')

    @pytest.mark.asyncio
    async def test_extract_empty_page(self, toolset: BrowserToolset, mock_page: MagicMock) -> None:
        mock_page.inner_text = AsyncMock(return_value="   ")
        with pytest.raises(ToolExecutionError, match="no visible text"):
            await toolset.extract("anything")

    @pytest.mark.asyncio
    async def test_screenshot_path(self, toolset: BrowserToolset, tmp_path: Path) -> None:
        saved = tmp_path / "browser_screenshots" / "screenshot-x.png"
        with patch("vibe_browse.tools.browser_tools.capture_screenshot", new_callable=AsyncMock, return_value=saved):
            result = await toolset.screenshot()
        assert result == f"Screenshot saved to {saved}"


class TestBatch:
    @pytest.mark.asyncio
    async def test_runs_steps_in_order(
        self, toolset: BrowserToolset, interpreter: MagicMock, mock_page: MagicMock
    ) -> None:
        interpreter.plan_steps.return_value = ["Navigate to https://example.com", "Extract the heading"]

        report = await toolset.batch("go to example.com and get the heading")

        mock_page.goto.assert_awaited_once()
        interpreter.extract.assert_awaited_once()
        assert report.startswith("1. Navigate to https://example.com")
        assert "2. Extract the heading" in report
        assert "Stopped" not in report

    @pytest.mark.asyncio
    async def test_stops_at_first_failure(
        self, toolset: BrowserToolset, interpreter: MagicMock, mock_page: MagicMock
    ) -> None:
        interpreter.plan_steps.return_value = ["Click the missing button", "Extract the heading"]
        interpreter.choose_operation.return_value = {"operation": "none", "reason": "not on page"}

        with pytest.raises(ToolExecutionError) as exc_info:
            await toolset.batch("click then extract")

        report = str(exc_info.value)
        assert report.startswith("1. Click the missing button")
        assert "FAILED" in report
        assert "Stopped after step 1 of 2." in report
        interpreter.extract.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_empty_plan(self, toolset: BrowserToolset, interpreter: MagicMock) -> None:
        interpreter.plan_steps.return_value = []
        with pytest.raises(ToolExecutionError):
            await toolset.batch("???")


class TestBrowserToolCatalogue:
    def test_tool_names(self, toolset: BrowserToolset) -> None:
        names = [tool.name for tool in create_browser_tools(toolset)]
        assert names == ["navigate", "act", "extract", "observe", "screenshot", "batch", "close_browser"]

    @pytest.mark.asyncio
    async def test_close_browser_tool(self, toolset: BrowserToolset, supervisor: MagicMock) -> None:
        tool = _get_tool(create_browser_tools(toolset), "close_browser")
        result = await tool.on_invoke_tool(_make_ctx(), "{}")
        supervisor.close.assert_awaited_once()
        assert "Browser closed" in result

    @pytest.mark.asyncio
    async def test_navigate_tool_invocation(self, toolset: BrowserToolset, mock_page: MagicMock) -> None:
        tool = _get_tool(create_browser_tools(toolset), "navigate")
        result = await tool.on_invoke_tool(_make_ctx(), json.dumps({"url": "https://example.com"}))
        assert "Navigated to https://example.com" in result
