"""Page observation via Playwright ARIA snapshots.

The ARIA snapshot is a compact YAML outline of the page. Interactive nodes
are pulled out of it, ranked by role, and registered so the act tool can
address them by ``elem-N`` reference.
"""

import re
from typing import Any

import yaml  # type: ignore[import-untyped]
from playwright.async_api import Page
from pydantic import BaseModel, ConfigDict

from vibe_browse.core.logging import ErrorIds, logError
from vibe_browse.core.registry import ElementRegistry
from vibe_browse.models.element import InteractiveElement

# role "name" [attr=value, ...]
_ARIA_NODE_PATTERN = re.compile(r'^(\w+)(?:\s+"(.*)")?(?:\s+\[(.+)\])?$')

_ROLE_PRIORITY: dict[str, int] = {
    "button": 10,
    "link": 9,
    "textbox": 8,
    "searchbox": 8,
    "combobox": 8,
    "checkbox": 7,
    "radio": 7,
    "switch": 7,
    "listbox": 7,
    "option": 6,
    "slider": 6,
    "spinbutton": 6,
    "menuitem": 5,
    "tab": 5,
    "dialog": 2,
}


class PageObservation(BaseModel):
    """What the tools know about the page at one point in time."""

    model_config = ConfigDict(frozen=True)

    url: str
    title: str
    elements: list[InteractiveElement] = []
    visible_text: str = ""

    def format(self) -> str:
        lines = [f"Page: {self.title}", f"URL: {self.url}", "", "Interactive elements:"]
        lines.extend(f"- {element.describe()}" for element in self.elements)
        if not self.elements:
            lines.append("  (no interactive elements found)")
        return "\n".join(lines)


def parse_interactive_elements(aria_yaml: str, max_elements: int = 60) -> list[InteractiveElement]:
    """Extract ranked interactive elements from an ARIA snapshot.

    Args:
        aria_yaml: Output of ``locator.aria_snapshot()``.
        max_elements: Cap on returned elements.

    Returns:
        Elements sorted by role priority (stable within a role), with refs
        ``elem-0`` .. ``elem-N`` in that order.
    """
    try:
        parsed = yaml.safe_load(aria_yaml)
    except yaml.YAMLError as e:
        logError(ErrorIds.ARIA_SNAPSHOT_PARSE_FAILED, f"Could not parse ARIA snapshot: {e}")
        return []

    found: list[tuple[str, str, dict[str, str]]] = []
    _walk(parsed, found)
    found.sort(key=lambda item: _ROLE_PRIORITY[item[0]], reverse=True)

    elements = []
    for i, (role, name, attributes) in enumerate(found[:max_elements]):
        value = attributes.get("value", "")
        elements.append(
            InteractiveElement(
                ref=f"elem-{i}",
                role=role,
                name=name,
                value_preview=value[:100] if value else None,
            )
        )
    return elements


def _walk(node: Any, found: list[tuple[str, str, dict[str, str]]]) -> None:
    if isinstance(node, list):
        for item in node:
            _walk(item, found)
    elif isinstance(node, dict):
        for key, value in node.items():
            # Metadata keys such as /url
            if isinstance(key, str) and key.startswith("/"):
                continue
            _visit(str(key), value, found)
    elif isinstance(node, str):
        _visit(node, None, found)


def _visit(key: str, value: Any, found: list[tuple[str, str, dict[str, str]]]) -> None:
    match = _ARIA_NODE_PATTERN.match(key)
    if not match:
        return

    role, name, attrs = match.group(1), match.group(2) or "", match.group(3)
    if role in _ROLE_PRIORITY:
        attributes: dict[str, str] = {}
        for attr in (attrs or "").split(","):
            attr_key, sep, attr_value = attr.strip().partition("=")
            if sep:
                attributes[attr_key.strip()] = attr_value.strip()
        found.append((role, name, attributes))

    if isinstance(value, (list, dict)):
        _walk(value, found)


async def visible_text(page: Page, max_length: int = 4000) -> str:
    """Whitespace-normalised body text, truncated to ``max_length``."""
    try:
        text = await page.inner_text("body", timeout=5000)
    except Exception as e:
        logError(ErrorIds.TOOL_EXECUTION_FAILED, f"Failed to read visible text: {e}")
        return ""
    text = " ".join(text.split())
    if len(text) > max_length:
        text = text[:max_length] + "..."
    return text


async def observe_page(
    page: Page,
    registry: ElementRegistry,
    max_elements: int = 60,
    max_text_length: int = 3000,
) -> PageObservation:
    """Snapshot the page and register its interactive elements.

    Args:
        page: The Playwright page.
        registry: Registry that receives the new element references.
        max_elements: Cap on interactive elements.
        max_text_length: Cap on the visible text excerpt.

    Returns:
        The PageObservation.
    """
    aria_yaml = await page.locator("body").aria_snapshot()
    elements = parse_interactive_elements(aria_yaml, max_elements)
    registry.register(elements)
    return PageObservation(
        url=page.url,
        title=await page.title(),
        elements=elements,
        visible_text=await visible_text(page, max_text_length),
    )
