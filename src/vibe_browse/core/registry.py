"""Element references for the act tool.

Each observation replaces the registry's contents and hands out fresh
``elem-N`` references. Navigation bumps the generation so references from
the previous page fail loudly instead of hitting the wrong element.
"""

from typing import Any, cast

from playwright.async_api import Locator, Page
from pydantic import BaseModel, ConfigDict

from vibe_browse.models.element import InteractiveElement


class StaleElementError(Exception):
    """Raised when a reference from an older page observation is used."""

    def __init__(self, element_ref: str, generation: int, current: int) -> None:
        self.element_ref = element_ref
        self.generation = generation
        self.current = current
        super().__init__(
            f"Element {element_ref!r} belongs to observation {generation} "
            f"but the page has changed (observation {current}). Observe the page again."
        )


class RegistryEntry(BaseModel):
    """One registered element and the observation it came from."""

    model_config = ConfigDict(frozen=True)

    element: InteractiveElement
    generation: int
    nth: int


class ElementRegistry:
    """Maps element references to elements of the current observation."""

    def __init__(self) -> None:
        self._entries: dict[str, RegistryEntry] = {}
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    def invalidate(self) -> int:
        """Mark every current reference stale (call after navigation)."""
        self._generation += 1
        return self._generation

    def register(self, elements: list[InteractiveElement]) -> None:
        """Replace the registry with a new observation's elements."""
        self._entries.clear()
        seen: dict[tuple[str, str], int] = {}
        for element in elements:
            key = (element.role, element.name)
            nth = seen.get(key, 0)
            seen[key] = nth + 1
            self._entries[element.ref] = RegistryEntry(element=element, generation=self._generation, nth=nth)

    def get(self, element_ref: str) -> InteractiveElement:
        """Return the element for ``element_ref``.

        Raises:
            KeyError: If the reference is unknown.
            StaleElementError: If the reference predates the last navigation.
        """
        return self._lookup(element_ref).element

    def locator(self, page: Page, element_ref: str) -> Locator:
        """Build a role-based Playwright locator for ``element_ref``."""
        entry = self._lookup(element_ref)
        element = entry.element
        if element.name:
            return page.get_by_role(cast(Any, element.role), name=element.name).nth(entry.nth)
        return page.locator(f'[role="{element.role}"]').nth(entry.nth)

    def _lookup(self, element_ref: str) -> RegistryEntry:
        if element_ref not in self._entries:
            raise KeyError(
                f"Element reference {element_ref!r} not found. "
                f"Available refs: {list(self._entries)}"
            )
        entry = self._entries[element_ref]
        if entry.generation != self._generation:
            raise StaleElementError(element_ref, entry.generation, self._generation)
        return entry
