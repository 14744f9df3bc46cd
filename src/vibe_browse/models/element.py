"""Interactive page element model."""

from pydantic import BaseModel, ConfigDict, field_validator


class InteractiveElement(BaseModel):
    """An element the browser tools can act on.

    Elements come from the page's ARIA snapshot and are addressed by a
    ``ref`` such as ``elem-3`` that is only valid for the observation that
    produced it.

    Attributes:
        ref: Reference id assigned at observation time.
        role: ARIA role (button, link, textbox, ...).
        name: Accessible name (may be empty).
        value_preview: Current value, truncated, for inputs.
    """

    model_config = ConfigDict(frozen=True)

    ref: str
    role: str
    name: str = ""
    value_preview: str | None = None

    @field_validator("ref", "role")
    @classmethod
    def must_not_be_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("must not be empty")
        return v

    def describe(self) -> str:
        line = f'{self.ref}: [{self.role}] "{self.name}"'
        if self.value_preview:
            line += f" (value: {self.value_preview})"
        return line
