"""Natural-language interpretation for the browser tools.

The agent speaks to the browser in plain language ("click the login
button", "get all article titles"). The PageInterpreter turns those requests
into concrete page operations or answers using a single-shot completion
against the tool model.
"""

import json
from typing import Any

from openai import AsyncOpenAI

from vibe_browse.core.llm import complete_text, parse_json_reply
from vibe_browse.tools.observe import PageObservation

_ACT_PROMPT = """You translate a requested browser action into exactly one primitive operation.

Reply with a single JSON object and nothing else:
{"operation": "click" | "fill" | "press" | "scroll" | "none",
 "element_id": "<elem-N for click/fill>",
 "text": "<text for fill>",
 "key": "<key for press, e.g. Enter>",
 "direction": "up" | "down",
 "reason": "<why, only for none>"}

Use only element ids that appear in the page summary. Use "none" when the
action cannot be performed on this page."""

_OBSERVE_PROMPT = """You answer questions about the current web page using the page summary provided.
Reply concisely in plain text. Do not include JSON or markdown. Refer to elements by their elem-N id when relevant."""

_EXTRACT_PROMPT = """You extract data from web page text exactly as requested.
Return ONLY plain text values, one item per line, with no JSON, no markdown, and no commentary."""

_EXTRACT_SCHEMA_PROMPT = """You extract data from web page text exactly as requested.
Return ONLY a JSON value that conforms to this JSON schema, with no markdown or commentary:
{schema}"""

_PLAN_PROMPT = """You split a description of several browser actions into individual steps.
Return a numbered list, one step per line, in execution order. Each step must start with one of:
Navigate to <url> | Extract <what> | Observe <what> | <an action such as click, type, press, scroll>.
Do not add steps that were not requested."""

_STEP_PREFIXES = ("- ", "* ")


class PageInterpreter:
    """Single-shot model helper used by the browser tools."""

    def __init__(self, client: AsyncOpenAI, model: str) -> None:
        """Initialize the interpreter.

        Args:
            client: The AsyncOpenAI client.
            model: Tool model identifier.
        """
        self._client = client
        self._model = model

    async def choose_operation(self, action: str, observation: PageObservation) -> dict[str, Any]:
        """Pick the primitive operation that performs ``action`` on the page."""
        reply = await complete_text(
            self._client,
            self._model,
            _ACT_PROMPT,
            f"{observation.format()}\n\nRequested action: {action}",
        )
        choice = parse_json_reply(reply)
        if not isinstance(choice, dict):
            return {"operation": "none", "reason": "interpreter did not return an object"}
        return choice

    async def answer(self, query: str, observation: PageObservation) -> str:
        return await complete_text(
            self._client,
            self._model,
            _OBSERVE_PROMPT,
            f"{observation.format()}\n\nVisible text:\n{observation.visible_text}\n\nQuestion: {query}",
        )

    async def extract(self, instruction: str, page_text: str, schema: str | None = None) -> str:
        """Extract data from ``page_text``; JSON output when a schema is given."""
        if schema:
            reply = await complete_text(
                self._client,
                self._model,
                _EXTRACT_SCHEMA_PROMPT.format(schema=schema),
                f"Page text:\n{page_text}\n\nExtract: {instruction}",
            )
            return json.dumps(parse_json_reply(reply), indent=2)
        return await complete_text(
            self._client,
            self._model,
            _EXTRACT_PROMPT,
            f"Page text:\n{page_text}\n\nExtract: {instruction}",
        )

    async def plan_steps(self, steps: str) -> list[str]:
        reply = await complete_text(self._client, self._model, _PLAN_PROMPT, steps)
        return parse_plan(reply)


def parse_plan(response: str) -> list[str]:
    """Parse a numbered or bulleted list into step strings.

    Lines that are not list items are ignored.
    """
    plan = []
    for line in response.strip().splitlines():
        line = line.strip()
        head, dot, rest = line.partition(".")
        if dot and head.isdigit():
            line = rest.strip()
        elif line.startswith(_STEP_PREFIXES):
            line = line[2:].strip()
        else:
            continue
        if line:
            plan.append(line)
    return plan
