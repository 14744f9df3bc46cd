"""LLM integration for vibe-browse.

One AsyncOpenAI client, pointed at OpenRouter's OpenAI-compatible API, serves
both the conversational agent and the browser tools' page interpreter.
"""

import json
import re
from typing import Any

from openai import AsyncOpenAI

from vibe_browse.core.config import SessionConfig
from vibe_browse.core.errors import ToolExecutionError
from vibe_browse.core.logging import ErrorIds, logError

_CODE_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$", re.MULTILINE)


def create_client(config: SessionConfig) -> AsyncOpenAI:
    """Create the async client for the configured endpoint.

    Args:
        config: Session configuration carrying the API key and base URL.

    Returns:
        An AsyncOpenAI client.
    """
    return AsyncOpenAI(base_url=config.base_url, api_key=config.api_key)


async def complete_text(
    client: AsyncOpenAI,
    model: str,
    system_prompt: str,
    user_prompt: str,
    temperature: float = 0.0,
    max_tokens: int = 2048,
) -> str:
    """Run a single-shot completion and return the text.

    Args:
        client: The AsyncOpenAI client.
        model: Model identifier.
        system_prompt: Instructions for the model.
        user_prompt: The request.
        temperature: Sampling temperature.
        max_tokens: Maximum tokens to generate.

    Returns:
        The stripped response text.

    Raises:
        ToolExecutionError: If the model returns no choices.
    """
    try:
        response = await client.chat.completions.create(
            model=model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            temperature=temperature,
            max_tokens=max_tokens,
        )
    except Exception as e:
        logError(ErrorIds.LLM_API_ERROR, f"LLM API call failed: {e}", exc_info=True)
        raise

    if not response.choices:
        logError(ErrorIds.LLM_MALFORMED_RESPONSE, "LLM returned empty choices list")
        raise ToolExecutionError("The page interpreter returned no answer.")
    return (response.choices[0].message.content or "").strip()


def parse_json_reply(text: str) -> Any:
    """Parse a JSON reply, tolerating a surrounding markdown code fence.

    Raises:
        ToolExecutionError: If the text is not valid JSON.
    """
    cleaned = _CODE_FENCE.sub("", text.strip()).strip()
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as e:
        logError(ErrorIds.LLM_MALFORMED_RESPONSE, f"Expected JSON, got: {text[:200]!r}")
        raise ToolExecutionError(f"The page interpreter returned malformed JSON: {e}") from e
