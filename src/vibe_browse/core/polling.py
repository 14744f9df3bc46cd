"""Bounded readiness polling."""

import asyncio
from typing import Awaitable, Callable

from vibe_browse.core.logging import logForDebugging


async def poll_until_ready(
    predicate: Callable[[], Awaitable[bool]],
    max_attempts: int,
    interval: float,
) -> int:
    """Call ``predicate`` until it returns True or the attempt bound is hit.

    The delay between attempts is fixed; there is no sleep after the final
    attempt.

    Args:
        predicate: Async check, called once per attempt.
        max_attempts: Maximum number of calls to ``predicate``.
        interval: Seconds to wait between attempts.

    Returns:
        The 1-based attempt number that succeeded, or 0 if every attempt failed.
    """
    for attempt in range(1, max_attempts + 1):
        if await predicate():
            logForDebugging(f"Ready after {attempt} attempt(s)")
            return attempt
        if attempt < max_attempts:
            await asyncio.sleep(interval)
    return 0
