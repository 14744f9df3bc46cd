"""Logging infrastructure for vibe-browse.

This module provides structured logging for errors, debugging, and session
events. Everything goes through the standard library logging module under the
``vibe_browse`` logger. The console handler writes to stderr so log lines
never interleave with the conversation transcript on stdout.
"""

import logging
import sys
from typing import Any


class ErrorIds:
    """Constants for error IDs used in logging and error tracking."""

    # Startup errors
    MISSING_CREDENTIAL = "ERR_MISSING_CREDENTIAL"
    BROWSER_NOT_FOUND = "ERR_BROWSER_NOT_FOUND"
    BROWSER_LAUNCH_FAILED = "ERR_BROWSER_LAUNCH"
    BROWSER_READINESS_TIMEOUT = "ERR_BROWSER_READINESS"
    BROWSER_SHUTDOWN_FAILED = "ERR_BROWSER_SHUTDOWN"

    # Tool execution errors
    TOOL_EXECUTION_FAILED = "ERR_TOOL_EXECUTION"
    UNKNOWN_TOOL = "ERR_UNKNOWN_TOOL"
    NAVIGATION_FAILED = "ERR_NAVIGATE"
    ELEMENT_INTERACTION_FAILED = "ERR_ELEMENT_INTERACT"
    SCREENSHOT_CAPTURE_FAILED = "ERR_SCREENSHOT"
    ARIA_SNAPSHOT_PARSE_FAILED = "ERR_ARIA_PARSE"
    FILE_OPERATION_FAILED = "ERR_FILE_OPERATION"

    # Agent stream / LLM errors
    AGENT_STREAM_FAILED = "ERR_AGENT_STREAM"
    LLM_API_ERROR = "ERR_LLM_API"
    LLM_MALFORMED_RESPONSE = "ERR_LLM_MALFORMED"


_logger: logging.Logger | None = None

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


def _get_logger() -> logging.Logger:
    """Get or create the logger instance."""
    global _logger
    if _logger is None:
        _logger = logging.getLogger("vibe_browse")
        _logger.setLevel(logging.DEBUG)
        _logger.propagate = False

        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logging.WARNING)
        console_handler.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATEFMT))
        _logger.addHandler(console_handler)

    return _logger


def _format(message: str, extra: dict[str, Any] | None) -> str:
    if not extra:
        return message
    extra_str = ", ".join(f"{k}={v}" for k, v in extra.items())
    return f"{message} | {extra_str}"


def logError(
    error_id: str,
    message: str,
    exc_info: bool = False,
    extra: dict[str, Any] | None = None,
) -> None:
    """Log an error with a stable error ID.

    Args:
        error_id: The error ID constant from ErrorIds.
        message: Human-readable error message.
        exc_info: If True, include exception info in the log.
        extra: Optional additional context as key-value pairs.
    """
    _get_logger().error(_format(f"[{error_id}] {message}", extra), exc_info=exc_info)


def logForDebugging(
    message: str,
    level: str = "debug",
    extra: dict[str, Any] | None = None,
) -> None:
    """Log a diagnostic message.

    Args:
        message: The message to log.
        level: Log level - "debug", "info", "warning", or "error".
        extra: Optional additional context as key-value pairs.
    """
    log_level = getattr(logging, level.upper(), logging.DEBUG)
    _get_logger().log(log_level, _format(message, extra))


def logEvent(
    event_name: str,
    properties: dict[str, Any] | None = None,
) -> None:
    """Log a session event (e.g., "turn_submitted", "browser_ready").

    Args:
        event_name: The name of the event.
        properties: Optional event properties as key-value pairs.
    """
    _get_logger().info(_format(f"[EVENT] {event_name}", properties))


def set_log_level(level: str | int) -> None:
    """Set the console logging level.

    Args:
        level: Log level as string ("debug", "info", "warning", "error")
               or int (logging.DEBUG, logging.INFO, etc.).
    """
    logger = _get_logger()
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    logger.handlers[0].setLevel(level)


def enable_file_logging(filepath: str) -> None:
    """Mirror every log record (DEBUG and up) to a file.

    Args:
        filepath: Path to the log file.
    """
    file_handler = logging.FileHandler(filepath)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATEFMT))
    _get_logger().addHandler(file_handler)
