"""CLI entry point for vibe-browse."""

import argparse
import asyncio
import os
import signal
import sys
from pathlib import Path

from rich.console import Console

from vibe_browse.agents import AgentStream, build_system_prompt
from vibe_browse.core.browser import BrowserSupervisor
from vibe_browse.core.config import SessionConfig, load_config
from vibe_browse.core.errors import BrowserStartupError, MissingCredentialError
from vibe_browse.core.llm import create_client
from vibe_browse.core.logging import (
    ErrorIds,
    enable_file_logging,
    logError,
    logEvent,
    logForDebugging,
    set_log_level,
)
from vibe_browse.core.workspace import WorkspaceLayout, ensure_directories
from vibe_browse.render import ConsoleRenderer
from vibe_browse.session import ActionPolicy, ConversationController
from vibe_browse.tools import (
    BrowserToolset,
    FileToolset,
    PageInterpreter,
    ToolBackend,
    create_browser_tools,
    create_file_tools,
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vibe-browse",
        description="vibe-browse - Chat with an AI agent that drives your local Chrome browser",
    )
    parser.add_argument(
        "prompt",
        nargs="*",
        help="Initial request for the agent (if not provided, you are prompted interactively)",
    )
    parser.add_argument(
        "--root",
        type=Path,
        default=None,
        help="Working directory for the agent's files and browser profile (default: ./agent)",
    )
    parser.add_argument(
        "--headless",
        action="store_true",
        help="Run the browser without a visible window",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Local remote-debugging port for the browser (default: 9222)",
    )
    parser.add_argument(
        "--model",
        default=None,
        help="Agent model on OpenRouter (default: $VIBE_BROWSE_MODEL or anthropic/claude-sonnet-4)",
    )
    parser.add_argument(
        "--max-turns",
        type=int,
        default=None,
        help="Maximum model calls per request before control returns to you (default: 100)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Show debug logs on stderr",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Also write logs to this file",
    )
    return parser


def build_controller(
    config: SessionConfig,
    layout: WorkspaceLayout,
    supervisor: BrowserSupervisor,
    renderer: ConsoleRenderer,
) -> ConversationController:
    """Wire the tools, agent stream and policy gate into a controller."""
    client = create_client(config)
    interpreter = PageInterpreter(client, config.tool_model)
    browser_tools = create_browser_tools(BrowserToolset(supervisor, interpreter, layout.screenshots_dir))
    file_tools = create_file_tools(FileToolset(layout.root))
    backend = ToolBackend(browser_tools + file_tools)

    stream = AgentStream(
        client,
        config.model,
        backend.catalogue(),
        build_system_prompt(layout),
        max_turns=config.max_turns,
    )
    policy = ActionPolicy(layout.root, layout.scripts_dir)
    return ConversationController(stream, backend, policy, supervisor, renderer)


def _on_signal(signum: int, supervisor: BrowserSupervisor) -> None:
    logEvent("signal_received", {"signal": signal.Signals(signum).name})
    supervisor.terminate()
    sys.stdout.flush()
    sys.stderr.flush()
    # The console read runs in a worker thread that cannot be interrupted,
    # so a normal shutdown would hang until the human presses Enter.
    os._exit(0)


def install_signal_handlers(supervisor: BrowserSupervisor) -> None:
    loop = asyncio.get_running_loop()
    for signum in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(signum, _on_signal, signum, supervisor)
        except NotImplementedError:
            # Windows event loops do not support add_signal_handler.
            signal.signal(signum, lambda s, _frame: _on_signal(s, supervisor))


async def run_session(config: SessionConfig, initial_prompt: str | None, renderer: ConsoleRenderer) -> int:
    """Prepare the workspace, start the browser and run the conversation.

    Args:
        config: Session configuration.
        initial_prompt: First request, or None to prompt interactively.
        renderer: Transcript output.

    Returns:
        The exit code.

    Raises:
        BrowserStartupError: If the browser cannot be started. Raised
            before any Turn is submitted.
    """
    layout = ensure_directories(config.root)
    supervisor = BrowserSupervisor(
        layout.profile_dir,
        downloads_dir=layout.downloads_dir,
        port=config.cdp_port,
        headless=config.headless,
        executable=config.browser_executable,
        poll_attempts=config.poll_attempts,
        poll_interval=config.poll_interval,
    )
    install_signal_handlers(supervisor)

    try:
        with renderer.working("Launching browser..."):
            await supervisor.get_browser()
    except BrowserStartupError:
        await supervisor.close()
        raise

    controller = build_controller(config, layout, supervisor, renderer)
    return await controller.start(initial_prompt)


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)
    if args.verbose:
        set_log_level("DEBUG")
    if args.log_file:
        enable_file_logging(args.log_file)

    renderer = ConsoleRenderer()
    try:
        config = load_config(
            root=args.root,
            model=args.model,
            max_turns=args.max_turns,
            cdp_port=args.port,
            headless=args.headless,
        )
    except MissingCredentialError as e:
        logForDebugging(str(e).splitlines()[0], level="info", extra={"error_id": ErrorIds.MISSING_CREDENTIAL})
        renderer.error(str(e))
        sys.exit(1)

    renderer = ConsoleRenderer(display_cap=config.display_cap)
    initial_prompt = " ".join(args.prompt).strip() or None

    try:
        exit_code = asyncio.run(run_session(config, initial_prompt, renderer))
    except BrowserStartupError as e:
        renderer.error(str(e))
        exit_code = 1
    except Exception as e:
        logError(ErrorIds.AGENT_STREAM_FAILED, f"Session failed: {e}", exc_info=True)
        renderer.error(str(e))
        exit_code = 1
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
