"""Conversation loop controller.

The controller alternates strictly between the human and the agent. While
``awaiting_user_input`` is set it reads one line from the console (in a
worker thread); otherwise it pulls the next event from the agent stream.
It never waits on both at once.

Tool invocations are dispatched here, not inside the stream: each one goes
through the ActionPolicy first, and only allowed invocations reach the
ToolBackend. The results, blocked ones included, go back to the stream as
one batch in invocation order.
"""

import asyncio
from collections.abc import AsyncIterator, Callable

from vibe_browse.agents.stream import AgentStream, Inbound
from vibe_browse.core.browser import BrowserSupervisor
from vibe_browse.core.logging import ErrorIds, logError, logEvent, logForDebugging
from vibe_browse.models.events import (
    AgentEvent,
    AssistantMessage,
    SessionResult,
    ToolResultMessage,
)
from vibe_browse.models.tools import ToolInvocation, ToolResult, ToolResultBatch
from vibe_browse.models.turn import Turn
from vibe_browse.render import ConsoleRenderer
from vibe_browse.session.policy import ActionPolicy
from vibe_browse.session.state import SessionState
from vibe_browse.tools.backend import ToolBackend

EXIT_COMMANDS = frozenset({"exit", "quit"})


class ConversationController:
    """Runs one interactive session between the human and the agent."""

    def __init__(
        self,
        stream: AgentStream,
        backend: ToolBackend,
        policy: ActionPolicy,
        supervisor: BrowserSupervisor,
        renderer: ConsoleRenderer,
        read_input: Callable[[], str] | None = None,
        session_id: str = "default",
    ) -> None:
        """Initialize the controller.

        Args:
            stream: The agent event stream.
            backend: Executes allowed tool invocations.
            policy: Gate consulted before every dispatch.
            supervisor: Owner of the browser; closed when the session ends.
            renderer: Transcript output.
            read_input: Blocking line reader. Defaults to the renderer's prompt.
            session_id: Identifier stamped on every Turn.
        """
        self._stream = stream
        self._backend = backend
        self._policy = policy
        self._supervisor = supervisor
        self._renderer = renderer
        self._read_input = read_input or renderer.prompt
        self._inbox: asyncio.Queue[Inbound] = asyncio.Queue()
        self.state = SessionState(session_id=session_id)

    @property
    def transcript(self) -> list[Turn]:
        return list(self.state.turns)

    async def start(self, initial_prompt: str | None = None) -> int:
        """Run the session until the human quits or the stream ends.

        Args:
            initial_prompt: Submitted as the first user Turn without prompting.

        Returns:
            The process exit code.

        Raises:
            Exception: Whatever the agent stream raises; resources are
                released first.
        """
        self.state.begin()
        logEvent("session_started", {"session_id": self.state.session_id})
        events = self._stream.run(self._inbox)
        try:
            self.state.turn_complete()
            if initial_prompt and initial_prompt.strip():
                self._renderer.banner(initial_prompt.strip())
                self.submit_human_input(initial_prompt)

            while self.state.conversation_active:
                if self.state.awaiting_user_input:
                    self.submit_human_input(await self._ask_human())
                    continue
                try:
                    with self._renderer.working():
                        event = await anext(events)
                except StopAsyncIteration:
                    logForDebugging("Agent stream ended")
                    break
                await self._handle_event(event)
        finally:
            self.state.end()
            await self._release(events)

        logEvent("session_ended", {"session_id": self.state.session_id, "turns": len(self.state.turns)})
        self._renderer.goodbye()
        return 0

    def submit_human_input(self, text: str | None) -> bool:
        """Submit one line from the human.

        Input is only accepted between agent turns; while the agent is
        working the call is refused and nothing is queued.

        Args:
            text: The line, or None at end of input.

        Returns:
            True if a user Turn was sent to the agent.
        """
        if not self.state.awaiting_user_input:
            logForDebugging("Human input refused while the agent turn is running")
            return False
        if text is None or text.strip().lower() in EXIT_COMMANDS:
            logForDebugging("Human ended the session")
            self.state.end()
            return False
        content = text.strip()
        if not content:
            return False

        turn = self.state.add_turn("user", content)
        self.state.awaiting_user_input = False
        self._inbox.put_nowait(turn)
        return True

    async def _ask_human(self) -> str | None:
        try:
            return await asyncio.to_thread(self._read_input)
        except EOFError:
            return None

    async def _handle_event(self, event: AgentEvent) -> None:
        if isinstance(event, AssistantMessage):
            if event.text:
                self.state.add_turn("agent", event.text)
                self._renderer.agent(event.text)
            if event.tool_invocations:
                results = [await self._dispatch(invocation) for invocation in event.tool_invocations]
                await self._inbox.put(ToolResultBatch(results=results))
        elif isinstance(event, ToolResultMessage):
            for result in event.results:
                self._renderer.tool_result(result)
        elif isinstance(event, SessionResult):
            if event.subtype == "error_max_turns":
                self._renderer.notice(
                    f"The agent stopped after {event.num_turns} steps without finishing. "
                    "Send a follow-up to continue."
                )
            self.state.turn_complete()

    async def _dispatch(self, invocation: ToolInvocation) -> ToolResult:
        self._renderer.tool_use(invocation)
        decision = self._policy.evaluate(invocation.name, invocation.arguments)
        if not decision.allowed:
            logEvent("policy_blocked", {"tool": invocation.name, "id": invocation.id, "reason": decision.reason})
            return ToolResult.blocked(invocation.id, decision.reason)
        with self._renderer.working(f"Running {invocation.name}..."):
            return await self._backend.execute(invocation)

    async def _release(self, events: AsyncIterator[AgentEvent]) -> None:
        try:
            await events.aclose()
        except Exception as e:
            logError(ErrorIds.AGENT_STREAM_FAILED, f"Error closing agent stream: {e}")
        try:
            await self._supervisor.close()
        except Exception as e:
            logError(ErrorIds.BROWSER_SHUTDOWN_FAILED, f"Error closing browser: {e}", exc_info=True)
