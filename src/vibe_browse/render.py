"""Console rendering for the conversation transcript."""

from rich.console import Console
from rich.panel import Panel
from rich.status import Status
from rich.text import Text

from vibe_browse.models.tools import ToolInvocation, ToolResult

DISPLAY_CAP = 600

# Argument shown next to each tool name, in order of preference.
_KEY_ARGUMENTS = ("url", "action", "steps", "instruction", "query", "file_path", "pattern")


def truncate(text: str, cap: int = DISPLAY_CAP) -> str:
    """Elide ``text`` beyond ``cap`` characters with a trailing ellipsis."""
    if len(text) <= cap:
        return text
    return text[:cap] + "…"


def key_argument(invocation: ToolInvocation) -> str | None:
    for name in _KEY_ARGUMENTS:
        value = invocation.arguments.get(name)
        if value:
            return str(value)
    return None


class ConsoleRenderer:
    """Writes the transcript to a rich Console."""

    def __init__(self, console: Console | None = None, display_cap: int = DISPLAY_CAP) -> None:
        self.console = console or Console()
        self._display_cap = display_cap

    def banner(self, initial_prompt: str) -> None:
        self.console.print(
            Panel.fit(
                Text.assemble(("vibe-browse", "bold cyan"), "\n", ("Task: ", "bold green"), initial_prompt),
                title="Welcome",
            )
        )

    def prompt(self) -> str:
        """Read one line from the human. Raises EOFError at end of input."""
        return self.console.input("\n[bold yellow]You:[/bold yellow] ")

    def agent(self, text: str) -> None:
        self.console.print(Text.assemble("\n", ("Agent: ", "bold cyan"), text))

    def tool_use(self, invocation: ToolInvocation) -> None:
        line = Text.assemble(("🔧 ", ""), (invocation.name, "bold magenta"))
        argument = key_argument(invocation)
        if argument:
            line.append(f": {truncate(argument, 120)}", style="dim")
        self.console.print(line)

    def tool_result(self, result: ToolResult) -> None:
        content = truncate(result.content, self._display_cap)
        if result.is_error:
            self.console.print(Text.assemble(("❌ Tool error: ", "bold red"), content))
        else:
            self.console.print(Text.assemble(("✓ ", "green"), (content, "dim")))

    def notice(self, message: str) -> None:
        self.console.print(Text(message, style="yellow"))

    def error(self, message: str) -> None:
        self.console.print(Text.assemble(("Error: ", "bold red"), message))

    def working(self, message: str = "Thinking...") -> Status:
        return self.console.status(message)

    def goodbye(self) -> None:
        self.console.print("\n[bold cyan]Goodbye![/bold cyan]")
