"""Workspace file tools.

Relative paths resolve against the working root. These tools do no policy
checking of their own: the session controller runs every write/edit through
the ActionPolicy before dispatching it here. Listing and running scripts are
confined to the working root.
"""

import asyncio
import shutil
import sys
from pathlib import Path

from agents import FunctionTool, function_tool
from pydantic import BaseModel

from vibe_browse.core.errors import ToolExecutionError
from vibe_browse.core.logging import ErrorIds, logError, logEvent

READ_LIMIT = 20000
LIST_LIMIT = 500
RUN_OUTPUT_LIMIT = 10000
RUN_TIMEOUT = 120.0

# Interpreter per script extension; the script path is appended.
SCRIPT_RUNNERS: dict[str, list[str]] = {
    ".py": [sys.executable],
    ".sh": ["bash"],
    ".js": ["node"],
    ".ts": ["npx", "--yes", "tsx"],
}


class FileEdit(BaseModel):
    """One string replacement within a file."""

    old_string: str
    new_string: str
    replace_all: bool | None = None


def _apply_edit(text: str, edit: FileEdit, file_path: str) -> str:
    count = text.count(edit.old_string) if edit.old_string else 0
    if count == 0:
        raise ToolExecutionError(f"String to replace not found in {file_path}: {edit.old_string!r}")
    if count > 1 and not edit.replace_all:
        raise ToolExecutionError(
            f"Found {count} matches of {edit.old_string!r} in {file_path}. "
            "Provide more context to make it unique or set replace_all."
        )
    if edit.replace_all:
        return text.replace(edit.old_string, edit.new_string)
    return text.replace(edit.old_string, edit.new_string, 1)


class FileToolset:
    """File operations confined to paths computed from the working root."""

    def __init__(self, root: Path | str) -> None:
        self._root = Path(root)

    def resolve(self, file_path: str) -> Path:
        if not file_path:
            raise ToolExecutionError("file_path must not be empty.")
        path = Path(file_path).expanduser()
        return path if path.is_absolute() else self._root / path

    def read(self, file_path: str) -> str:
        path = self.resolve(file_path)
        if not path.is_file():
            raise ToolExecutionError(f"File not found: {path}")
        text = path.read_text(encoding="utf-8", errors="replace")
        if len(text) > READ_LIMIT:
            return text[:READ_LIMIT] + f"\n… [truncated, {len(text)} characters total]"
        return text

    def write(self, file_path: str, content: str) -> str:
        path = self.resolve(file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        logEvent("file_written", {"path": str(path), "bytes": len(content.encode("utf-8"))})
        return f"Wrote {len(content)} characters to {path}"

    def edit(self, file_path: str, edits: list[FileEdit]) -> str:
        """Apply ``edits`` in order; the file is written only if all succeed."""
        path = self.resolve(file_path)
        if not path.is_file():
            raise ToolExecutionError(f"File not found: {path}")
        text = path.read_text(encoding="utf-8")
        for edit in edits:
            text = _apply_edit(text, edit, str(path))
        path.write_text(text, encoding="utf-8")
        logEvent("file_edited", {"path": str(path), "edits": len(edits)})
        return f"Applied {len(edits)} edit(s) to {path}"

    def confine(self, path: Path) -> Path:
        """Resolve ``path`` and require it to lie within the working root."""
        resolved = path.resolve()
        if not resolved.is_relative_to(self._root.resolve()):
            raise ToolExecutionError(f"{path} is outside the working directory {self._root}.")
        return resolved

    def list_files(self, pattern: str = "*", directory: str = "") -> str:
        """List workspace entries matching a glob pattern.

        Args:
            pattern: Glob pattern relative to ``directory``; ``**`` recurses.
            directory: Directory to search, defaults to the working root.

        Returns:
            One path per line, relative to the working root. Directories end with "/".
        """
        base = self.confine(self.resolve(directory) if directory else self._root)
        if not base.is_dir():
            raise ToolExecutionError(f"Not a directory: {base}")
        root = self._root.resolve()

        entries = []
        for match in sorted(base.glob(pattern or "*")):
            resolved = match.resolve()
            if not resolved.is_relative_to(root):
                continue
            relative = resolved.relative_to(root).as_posix()
            entries.append(f"{relative}/" if match.is_dir() else relative)

        if not entries:
            return f"No files match {pattern!r} in {base}"
        if len(entries) > LIST_LIMIT:
            return "\n".join(entries[:LIST_LIMIT]) + f"\n… [{len(entries) - LIST_LIMIT} more]"
        return "\n".join(entries)

    async def run_script(self, file_path: str, args: list[str] | None = None, timeout: float = RUN_TIMEOUT) -> str:
        """Run a workspace script with the interpreter for its extension.

        The working directory is the working root. A non-zero exit status or
        a timeout raises ToolExecutionError carrying the captured output.
        """
        path = self.confine(self.resolve(file_path))
        if not path.is_file():
            raise ToolExecutionError(f"File not found: {path}")
        runner = SCRIPT_RUNNERS.get(path.suffix.lower())
        if runner is None:
            raise ToolExecutionError(
                f"Don't know how to run {path.name}. Supported extensions: {', '.join(sorted(SCRIPT_RUNNERS))}"
            )
        if shutil.which(runner[0]) is None:
            raise ToolExecutionError(f"{runner[0]} is not installed; cannot run {path.name}.")

        command = [*runner, str(path), *(args or [])]
        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                cwd=str(self._root),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
            )
        except OSError as e:
            logError(ErrorIds.FILE_OPERATION_FAILED, f"Could not start {path}: {e}")
            raise ToolExecutionError(f"Could not start {path.name}: {e}") from e

        try:
            stdout, _ = await asyncio.wait_for(process.communicate(), timeout=timeout)
        except asyncio.TimeoutError as e:
            process.kill()
            await process.wait()
            raise ToolExecutionError(f"{path.name} did not finish within {timeout:g} seconds and was killed.") from e

        output = stdout.decode("utf-8", errors="replace")
        if len(output) > RUN_OUTPUT_LIMIT:
            output = output[-RUN_OUTPUT_LIMIT:]
        logEvent("script_run", {"path": str(path), "exit_code": process.returncode})
        if process.returncode != 0:
            raise ToolExecutionError(f"{path.name} exited with code {process.returncode}\n{output}")
        return f"{path.name} exited with code 0\n{output}"


def create_file_tools(files: FileToolset) -> list[FunctionTool]:
    """Create the workspace file tool catalogue."""

    @function_tool(failure_error_function=None)
    def read_file(file_path: str) -> str:
        """Read a text file from the workspace.

        Args:
            file_path: Path of the file, absolute or relative to the working directory.
        """
        return files.read(file_path)

    @function_tool(failure_error_function=None)
    def write_file(file_path: str, content: str) -> str:
        """Create or overwrite a file in the workspace. Script files (.js, .ts, .py, .sh) must go in the custom_scripts directory.

        Args:
            file_path: Path of the file, absolute or relative to the working directory.
            content: Full file content.
        """
        return files.write(file_path, content)

    @function_tool(failure_error_function=None)
    def edit_file(file_path: str, old_string: str, new_string: str, replace_all: bool | None = None) -> str:
        """Replace text in an existing workspace file.

        Args:
            file_path: Path of the file, absolute or relative to the working directory.
            old_string: Exact text to replace; must be unique unless replace_all is set.
            new_string: Replacement text.
            replace_all: Replace every occurrence instead of exactly one.
        """
        return files.edit(file_path, [FileEdit(old_string=old_string, new_string=new_string, replace_all=replace_all)])

    @function_tool(failure_error_function=None)
    def multi_edit_file(file_path: str, edits: list[FileEdit]) -> str:
        """Apply several replacements to one workspace file, in order. Nothing is written unless every edit applies.

        Args:
            file_path: Path of the file, absolute or relative to the working directory.
            edits: The replacements to apply.
        """
        return files.edit(file_path, edits)

    @function_tool(failure_error_function=None)
    def list_files(pattern: str | None = None, directory: str | None = None) -> str:
        """List files in the workspace matching a glob pattern (e.g., '*.csv', 'custom_scripts/**/*.py').

        Args:
            pattern: Glob pattern; '**' searches subdirectories. Defaults to '*'.
            directory: Directory to search, relative to the working directory. Defaults to the working directory.
        """
        return files.list_files(pattern or "*", directory or "")

    @function_tool(failure_error_function=None)
    async def run_script(file_path: str, args: list[str] | None = None, timeout_seconds: int | None = None) -> str:
        """Run a script from the workspace (.py, .sh, .js, .ts) and return its output.

        Args:
            file_path: Path of the script, usually in custom_scripts.
            args: Command-line arguments passed to the script.
            timeout_seconds: Kill the script after this many seconds. Defaults to 120.
        """
        return await files.run_script(file_path, args, float(timeout_seconds or RUN_TIMEOUT))

    return [read_file, write_file, edit_file, multi_edit_file, list_files, run_script]
