"""Action policy gate for file mutations.

Deterministic path check that keeps agent-written scripts inside the
custom_scripts directory. It runs in the controller before any tool is
dispatched, so the agent cannot bypass it. The check is lexical: paths are
normalised as strings and the filesystem is never touched.
"""

import os
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

from vibe_browse.core.logging import logForDebugging

MUTATING_TOOLS = frozenset({"write_file", "edit_file", "multi_edit_file"})

SCRIPT_EXTENSIONS = frozenset({".js", ".ts", ".py", ".sh"})


class PolicyDecision(BaseModel):
    """Verdict for one tool invocation.

    Attributes:
        verdict: "allow" or "block".
        reason: Actionable explanation for a block, empty otherwise.
    """

    model_config = ConfigDict(frozen=True)

    verdict: Literal["allow", "block"]
    reason: str = ""

    @property
    def allowed(self) -> bool:
        return self.verdict == "allow"

    @classmethod
    def allow(cls) -> "PolicyDecision":
        return cls(verdict="allow")

    @classmethod
    def block(cls, reason: str) -> "PolicyDecision":
        return cls(verdict="block", reason=reason)


def is_script_path(file_path: str) -> bool:
    """Check whether a path names a script file by its extension.

    Args:
        file_path: The target path as given by the agent.

    Returns:
        True if the extension is one of SCRIPT_EXTENSIONS (any case).
    """
    return os.path.splitext(file_path)[1].lower() in SCRIPT_EXTENSIONS


class ActionPolicy:
    """Policy gate evaluated before every tool dispatch."""

    def __init__(self, root: Path | str, scripts_dir: Path | str) -> None:
        """Initialize the policy.

        Args:
            root: Working root that relative paths resolve against.
            scripts_dir: Directory script files must be written to. A relative
                value is taken relative to ``root``.
        """
        self._root = os.path.normpath(str(root))
        self._scripts_dir = os.path.normpath(os.path.join(self._root, str(scripts_dir)))

    @property
    def scripts_dir(self) -> str:
        return self._scripts_dir

    def resolve(self, file_path: str) -> str:
        return os.path.normpath(os.path.join(self._root, os.path.expanduser(file_path)))

    def evaluate(self, tool_name: str, arguments: dict[str, Any]) -> PolicyDecision:
        """Decide whether an invocation may run.

        Only file mutations of script files are ever blocked: the target must
        resolve inside the scripts directory.

        Args:
            tool_name: Name of the invoked tool.
            arguments: The invocation's decoded arguments.

        Returns:
            The PolicyDecision.
        """
        if tool_name not in MUTATING_TOOLS:
            return PolicyDecision.allow()

        file_path = arguments.get("file_path")
        if not isinstance(file_path, str) or not file_path or not is_script_path(file_path):
            return PolicyDecision.allow()

        target = self.resolve(file_path)
        if target.startswith(self._scripts_dir + os.sep):
            return PolicyDecision.allow()

        basename = os.path.basename(target)
        logForDebugging(
            f"Policy check: {tool_name} {file_path!r} -> BLOCKED",
            extra={"target": target, "scripts_dir": self._scripts_dir},
        )
        return PolicyDecision.block(
            f"Script files ({', '.join(sorted(SCRIPT_EXTENSIONS))}) must be written to the "
            f"custom_scripts directory. Please use the path: {os.path.join(self._scripts_dir, basename)}"
        )
