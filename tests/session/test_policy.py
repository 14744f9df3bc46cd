"""Tests for the action policy gate."""

import pytest
from pydantic import ValidationError

from vibe_browse.session.policy import (
    MUTATING_TOOLS,
    SCRIPT_EXTENSIONS,
    ActionPolicy,
    PolicyDecision,
    is_script_path,
)

ROOT = "/work/agent"
SCRIPTS = "/work/agent/custom_scripts"


@pytest.fixture
def policy() -> ActionPolicy:
    return ActionPolicy(ROOT, SCRIPTS)


class TestIsScriptPath:
    @pytest.mark.parametrize("path", ["a.py", "dir/b.JS", "c.Ts", "/tmp/d.sh"])
    def test_script_extensions(self, path: str) -> None:
        assert is_script_path(path) is True

    @pytest.mark.parametrize("path", ["notes.txt", "data.json", "Makefile", "script.py.bak", ""])
    def test_non_scripts(self, path: str) -> None:
        assert is_script_path(path) is False


class TestActionPolicy:
    @pytest.mark.parametrize("tool", sorted(MUTATING_TOOLS))
    @pytest.mark.parametrize("extension", sorted(SCRIPT_EXTENSIONS))
    def test_script_outside_scripts_dir_blocked(self, policy: ActionPolicy, tool: str, extension: str) -> None:
        decision = policy.evaluate(tool, {"file_path": f"tool{extension}"})
        assert decision.verdict == "block"
        assert f"{SCRIPTS}/tool{extension}" in decision.reason

    @pytest.mark.parametrize("tool", sorted(MUTATING_TOOLS))
    def test_script_inside_scripts_dir_allowed(self, policy: ActionPolicy, tool: str) -> None:
        assert policy.evaluate(tool, {"file_path": "custom_scripts/scrape.py"}).allowed
        assert policy.evaluate(tool, {"file_path": f"{SCRIPTS}/nested/run.sh"}).allowed

    @pytest.mark.parametrize("path", ["notes.md", "/etc/hosts", "../outside.txt", "custom_scripts/readme.txt"])
    def test_non_script_mutations_always_allowed(self, policy: ActionPolicy, path: str) -> None:
        for tool in MUTATING_TOOLS:
            assert policy.evaluate(tool, {"file_path": path}).allowed

    def test_non_mutating_tools_allowed(self, policy: ActionPolicy) -> None:
        assert policy.evaluate("read_file", {"file_path": "elsewhere.py"}).allowed
        assert policy.evaluate("run_script", {"file_path": "elsewhere.py"}).allowed
        assert policy.evaluate("list_files", {"pattern": "*.py"}).allowed
        assert policy.evaluate("navigate", {"url": "https://example.com/app.js"}).allowed

    def test_case_insensitive_extension(self, policy: ActionPolicy) -> None:
        decision = policy.evaluate("write_file", {"file_path": "Scraper.PY"})
        assert decision.verdict == "block"
        assert f"{SCRIPTS}/Scraper.PY" in decision.reason

    def test_dotdot_escape_blocked(self, policy: ActionPolicy) -> None:
        decision = policy.evaluate("write_file", {"file_path": "custom_scripts/../evil.py"})
        assert decision.verdict == "block"
        assert f"{SCRIPTS}/evil.py" in decision.reason

    def test_sibling_prefix_blocked(self, policy: ActionPolicy) -> None:
        decision = policy.evaluate("edit_file", {"file_path": "custom_scripts_old/run.sh"})
        assert decision.verdict == "block"

    def test_absolute_path_outside_blocked(self, policy: ActionPolicy) -> None:
        decision = policy.evaluate("write_file", {"file_path": "/tmp/payload.sh"})
        assert decision.verdict == "block"
        assert decision.reason.endswith(f"{SCRIPTS}/payload.sh")

    @pytest.mark.parametrize("arguments", [{}, {"file_path": ""}, {"file_path": None}])
    def test_missing_path_allowed(self, policy: ActionPolicy, arguments: dict) -> None:
        assert policy.evaluate("write_file", arguments).allowed

    def test_reason_names_extensions(self, policy: ActionPolicy) -> None:
        decision = policy.evaluate("write_file", {"file_path": "x.ts"})
        assert decision.reason.startswith("Script files (.js, .py, .sh, .ts) must be written to the custom_scripts directory")

    def test_relative_scripts_dir(self) -> None:
        policy = ActionPolicy(ROOT, "custom_scripts")
        assert policy.scripts_dir == SCRIPTS
        assert policy.evaluate("write_file", {"file_path": "custom_scripts/a.py"}).allowed

    def test_evaluate_is_repeatable(self, policy: ActionPolicy) -> None:
        first = policy.evaluate("write_file", {"file_path": "a.py"})
        second = policy.evaluate("write_file", {"file_path": "a.py"})
        assert first == second


class TestPolicyDecision:
    def test_allow(self) -> None:
        decision = PolicyDecision.allow()
        assert decision.allowed
        assert decision.reason == ""

    def test_block(self) -> None:
        decision = PolicyDecision.block("nope")
        assert not decision.allowed
        assert decision.reason == "nope"

    def test_frozen(self) -> None:
        decision = PolicyDecision.allow()
        with pytest.raises(ValidationError):
            decision.verdict = "block"  # type: ignore[misc]

    def test_invalid_verdict(self) -> None:
        with pytest.raises(ValidationError):
            PolicyDecision(verdict="maybe")  # type: ignore[arg-type]
