"""
Security tests for the fail-closed guarantee.

These tests verify that no fault inside the engine lets a call through
when fail_closed is on, and that each entry point keeps that promise.

Fault sources tested:
- A detector raising mid-pipeline
- A gate raising before any detector
- Faults reached through the hook adapter
"""

import io
import json
from dataclasses import replace

import pytest

from toolgate.hook import run_hook
from toolgate.policy import CompiledPolicy, inspect
from toolgate.policy import engine as engine_module
from toolgate.schema import ToolInvocation


class _BrokenScanner:
    def first_match(self, texts):
        raise ValueError("scanner state corrupted")


@pytest.fixture
def broken_policy(default_policy: CompiledPolicy) -> CompiledPolicy:
    """Default policy with a secret scanner that always faults."""
    return replace(default_policy, secrets=_BrokenScanner())


class TestFailClosed:
    """Faults become denials."""

    @pytest.mark.parametrize(
        "tool_name,tool_input",
        [
            ("Bash", {"command": "ls"}),
            ("Write", {"file_path": "a.txt", "content": "hello"}),
            ("Task", {"prompt": "summarize"}),
        ],
    )
    def test_detector_fault_denies(
        self, broken_policy: CompiledPolicy, tool_name: str, tool_input: dict
    ) -> None:
        verdict, _ = inspect(ToolInvocation(tool_name=tool_name, tool_input=tool_input), broken_policy)
        assert verdict.is_deny
        assert verdict.block_reason.code == "internal_error"

    def test_fault_details_not_leaked(self, broken_policy: CompiledPolicy) -> None:
        """The agent sees a fixed message, not exception text."""
        verdict, _ = inspect(
            ToolInvocation(tool_name="Bash", tool_input={"command": "ls"}), broken_policy
        )
        assert "corrupted" not in verdict.reason
        assert verdict.reason == "Internal error: Internal error - fail closed"

    def test_fault_after_passing_stages(
        self, default_policy: CompiledPolicy, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """A fault in a late stage still denies."""

        def exploding_network_stage(parsed, policy):
            raise IndexError("late failure")

        stages = engine_module.STAGES[:-1] + (exploding_network_stage,)
        monkeypatch.setattr(engine_module, "STAGES", stages)

        verdict, _ = inspect(
            ToolInvocation(tool_name="WebFetch", tool_input={"url": "https://example.com"}),
            default_policy,
        )
        assert verdict.is_deny

    def test_hook_denies_on_fault(self, broken_policy: CompiledPolicy) -> None:
        stdout = io.StringIO()
        payload = json.dumps({"tool_name": "Bash", "tool_input": {"command": "ls"}})

        code = run_hook(broken_policy, io.StringIO(payload), stdout)

        assert code == 2
        output = json.loads(stdout.getvalue())["hookSpecificOutput"]
        assert output["permissionDecision"] == "deny"
        assert "fail-closed" in output["additionalContext"]
