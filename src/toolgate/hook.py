"""
PreToolUse hook adapter.

Reads one JSON document from stdin, inspects it, and writes the host's
native ``hookSpecificOutput`` JSON to stdout:

    {
      "hookSpecificOutput": {
        "hookEventName": "PreToolUse",
        "permissionDecision": "allow" | "deny" | "ask",
        "permissionDecisionReason": "...",   # deny/ask
        "additionalContext": "..."           # deny, when present
      }
    }

Exit codes: 0 = allow/ask, 2 = deny. Input that cannot be read or parsed is
answered with a deny (fail closed).
"""

import json
import logging
from typing import IO, Any, TextIO

from toolgate.errors import HookInputError
from toolgate.policy import CompiledPolicy, inspect
from toolgate.schema import ToolInvocation
from toolgate.verdict import Verdict

logger = logging.getLogger(__name__)

HOOK_EVENT_NAME = "PreToolUse"
EXIT_ALLOW = 0
EXIT_DENY = 2

FAIL_CLOSED_CONTEXT = "Toolgate encountered an error and is operating in fail-closed mode."


def read_invocation(payload: str | bytes) -> ToolInvocation:
    """
    Decode a hook payload.

    Raw bytes are accepted so that undecodable input reaches the JSON
    parser and is rejected there instead of while reading the stream.

    Raises:
        HookInputError: If the payload is not UTF-8 JSON or lacks a tool name
    """
    try:
        return ToolInvocation.model_validate_json(payload)
    except ValueError as e:  # pydantic ValidationError included
        raise HookInputError(underlying_error=str(e)) from e


def render_verdict(verdict: Verdict) -> dict[str, Any]:
    """Map a verdict onto the host's hookSpecificOutput schema."""
    output: dict[str, Any] = {
        "hookEventName": HOOK_EVENT_NAME,
        "permissionDecision": verdict.permission_decision,
    }
    if not verdict.is_allow:
        output["permissionDecisionReason"] = verdict.reason
    if verdict.is_deny and verdict.context:
        output["additionalContext"] = verdict.context
    return {"hookSpecificOutput": output}


def render_error(message: str) -> dict[str, Any]:
    """Deny output used when the payload itself is unusable."""
    return render_verdict(Verdict.deny(message, context=FAIL_CLOSED_CONTEXT))


def exit_code_for(verdict: Verdict) -> int:
    return EXIT_DENY if verdict.is_deny else EXIT_ALLOW


def run_hook(policy: CompiledPolicy, stdin: IO[Any], stdout: TextIO) -> int:
    """
    Handle one hook invocation.

    Args:
        policy: The compiled policy
        stdin: Text or binary stream carrying the JSON payload
        stdout: Stream receiving the JSON response

    Returns:
        Process exit code
    """
    try:
        payload = stdin.read()
    except (OSError, ValueError) as e:
        logger.error("Failed to read stdin: %s", e)
        _write(stdout, render_error(f"Failed to read stdin: {e}"))
        return EXIT_DENY

    try:
        invocation = read_invocation(payload)
    except HookInputError as e:
        logger.error("%s", e.message)
        _write(stdout, render_error(e.message))
        return EXIT_DENY

    verdict, latency_us = inspect(invocation, policy)
    logger.info(
        "%s: %s (%dus)",
        invocation.tool_name,
        verdict.permission_decision,
        latency_us,
    )
    _write(stdout, render_verdict(verdict))
    return exit_code_for(verdict)


def _write(stdout: TextIO, output: dict[str, Any]) -> None:
    stdout.write(json.dumps(output))
    stdout.write("\n")
    stdout.flush()
